"""Notification Schemas — send requests and per-recipient views.

Invariants:
    - NotificationView merges the shared notification with the caller's read state
    - SendToManyRequest.user_ids has at least one id
    - type defaults to "system"
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from learnhub.core.domain_types import NotificationType


class NotificationPayload(BaseModel):
    """Content shared by every recipient of one notification."""
    type: NotificationType = NotificationType.SYSTEM
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1, max_length=5000)
    data: dict[str, Any] | None = None
    image_url: str | None = Field(None, max_length=1024)
    action_url: str | None = Field(None, max_length=1024)
    scheduled_at: datetime | None = None


class SendToUserRequest(NotificationPayload):
    user_id: int = Field(ge=1)


class SendToManyRequest(NotificationPayload):
    user_ids: list[int] = Field(min_length=1)


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    body: str
    status: str
    data: dict[str, Any] | None = None
    image_url: str | None = None
    action_url: str | None = None
    fcm_message_id: str | None = None
    retry_count: int = 0
    recipient_count: int
    created_at: datetime
    expires_at: datetime | None = None


class NotificationView(BaseModel):
    id: int
    type: str
    title: str
    body: str
    status: str
    data: dict[str, Any] | None = None
    image_url: str | None = None
    action_url: str | None = None
    created_at: datetime
    is_read: bool
    read_at: datetime | None = None


class NotificationList(BaseModel):
    notifications: list[NotificationView]
    total: int
    unread_count: int
    page: int
    limit: int


class NotificationStats(BaseModel):
    total: int
    unread: int
    read: int
    by_type: dict[str, int]
