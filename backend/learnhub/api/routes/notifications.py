"""Notification Routes — teacher sends, every user reads their own inbox.

Invariants:
    - /send, /send-multiple and /cleanup require the teacher role
    - Inbox endpoints only ever touch the caller's recipient rows
    - Static paths (/stats, /read-all) declared before /{notification_id}
"""

from fastapi import APIRouter, Depends, Query, status

from learnhub.api.deps import get_current_user, get_dispatcher, require_role
from learnhub.core.domain_types import RoleName
from learnhub.models.user import User
from learnhub.schemas.notification import (
    NotificationList, NotificationResponse, NotificationStats, NotificationView,
    SendToManyRequest, SendToUserRequest,
)
from learnhub.services.notification_dispatcher import NotificationDispatcher

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])

require_teacher = require_role(RoleName.TEACHER.value)


@router.post("/send", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def send_notification(
    body: SendToUserRequest,
    _: User = Depends(require_teacher),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    payload = body.model_dump(exclude={"user_id", "title", "body"})
    return await dispatcher.create_and_send(body.user_id, body.title, body.body, **payload)


@router.post(
    "/send-multiple", response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_to_multiple(
    body: SendToManyRequest,
    _: User = Depends(require_teacher),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    payload = body.model_dump(exclude={"user_ids", "title", "body"})
    return await dispatcher.create_and_send_to_many(
        body.user_ids, body.title, body.body, **payload,
    )


@router.get("", response_model=NotificationList)
async def list_my_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await dispatcher.list_for_user(user.id, page, limit)


@router.get("/stats", response_model=NotificationStats)
async def notification_stats(
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await dispatcher.stats(user.id)


@router.patch("/read-all")
async def mark_all_read(
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    updated = await dispatcher.mark_all_as_read(user.id)
    return {"updated_count": updated}


@router.patch("/{notification_id}/read", response_model=NotificationView)
async def mark_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await dispatcher.mark_as_read(user.id, notification_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    await dispatcher.delete_for_user(user.id, notification_id)


@router.post("/cleanup")
async def cleanup_notifications(
    _: User = Depends(require_teacher),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await dispatcher.cleanup_expired()
