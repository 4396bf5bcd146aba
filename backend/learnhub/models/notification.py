"""Notification ORM — one message fanned out to N recipients.

Invariants:
    - A Notification row is shared; per-user read state lives in NotificationRecipient
    - (user_id, notification_id) is unique: a user receives a notification at most once
    - status tracks push delivery of the whole batch (sent -> delivered | failed)
    - expires_at set at creation (now + notification_ttl_days); cleanup deletes past rows

Design Decisions:
    - Notification.recipients is lazy="raise": a broadcast may have thousands of
      recipients, so any implicit load through the parent is a bug
    - Recipients deleted explicitly before their notification in cleanup:
      SQLite ignores ON DELETE CASCADE unless PRAGMA foreign_keys is on
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.domain_types import NotificationStatus, NotificationType
from learnhub.db.base import Base
from learnhub.db.types import UTCDateTime


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_type_created", "type", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=NotificationType.SYSTEM.value,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=NotificationStatus.SENT.value,
    )
    data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    action_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    fcm_message_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scheduled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    recipients: Mapped[list["NotificationRecipient"]] = relationship(
        "NotificationRecipient", back_populates="notification", lazy="raise",
        passive_deletes=True,
    )


class NotificationRecipient(Base):
    __tablename__ = "notification_recipients"
    __table_args__ = (
        UniqueConstraint("user_id", "notification_id", name="uq_recipient_user_notification"),
        Index("ix_recipients_user_read", "user_id", "is_read"),
        Index("ix_recipients_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    notification_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("notifications.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    notification: Mapped["Notification"] = relationship(
        "Notification", back_populates="recipients", lazy="selectin",
    )
    user: Mapped["User"] = relationship("User", back_populates="notification_receipts")
