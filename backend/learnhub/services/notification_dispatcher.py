"""Notification Dispatcher — persist, fan out to recipients, push, track read state.

Invariants:
    - Recipient ids de-duplicated (order-preserving); any unknown id fails the whole send (404)
    - Notification + all recipient rows committed BEFORE the push transport is called
    - Push outcome only changes Notification.status / fcm_message_id / retry_count:
        no deliverable tokens -> delivered (transport not called)
        transport returned    -> delivered, first message id stored, unregistered tokens pruned
        transport raised      -> failed, retry_count += 1
        push disabled         -> stays sent
    - Push failures are logged, never raised to the caller
    - send_quietly never raises: a failed send rolls back and clears the session,
      so callers reload whatever they return afterwards
    - Read state is per recipient row; mark_as_read never overwrites an existing read_at

Design Decisions:
    - One Notification row shared by N recipients: broadcast cost is N small rows,
      not N copies of title/body/data
    - PushSender injected (None when push is disabled): tests pass a fake, services
      never import firebase_admin
"""

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.clock import utc_now
from learnhub.core.domain_types import NotificationStatus, NotificationType
from learnhub.core.errors import (
    LearnHubError, ResourceNotFoundError, ValidationFailedError,
)
from learnhub.core.pagination import page_offset
from learnhub.core.push_rules import (
    build_push_data, dedupe_ids, filter_deliverable_tokens, tokens_to_prune,
)
from learnhub.core.service_protocols import PushSender
from learnhub.models.notification import Notification, NotificationRecipient
from learnhub.models.user import User
from learnhub.services.device_tokens import DeviceTokenService

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Creates notifications for users and delivers them over push."""

    def __init__(
        self,
        db: AsyncSession,
        push_sender: PushSender | None = None,
        ttl_days: int = 30,
    ):
        self.db = db
        self.push_sender = push_sender
        self.ttl_days = ttl_days

    # ─── Send ───────────────────────────────────────────────────

    async def create_and_send(
        self, user_id: int, title: str, body: str, **payload: Any,
    ) -> dict:
        return await self.create_and_send_to_many([user_id], title, body, **payload)

    async def create_and_send_to_many(
        self,
        user_ids: list[int],
        title: str,
        body: str,
        type: NotificationType | str = NotificationType.SYSTEM,
        data: dict[str, Any] | None = None,
        image_url: str | None = None,
        action_url: str | None = None,
        scheduled_at: datetime | None = None,
    ) -> dict:
        recipients = dedupe_ids(user_ids)
        if not recipients:
            raise ValidationFailedError("At least one recipient is required", "user_ids")
        await self._ensure_users_exist(recipients)

        now = utc_now()
        notification = Notification(
            type=NotificationType(type).value,
            title=title,
            body=body,
            data=data,
            image_url=image_url,
            action_url=action_url,
            scheduled_at=scheduled_at,
            status=NotificationStatus.SENT.value,
            retry_count=0,
            expires_at=now + timedelta(days=self.ttl_days),
        )
        self.db.add(notification)
        await self.db.flush()
        self.db.add_all([
            NotificationRecipient(user_id=uid, notification_id=notification.id)
            for uid in recipients
        ])
        await self.db.commit()
        logger.info(
            "Notification created",
            extra={"notification_id": notification.id, "recipient_count": len(recipients)},
        )

        await self._push(notification, recipients)
        return _notification_summary(notification, len(recipients))

    async def send_quietly(
        self, user_ids: list[int], title: str, body: str, **payload: Any,
    ) -> dict | None:
        """Send a notification that rides along with work the caller already committed.

        Any failure is logged and swallowed. The session is rolled back and
        cleared, so every instance the caller still holds is detached.
        """
        try:
            return await self.create_and_send_to_many(user_ids, title, body, **payload)
        except (LearnHubError, SQLAlchemyError) as e:
            await self.db.rollback()
            self.db.expunge_all()
            logger.warning(
                f"Notification '{title}' not sent: {e}",
                extra={"recipient_count": len(user_ids)},
            )
            return None

    async def _ensure_users_exist(self, user_ids: list[int]) -> None:
        result = await self.db.execute(select(User.id).where(User.id.in_(user_ids)))
        found = set(result.scalars().all())
        missing = [uid for uid in user_ids if uid not in found]
        if missing:
            raise ResourceNotFoundError("User", ", ".join(str(uid) for uid in missing))

    async def _push(self, notification: Notification, user_ids: list[int]) -> None:
        if self.push_sender is None:
            return

        devices = DeviceTokenService(self.db)
        tokens = filter_deliverable_tokens(await devices.tokens_for_users(user_ids))
        if not tokens:
            notification.status = NotificationStatus.DELIVERED.value
            await self.db.commit()
            return

        try:
            result = await self.push_sender.send_to_tokens(
                tokens,
                notification.title,
                notification.body,
                data=build_push_data(notification.data),
                image_url=notification.image_url,
            )
        except Exception as e:
            logger.error(
                f"Push delivery failed: {e}",
                extra={"notification_id": notification.id, "token_count": len(tokens)},
            )
            notification.status = NotificationStatus.FAILED.value
            notification.retry_count += 1
            await self.db.commit()
            return

        notification.status = NotificationStatus.DELIVERED.value
        notification.fcm_message_id = result.first_message_id
        pruned = await devices.remove_tokens(tokens_to_prune(result.responses))
        await self.db.commit()
        logger.info(
            f"Push sent: {result.success_count} ok, {result.failure_count} failed, "
            f"{pruned} token(s) pruned",
            extra={"notification_id": notification.id, "token_count": len(tokens)},
        )

    # ─── Read side ──────────────────────────────────────────────

    async def list_for_user(self, user_id: int, page: int = 1, limit: int = 20) -> dict:
        result = await self.db.execute(
            select(NotificationRecipient)
            .join(NotificationRecipient.notification)
            .where(NotificationRecipient.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit),
        )
        rows = result.scalars().all()
        total = await self._count(NotificationRecipient.user_id == user_id)
        unread = await self._count(
            NotificationRecipient.user_id == user_id,
            NotificationRecipient.is_read.is_(False),
        )
        return {
            "notifications": [_recipient_view(r) for r in rows],
            "total": total,
            "unread_count": unread,
            "page": page,
            "limit": limit,
        }

    async def stats(self, user_id: int) -> dict:
        total = await self._count(NotificationRecipient.user_id == user_id)
        unread = await self._count(
            NotificationRecipient.user_id == user_id,
            NotificationRecipient.is_read.is_(False),
        )
        result = await self.db.execute(
            select(Notification.type, func.count(NotificationRecipient.id))
            .join(NotificationRecipient.notification)
            .where(NotificationRecipient.user_id == user_id)
            .group_by(Notification.type),
        )
        return {
            "total": total,
            "unread": unread,
            "read": total - unread,
            "by_type": {type_: count for type_, count in result.all()},
        }

    async def _count(self, *conditions) -> int:
        result = await self.db.execute(
            select(func.count(NotificationRecipient.id)).where(*conditions),
        )
        return result.scalar_one()

    # ─── Read state ─────────────────────────────────────────────

    async def mark_as_read(self, user_id: int, notification_id: int) -> dict:
        recipient = await self._get_recipient(user_id, notification_id)
        if not recipient.is_read:
            recipient.is_read = True
            recipient.read_at = utc_now()
            await self.db.commit()
        return _recipient_view(recipient)

    async def mark_all_as_read(self, user_id: int) -> int:
        now = utc_now()
        result = await self.db.execute(
            update(NotificationRecipient)
            .where(
                NotificationRecipient.user_id == user_id,
                NotificationRecipient.is_read.is_(False),
            )
            .values(is_read=True, read_at=now, updated_at=now),
        )
        await self.db.commit()
        return result.rowcount or 0

    async def delete_for_user(self, user_id: int, notification_id: int) -> None:
        """Remove the caller's copy only; other recipients keep theirs."""
        recipient = await self._get_recipient(user_id, notification_id)
        await self.db.delete(recipient)
        await self.db.commit()

    async def _get_recipient(self, user_id: int, notification_id: int) -> NotificationRecipient:
        result = await self.db.execute(
            select(NotificationRecipient).where(
                NotificationRecipient.user_id == user_id,
                NotificationRecipient.notification_id == notification_id,
            ),
        )
        recipient = result.scalar_one_or_none()
        if recipient is None:
            raise ResourceNotFoundError("Notification", notification_id)
        return recipient

    # ─── Maintenance ────────────────────────────────────────────

    async def cleanup_expired(self) -> dict:
        expired = select(Notification.id).where(Notification.expires_at < utc_now())
        await self.db.execute(
            delete(NotificationRecipient)
            .where(NotificationRecipient.notification_id.in_(expired))
            .execution_options(synchronize_session=False),
        )
        result = await self.db.execute(
            delete(Notification)
            .where(Notification.expires_at < utc_now())
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        deleted = result.rowcount or 0
        logger.info(
            f"Deleted {deleted} expired notification(s)",
            extra={"deleted_count": deleted},
        )
        return {"deleted_count": deleted}


def _notification_summary(notification: Notification, recipient_count: int) -> dict:
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "body": notification.body,
        "status": notification.status,
        "data": notification.data,
        "image_url": notification.image_url,
        "action_url": notification.action_url,
        "fcm_message_id": notification.fcm_message_id,
        "retry_count": notification.retry_count,
        "recipient_count": recipient_count,
        "created_at": notification.created_at,
        "expires_at": notification.expires_at,
    }


def _recipient_view(recipient: NotificationRecipient) -> dict:
    n = recipient.notification
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "body": n.body,
        "status": n.status,
        "data": n.data,
        "image_url": n.image_url,
        "action_url": n.action_url,
        "created_at": n.created_at,
        "is_read": recipient.is_read,
        "read_at": recipient.read_at,
    }
