"""Lesson Service — lessons inside groups, with one optional video each.

Invariants:
    - Only the lesson's creator may upload, remove or delete (403 otherwise)
    - Videos: MIME video/(mp4|avi|mov|wmv|flv|webm|mkv), at most 100 MB (400 otherwise)
    - Replacing a video deletes the previous object only after the new one is
      stored and committed; a failed upload leaves the lesson untouched
    - Readers must be the creator or a student of the lesson's group (403 otherwise)
    - Group students are notified (lesson_created) on create and on video upload

Design Decisions:
    - Storage delete failures never block the DB update (S3FileStorage logs them)
    - Notification failures are logged; the lesson operation still succeeds
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.clock import utc_now
from learnhub.core.domain_types import NotificationType, UploadKind
from learnhub.core.errors import (
    BusinessRuleError, PermissionDeniedError, ResourceNotFoundError,
    StorageError,
)
from learnhub.core.pagination import page_offset, total_pages
from learnhub.core.service_protocols import FileStorage
from learnhub.core.upload_rules import check_upload
from learnhub.models.group import Group
from learnhub.models.lesson import Lesson
from learnhub.models.user import User
from learnhub.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

VIDEO_FOLDER = "lessons/videos"
RECENT_LESSONS = 5


class LessonService:

    def __init__(
        self,
        db: AsyncSession,
        storage: FileStorage | None = None,
        notifier: NotificationDispatcher | None = None,
    ):
        self.db = db
        self.storage = storage
        self.notifier = notifier

    async def create(
        self, name: str, content: str | None, group_id: int, teacher: User,
    ) -> Lesson:
        group = await self.db.get(Group, group_id)
        if group is None:
            raise ResourceNotFoundError("Group", group_id)
        lesson = Lesson(name=name, content=content, group_id=group.id, creator_id=teacher.id)
        self.db.add(lesson)
        await self.db.commit()
        lesson_id = lesson.id
        logger.info("Lesson created", extra={"lesson_id": lesson_id, "user_id": teacher.id})

        await self._notify_group(
            group.id,
            f"New Lesson: {name}",
            f"A new lesson has been added to {group.name}",
        )
        return await self._reload(lesson_id)

    async def upload_video(
        self,
        lesson_id: int,
        teacher: User,
        content: bytes,
        filename: str | None,
        content_type: str | None,
    ) -> Lesson:
        lesson = await self._get_owned(lesson_id, teacher, "upload a video to")
        problem = check_upload(UploadKind.VIDEO, content_type, len(content))
        if problem:
            raise BusinessRuleError(problem["message"], problem["error_code"])
        if self.storage is None:
            raise StorageError("file storage is not configured")

        previous_path = lesson.video_path
        stored = await self.storage.upload(content, VIDEO_FOLDER, filename, content_type)
        lesson.video_url = stored.url
        lesson.video_path = stored.path
        lesson.video_size = stored.size
        await self.db.commit()
        logger.info("Lesson video uploaded", extra={"lesson_id": lesson_id})
        if previous_path:
            await self.storage.delete(previous_path)

        if lesson.group_id is not None:
            await self._notify_group(
                lesson.group_id,
                f"New Video Added: {lesson.name}",
                f"Teacher has uploaded a video for {lesson.name}",
            )
        return await self._reload(lesson_id)

    async def remove_video(self, lesson_id: int, teacher: User) -> Lesson:
        lesson = await self._get_owned(lesson_id, teacher, "remove the video from")
        if not lesson.video_url:
            raise BusinessRuleError("No video to remove", "NO_VIDEO")
        if lesson.video_path and self.storage is not None:
            await self.storage.delete(lesson.video_path)
        lesson.video_url = None
        lesson.video_path = None
        lesson.video_size = None
        await self.db.commit()
        return lesson

    async def get_with_access(self, lesson_id: int, user: User) -> Lesson:
        lesson = await self._get(lesson_id)
        if lesson.creator_id == user.id:
            return lesson
        if lesson.group is not None and any(s.id == user.id for s in lesson.group.students):
            return lesson
        raise PermissionDeniedError("You do not have access to this lesson")

    async def list_for_teacher(self, teacher_id: int, page: int = 1, limit: int = 10) -> dict:
        result = await self.db.execute(
            select(Lesson)
            .where(Lesson.creator_id == teacher_id)
            .order_by(Lesson.created_at.desc(), Lesson.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit),
        )
        total = (await self.db.execute(
            select(func.count(Lesson.id)).where(Lesson.creator_id == teacher_id),
        )).scalar_one()
        return {
            "data": list(result.scalars().all()),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages(total, limit),
        }

    async def recent_for_teacher(self, teacher_id: int, limit: int = RECENT_LESSONS) -> list[Lesson]:
        result = await self.db.execute(
            select(Lesson)
            .where(Lesson.creator_id == teacher_id)
            .order_by(Lesson.created_at.desc(), Lesson.id.desc())
            .limit(limit),
        )
        return list(result.scalars().all())

    async def delete(self, lesson_id: int, teacher: User) -> None:
        lesson = await self._get_owned(lesson_id, teacher, "delete")
        if lesson.video_path and self.storage is not None:
            await self.storage.delete(lesson.video_path)
        await self.db.delete(lesson)
        await self.db.commit()
        logger.info("Lesson deleted", extra={"lesson_id": lesson_id, "user_id": teacher.id})

    # ─── Helpers ────────────────────────────────────────────────

    async def _get(self, lesson_id: int) -> Lesson:
        lesson = await self.db.get(Lesson, lesson_id)
        if lesson is None:
            raise ResourceNotFoundError("Lesson", lesson_id)
        return lesson

    async def _reload(self, lesson_id: int) -> Lesson:
        return await self.db.get(Lesson, lesson_id, populate_existing=True)

    async def _get_owned(self, lesson_id: int, teacher: User, action: str) -> Lesson:
        lesson = await self._get(lesson_id)
        if lesson.creator_id != teacher.id:
            raise PermissionDeniedError(f"You can only {action} your own lessons")
        return lesson

    async def _notify_group(self, group_id: int, title: str, body: str) -> None:
        if self.notifier is None:
            return
        group = await self.db.get(Group, group_id)
        if group is None or not group.students:
            return
        await self.notifier.send_quietly(
            [s.id for s in group.students],
            title=title,
            body=body,
            type=NotificationType.LESSON_CREATED,
            data={
                "type": "lesson",
                "groupId": group_id,
                "timestamp": utc_now().isoformat(),
            },
        )
