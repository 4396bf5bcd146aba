"""Homework Service — assign, submit, grade and review per-student homework.

Invariants:
    - Creating a homework creates one pending HomeworkAssignment per student, same commit
    - Every assigned student id must exist (404 otherwise)
    - Only the homework's creator may read its assignments, delete it, grade or review (404/403)
    - A student may submit once, before the due date (409 / 400 otherwise)
    - review(status="pending") sends work back: grade and graded_at cleared, feedback kept
    - Notification failures are logged and never fail the homework operation

Design Decisions:
    - Documents validated with the same upload rules as lesson videos (UploadKind.DOCUMENT)
    - Teacher reads of another teacher's homework are 404, not 403: ids are not
      confirmed to callers who do not own them
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.clock import ensure_utc, utc_now
from learnhub.core.domain_types import HomeworkStatus, NotificationType, UploadKind
from learnhub.core.errors import (
    BusinessRuleError, ConflictError, PermissionDeniedError,
    ResourceNotFoundError, StorageError, ValidationFailedError,
)
from learnhub.core.homework_rules import (
    assignment_preview, check_can_submit, parse_student_ids,
)
from learnhub.core.service_protocols import FileStorage
from learnhub.core.upload_rules import check_upload
from learnhub.models.homework import Homework, HomeworkAssignment
from learnhub.models.user import User
from learnhub.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

HOMEWORK_FOLDER = "homeworks"
SUBMISSION_FOLDER = "submissions"


def parse_due_date(value: str | datetime) -> datetime:
    """ISO-8601 date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationFailedError(
            f"Invalid due date format: {value}. Please provide a valid ISO date string.",
            "due_date",
        )
    return ensure_utc(parsed)


class HomeworkService:

    def __init__(
        self,
        db: AsyncSession,
        storage: FileStorage | None = None,
        notifier: NotificationDispatcher | None = None,
    ):
        self.db = db
        self.storage = storage
        self.notifier = notifier

    # ─── Teacher side ───────────────────────────────────────────

    async def create(
        self,
        teacher: User,
        title: str,
        description: str | None,
        due_date: str | datetime,
        student_ids: Any,
        file: tuple[bytes, str | None, str | None] | None = None,
    ) -> Homework:
        """Create a homework and its assignments. `file` is (content, filename, content_type)."""
        due = parse_due_date(due_date)
        ids = parse_student_ids(student_ids)

        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        students = list(result.scalars().all())
        found = {s.id for s in students}
        missing = [i for i in ids if i not in found]
        if missing:
            raise ResourceNotFoundError("Student", ", ".join(str(i) for i in missing))

        file_url = None
        if file is not None:
            file_url = await self._store_document(file, HOMEWORK_FOLDER)

        homework = Homework(
            title=title,
            description=description,
            due_date=due,
            file_url=file_url,
            created_by_id=teacher.id,
            assignments=[
                HomeworkAssignment(student_id=sid, status=HomeworkStatus.PENDING.value)
                for sid in ids
            ],
        )
        self.db.add(homework)
        await self.db.commit()
        homework_id = homework.id
        logger.info(
            f"Homework created for {len(ids)} student(s)",
            extra={"homework_id": homework_id, "user_id": teacher.id},
        )

        await self._notify(
            ids,
            title=f"New Homework Assigned: {title}",
            body=assignment_preview(description) or f"Due {due.date().isoformat()}",
            type=NotificationType.HOMEWORK_ASSIGNED,
            data={"type": "homework", "homeworkId": homework_id, "dueDate": due.isoformat()},
        )
        return await self._reload(homework_id)

    async def list_for_teacher(self, teacher_id: int) -> list[Homework]:
        result = await self.db.execute(
            select(Homework)
            .where(Homework.created_by_id == teacher_id)
            .order_by(Homework.created_at.desc(), Homework.id.desc()),
        )
        return list(result.scalars().all())

    async def get_with_assignments(self, homework_id: int, teacher: User) -> Homework:
        result = await self.db.execute(
            select(Homework).where(
                Homework.id == homework_id, Homework.created_by_id == teacher.id,
            ),
        )
        homework = result.scalar_one_or_none()
        if homework is None:
            raise ResourceNotFoundError("Homework", homework_id)
        return homework

    async def delete(self, homework_id: int, teacher: User) -> None:
        homework = await self.get_with_assignments(homework_id, teacher)
        await self.db.delete(homework)
        await self.db.commit()
        logger.info("Homework deleted", extra={"homework_id": homework_id, "user_id": teacher.id})

    async def grade(
        self, assignment_id: int, teacher: User, grade: str, feedback: str | None = None,
    ) -> HomeworkAssignment:
        assignment = await self._get_for_teacher(assignment_id, teacher)
        assignment.grade = grade
        assignment.feedback = feedback
        assignment.status = HomeworkStatus.GRADED.value
        assignment.graded_at = utc_now()
        await self.db.commit()
        logger.info("Assignment graded", extra={"assignment_id": assignment.id})

        await self._notify(
            [assignment.student_id],
            title=f"Homework Graded: {assignment.homework.title}",
            body=f"Your grade: {grade}",
            type=NotificationType.HOMEWORK_GRADED,
            data={
                "type": "homework_graded",
                "homeworkId": assignment.homework_id,
                "assignmentId": assignment_id,
                "grade": grade,
            },
        )
        return await self.db.get(HomeworkAssignment, assignment_id, populate_existing=True)

    async def review(
        self,
        assignment_id: int,
        teacher: User,
        status: str,
        grade: str | None = None,
        feedback: str | None = None,
    ) -> HomeworkAssignment:
        if status == HomeworkStatus.GRADED.value:
            if not grade:
                raise ValidationFailedError("A grade is required to mark as graded", "grade")
            return await self.grade(assignment_id, teacher, grade, feedback)
        if status != HomeworkStatus.PENDING.value:
            raise ValidationFailedError(f"Invalid review status: {status}", "status")

        assignment = await self._get_for_teacher(assignment_id, teacher)
        assignment.status = HomeworkStatus.PENDING.value
        assignment.grade = None
        assignment.graded_at = None
        assignment.feedback = feedback
        await self.db.commit()
        logger.info("Assignment returned for rework", extra={"assignment_id": assignment.id})
        return assignment

    # ─── Student side ───────────────────────────────────────────

    async def list_for_student(self, student_id: int) -> list[HomeworkAssignment]:
        result = await self.db.execute(
            select(HomeworkAssignment)
            .join(HomeworkAssignment.homework)
            .where(HomeworkAssignment.student_id == student_id)
            .order_by(Homework.created_at.desc(), HomeworkAssignment.id.desc()),
        )
        return list(result.scalars().all())

    async def get_assignment(self, assignment_id: int, student: User) -> HomeworkAssignment:
        result = await self.db.execute(
            select(HomeworkAssignment).where(
                HomeworkAssignment.id == assignment_id,
                HomeworkAssignment.student_id == student.id,
            ),
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            raise ResourceNotFoundError("Assignment", assignment_id)
        return assignment

    async def submit(
        self,
        assignment_id: int,
        student: User,
        submission_text: str | None = None,
        file: tuple[bytes, str | None, str | None] | None = None,
    ) -> HomeworkAssignment:
        assignment = await self.get_assignment(assignment_id, student)
        now = utc_now()
        problem = check_can_submit(assignment.status, assignment.homework.due_date, now)
        if problem:
            if problem["error_code"] == "ALREADY_SUBMITTED":
                raise ConflictError(problem["message"], problem["error_code"])
            raise BusinessRuleError(problem["message"], problem["error_code"])

        if file is not None:
            assignment.submit_file_url = await self._store_document(file, SUBMISSION_FOLDER)
        assignment.submission_text = submission_text
        assignment.status = HomeworkStatus.SUBMITTED.value
        assignment.submitted_at = now
        await self.db.commit()
        logger.info(
            "Assignment submitted",
            extra={"assignment_id": assignment.id, "user_id": student.id},
        )
        return assignment

    # ─── Helpers ────────────────────────────────────────────────

    async def _get_for_teacher(self, assignment_id: int, teacher: User) -> HomeworkAssignment:
        assignment = await self.db.get(HomeworkAssignment, assignment_id)
        if assignment is None:
            raise ResourceNotFoundError("Assignment", assignment_id)
        if assignment.homework.created_by_id != teacher.id:
            raise PermissionDeniedError("You do not have permission to grade this assignment")
        return assignment

    async def _reload(self, homework_id: int) -> Homework:
        return await self.db.get(Homework, homework_id, populate_existing=True)

    async def _store_document(
        self, file: tuple[bytes, str | None, str | None], folder: str,
    ) -> str:
        content, filename, content_type = file
        problem = check_upload(UploadKind.DOCUMENT, content_type, len(content))
        if problem:
            raise BusinessRuleError(problem["message"], problem["error_code"])
        if self.storage is None:
            raise StorageError("file storage is not configured")
        stored = await self.storage.upload(content, folder, filename, content_type)
        return stored.url

    async def _notify(self, user_ids: list[int], **payload: Any) -> None:
        if self.notifier is None or not user_ids:
            return
        await self.notifier.send_quietly(user_ids, **payload)
