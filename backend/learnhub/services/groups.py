"""Group Service — teacher-owned classes of students.

Invariants:
    - Unknown student ids on create are ignored (only existing users are linked)
    - Linked students receive one group_invite notification
    - Group payloads are re-read after commit so teacher/students/lessons are loaded
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.domain_types import NotificationType
from learnhub.core.errors import ResourceNotFoundError
from learnhub.core.push_rules import dedupe_ids
from learnhub.models.group import Group, group_students
from learnhub.models.user import User
from learnhub.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class GroupService:

    def __init__(self, db: AsyncSession, notifier: NotificationDispatcher | None = None):
        self.db = db
        self.notifier = notifier

    async def create(self, name: str, teacher: User, student_ids: list[int]) -> Group:
        students: list[User] = []
        if student_ids:
            result = await self.db.execute(
                select(User).where(User.id.in_(dedupe_ids(student_ids))),
            )
            students = list(result.scalars().all())

        group = Group(name=name, teacher_id=teacher.id, students=students)
        self.db.add(group)
        await self.db.commit()
        group_id = group.id
        logger.info(
            f"Group created: {name}",
            extra={"user_id": teacher.id, "recipient_count": len(students)},
        )

        if students and self.notifier is not None:
            await self.notifier.send_quietly(
                [s.id for s in students],
                title=f"You were added to {name}",
                body=f"{teacher.name} added you to the group {name}",
                type=NotificationType.GROUP_INVITE,
                data={"type": "group", "groupId": group_id},
            )
        return await self.get(group_id)

    async def get(self, group_id: int) -> Group:
        group = await self.db.get(Group, group_id, populate_existing=True)
        if group is None:
            raise ResourceNotFoundError("Group", group_id)
        return group

    async def list_all(self) -> list[Group]:
        result = await self.db.execute(select(Group).order_by(Group.id))
        return list(result.scalars().all())

    async def list_for_teacher(self, teacher_id: int) -> list[Group]:
        result = await self.db.execute(
            select(Group).where(Group.teacher_id == teacher_id).order_by(Group.id),
        )
        return list(result.scalars().all())

    async def list_for_student(self, student_id: int) -> list[Group]:
        result = await self.db.execute(
            select(Group)
            .join(group_students, group_students.c.group_id == Group.id)
            .where(group_students.c.student_id == student_id)
            .order_by(Group.id),
        )
        return list(result.scalars().all())
