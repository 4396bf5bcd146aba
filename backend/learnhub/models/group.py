"""Group ORM — a teacher's class of students, owning lessons.

Invariants:
    - Students linked through the group_students association table (M:N)
    - teacher_id becomes NULL if the teacher account is deleted

Design Decisions:
    - teacher, students and lessons eagerly loaded (selectin): every group
      payload renders all three
"""

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.db.base import Base
from learnhub.db.types import UTCDateTime

group_students = Table(
    "group_students",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    teacher_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    teacher: Mapped["User | None"] = relationship("User", lazy="selectin")
    students: Mapped[list["User"]] = relationship(
        "User", secondary=group_students, lazy="selectin",
    )
    lessons: Mapped[list["Lesson"]] = relationship(
        "Lesson", back_populates="group", lazy="selectin",
        order_by="Lesson.created_at.desc()",
    )
