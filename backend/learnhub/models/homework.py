"""Homework ORM — a teacher's assignment template plus per-student assignments.

Invariants:
    - One HomeworkAssignment per (homework, student); created together with the homework
    - Deleting a homework deletes its assignments (ORM cascade + FK ondelete)
    - HomeworkAssignment.status follows HomeworkStatus: pending -> submitted -> graded

Design Decisions:
    - Homework and HomeworkAssignment share a module: neither exists without the other
    - grade stored as free text ("A", "9/10", "pass"): grading schemes vary per teacher
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.core.domain_types import HomeworkStatus
from learnhub.db.base import Base
from learnhub.db.types import UTCDateTime


class Homework(Base):
    __tablename__ = "homeworks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    due_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    created_by: Mapped["User | None"] = relationship("User", lazy="selectin")
    assignments: Mapped[list["HomeworkAssignment"]] = relationship(
        "HomeworkAssignment", back_populates="homework",
        cascade="all, delete-orphan", lazy="selectin",
    )


class HomeworkAssignment(Base):
    __tablename__ = "homework_assignments"
    __table_args__ = (
        UniqueConstraint("homework_id", "student_id", name="uq_assignment_homework_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    homework_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("homeworks.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=HomeworkStatus.PENDING.value,
    )
    submit_file_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    submission_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    graded_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    homework: Mapped["Homework"] = relationship(
        "Homework", back_populates="assignments", lazy="selectin",
    )
    student: Mapped["User"] = relationship("User", lazy="selectin")
