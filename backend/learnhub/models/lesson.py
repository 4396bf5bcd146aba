"""Lesson ORM — teaching unit inside a group, optionally with one video.

Invariants:
    - video_url, video_path and video_size are set and cleared together
    - video_path is the storage key used to delete the object

Design Decisions:
    - BigInteger for video_size: uploads are capped at 100 MB but the column
      should not be the limiting factor
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.db.base import Base
from learnhub.db.types import UTCDateTime


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    video_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    video_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    group_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    creator_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    group: Mapped["Group | None"] = relationship(
        "Group", back_populates="lessons", lazy="selectin",
    )
    creator: Mapped["User | None"] = relationship("User", lazy="selectin")
