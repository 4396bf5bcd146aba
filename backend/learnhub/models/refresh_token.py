"""RefreshToken ORM — one row per login session (device), rotated on every refresh.

Invariants:
    - token_hash = sha256(raw token); the raw token is never stored
    - A row is usable iff is_revoked is False and expires_at > now
    - Rotation revokes the old row and inserts a new one (rows are never re-armed)
    - Expired rows are deleted by the daily cleanup job

Design Decisions:
    - Revocation is a flag, not a delete: the session list and audit trail keep
      revoked rows until they expire
    - device_info/ip_address denormalized per row: rotation copies them forward
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.db.base import Base
from learnhub.db.types import UTCDateTime


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"
    __table_args__ = (
        Index("ix_refresh_tokens_user_revoked", "user_id", "is_revoked"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, index=True,
    )
    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    device_info: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
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
    last_used_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True,
    )

    user: Mapped["User"] = relationship(
        "User", back_populates="refresh_tokens", lazy="selectin",
    )
