"""User ORM — account with exactly one role.

Invariants:
    - email is unique
    - password_hash is a bcrypt hash; the plaintext password is never stored
    - Deleting a user cascades to refresh tokens, device tokens and notification receipts

Design Decisions:
    - role loaded with lazy="selectin": every auth check needs it
    - Owned session/device/receipt collections are lazy="select": only touched
      by the delete cascade, which runs inside the async flush
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.db.base import Base
from learnhub.db.types import UTCDateTime


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("roles.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    role: Mapped["Role"] = relationship("Role", lazy="selectin")
    refresh_tokens: Mapped[list["RefreshToken"]] = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan",
    )
    device_tokens: Mapped[list["DeviceToken"]] = relationship(
        "DeviceToken", back_populates="user", cascade="all, delete-orphan",
    )
    notification_receipts: Mapped[list["NotificationRecipient"]] = relationship(
        "NotificationRecipient", back_populates="user", cascade="all, delete-orphan",
    )

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role else None
