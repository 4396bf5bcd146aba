"""Role ORM — named permission level referenced by every user.

Invariants:
    - name is unique; "teacher" and "student" always exist (seeded on startup)
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from learnhub.db.base import Base


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
