"""Domain Types — enums shared across the codebase.

Invariants:
    - All valid states encoded as Enums; no raw string matching
    - Enum values are the exact strings stored in the DB

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum


class RoleName(str, Enum):
    """Built-in roles. Seeded on startup, never deletable."""
    TEACHER = "teacher"
    STUDENT = "student"


DEFAULT_ROLES: tuple[str, ...] = (RoleName.TEACHER.value, RoleName.STUDENT.value)


class NotificationType(str, Enum):
    HOMEWORK_ASSIGNED = "homework_assigned"
    HOMEWORK_DUE = "homework_due"
    HOMEWORK_GRADED = "homework_graded"
    LESSON_CREATED = "lesson_created"
    GROUP_INVITE = "group_invite"
    ANNOUNCEMENT = "announcement"
    SYSTEM = "system"


class NotificationStatus(str, Enum):
    """Delivery state of a notification as a whole (not per recipient)."""
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"


class HomeworkStatus(str, Enum):
    """Per-student assignment lifecycle: pending -> submitted -> graded."""
    PENDING = "pending"
    SUBMITTED = "submitted"
    GRADED = "graded"
    LATE = "late"


class UploadKind(str, Enum):
    """Accepted upload families: each has its own MIME whitelist and size cap."""
    VIDEO = "video"
    DOCUMENT = "document"
