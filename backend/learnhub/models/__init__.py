"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Integer surrogate keys everywhere; clients address resources by these ids

Design Decisions:
    - One file per aggregate for locality (Homework + HomeworkAssignment,
      Notification + NotificationRecipient share a file)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from learnhub.models.role import Role  # noqa: F401
from learnhub.models.user import User  # noqa: F401
from learnhub.models.group import Group, group_students  # noqa: F401
from learnhub.models.lesson import Lesson  # noqa: F401
from learnhub.models.homework import Homework, HomeworkAssignment  # noqa: F401
from learnhub.models.device_token import DeviceToken  # noqa: F401
from learnhub.models.refresh_token import RefreshToken  # noqa: F401
from learnhub.models.notification import Notification, NotificationRecipient  # noqa: F401
