"""Initial schema — roles, users, groups, lessons, homework, tokens, notifications.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=nullable,
        server_default=None if nullable else sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "roles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role_id", sa.Integer, sa.ForeignKey("roles.id"), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "teacher_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        _timestamp("created_at"),
    )
    op.create_index("ix_groups_teacher_id", "groups", ["teacher_id"])

    op.create_table(
        "group_students",
        sa.Column(
            "group_id", sa.Integer,
            sa.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "student_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
        ),
    )

    op.create_table(
        "lessons",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("video_url", sa.String(1024), nullable=True),
        sa.Column("video_path", sa.String(1024), nullable=True),
        sa.Column("video_size", sa.BigInteger, nullable=True),
        sa.Column(
            "group_id", sa.Integer,
            sa.ForeignKey("groups.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "creator_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        _timestamp("created_at"),
    )
    op.create_index("ix_lessons_group_id", "lessons", ["group_id"])
    op.create_index("ix_lessons_creator_id", "lessons", ["creator_id"])

    op.create_table(
        "homeworks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("file_url", sa.String(1024), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_by_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        _timestamp("created_at"),
    )
    op.create_index("ix_homeworks_created_by_id", "homeworks", ["created_by_id"])

    op.create_table(
        "homework_assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "homework_id", sa.Integer,
            sa.ForeignKey("homeworks.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "student_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("submit_file_url", sa.String(1024), nullable=True),
        sa.Column("submission_text", sa.Text, nullable=True),
        _timestamp("submitted_at", nullable=True),
        sa.Column("grade", sa.String(50), nullable=True),
        sa.Column("feedback", sa.Text, nullable=True),
        _timestamp("graded_at", nullable=True),
        sa.UniqueConstraint(
            "homework_id", "student_id", name="uq_assignment_homework_student",
        ),
    )
    op.create_index(
        "ix_homework_assignments_homework_id", "homework_assignments", ["homework_id"],
    )
    op.create_index(
        "ix_homework_assignments_student_id", "homework_assignments", ["student_id"],
    )

    op.create_table(
        "device_tokens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("token", sa.String(512), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("user_id", "token", name="uq_device_token_user_token"),
    )
    op.create_index("ix_device_tokens_user_id", "device_tokens", ["user_id"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column(
            "user_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("device_info", sa.String(255), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("last_used_at", nullable=True),
    )
    op.create_index("ix_refresh_tokens_expires_at", "refresh_tokens", ["expires_at"])
    op.create_index(
        "ix_refresh_tokens_user_revoked", "refresh_tokens", ["user_id", "is_revoked"],
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(32), nullable=False, server_default="system"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="sent"),
        sa.Column("data", sa.JSON, nullable=True),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("action_url", sa.String(1024), nullable=True),
        sa.Column("fcm_message_id", sa.String(255), nullable=True),
        sa.Column("retry_count", sa.Integer, nullable=False, server_default="0"),
        _timestamp("scheduled_at", nullable=True),
        _timestamp("expires_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_notifications_expires_at", "notifications", ["expires_at"])
    op.create_index("ix_notifications_type_created", "notifications", ["type", "created_at"])

    op.create_table(
        "notification_recipients",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "notification_id", sa.Integer,
            sa.ForeignKey("notifications.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("read_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint(
            "user_id", "notification_id", name="uq_recipient_user_notification",
        ),
    )
    op.create_index(
        "ix_notification_recipients_notification_id",
        "notification_recipients", ["notification_id"],
    )
    op.create_index("ix_recipients_user_read", "notification_recipients", ["user_id", "is_read"])
    op.create_index(
        "ix_recipients_user_created", "notification_recipients", ["user_id", "created_at"],
    )

    op.bulk_insert(
        sa.table("roles", sa.column("name", sa.String)),
        [{"name": "teacher"}, {"name": "student"}],
    )


def downgrade() -> None:
    op.drop_table("notification_recipients")
    op.drop_table("notifications")
    op.drop_table("refresh_tokens")
    op.drop_table("device_tokens")
    op.drop_table("homework_assignments")
    op.drop_table("homeworks")
    op.drop_table("lessons")
    op.drop_table("group_students")
    op.drop_table("groups")
    op.drop_table("users")
    op.drop_table("roles")
