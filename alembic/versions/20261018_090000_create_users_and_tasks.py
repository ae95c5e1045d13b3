"""Create users and tasks tables

Revision ID: 3f9c2a7d1b04
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f9c2a7d1b04"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


STATUS_VALUES = ("Incomplete", "Completed")
PRIORITY_VALUES = ("Low", "Medium", "High")


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "users",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "tasks",
        sa.Column("task_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "priority",
            sa.Enum(*PRIORITY_VALUES, name="taskpriority", create_constraint=True),
            nullable=False,
            server_default="Medium",
        ),
        sa.Column(
            "status",
            sa.Enum(*STATUS_VALUES, name="taskstatus", create_constraint=True),
            nullable=False,
            server_default="Incomplete",
        ),
        sa.Column(
            "is_overdue",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_task_user_status", "tasks", ["user_id", "status"])
    op.create_index("idx_task_user_deadline", "tasks", ["user_id", "deadline"])
    op.create_index("idx_task_user_created", "tasks", ["user_id", "created_at"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("idx_task_user_created", table_name="tasks")
    op.drop_index("idx_task_user_deadline", table_name="tasks")
    op.drop_index("idx_task_user_status", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    sa.Enum(name="taskstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="taskpriority").drop(op.get_bind(), checkfirst=True)
