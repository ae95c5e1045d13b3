"""
Task Models
===========

SQLAlchemy model for personal tasks.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin
from app.utils.helpers import format_datetime

if TYPE_CHECKING:
    from app.models.user import User


# =============================================================================
# Enums
# =============================================================================

class TaskStatus(str, Enum):
    """Task completion status."""
    INCOMPLETE = "Incomplete"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    """Task priority level."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# =============================================================================
# Models
# =============================================================================

class Task(Base, TimestampMixin):
    """
    Task model.

    Owned by exactly one user; ``is_overdue`` is maintained by the
    lifecycle engine on every write.
    """

    __tablename__ = "tasks"

    # Primary Key
    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Owner, never reassigned after creation
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )

    # Task details
    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    deadline: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    priority: Mapped[TaskPriority] = mapped_column(
        SQLEnum(TaskPriority, name="taskpriority", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(TaskStatus, name="taskstatus", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TaskStatus.INCOMPLETE,
    )
    is_overdue: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="tasks",
    )

    # Indexes
    __table_args__ = (
        Index("idx_task_user_status", "user_id", "status"),
        Index("idx_task_user_deadline", "user_id", "deadline"),
        Index("idx_task_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Task(task_id={self.task_id}, title={self.title[:30]})>"

    def to_api_dict(self) -> dict:
        """
        Serialize to the API response format.

        Maps internal field names to the API contract:
            task_id    → id
            user_id    → user
            is_overdue → overdue
        """
        return {
            "id": str(self.task_id),
            "user": str(self.user_id),
            "title": self.title,
            "description": self.description,
            "deadline": format_datetime(self.deadline),
            "priority": self.priority.value,
            "status": self.status.value,
            "overdue": self.is_overdue,
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }
