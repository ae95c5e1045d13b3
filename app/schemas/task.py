"""
Task Schemas
============

Pydantic schemas for task endpoints.

Request schemas only check shape and types; length bounds and the
overdue flag are owned by ``app.services.task_lifecycle``.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.task import TaskPriority, TaskStatus
from app.services.task_lifecycle import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH

StatusFilter = Literal["Incomplete", "Completed", "All"]
PriorityFilter = Literal["Low", "Medium", "High", "All"]


# =============================================================================
# Request Schemas
# =============================================================================

class TaskCreate(BaseModel):
    """Request schema for creating a task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    deadline: datetime
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskUpdate(BaseModel):
    """
    Request schema for updating a task.

    Partial: only fields present in the body are validated and written.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(
        None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH
    )
    deadline: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None


class TaskFilter(BaseModel):
    """
    Listing constraints. ``None`` means no constraint on that dimension.
    """

    model_config = ConfigDict(frozen=True)

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: Optional[str] = None

    @classmethod
    def from_query(
        cls,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
    ) -> "TaskFilter":
        """Build a filter from raw query values, folding "All" and blanks to None."""
        search = search.strip() if search else None
        return cls(
            status=None if status in (None, "All") else TaskStatus(status),
            priority=None if priority in (None, "All") else TaskPriority(priority),
            search=search or None,
        )


# =============================================================================
# Response Schemas
# =============================================================================

class TaskData(BaseModel):
    """Task as returned by the API."""

    id: str
    user: str
    title: str
    description: str
    deadline: str
    priority: TaskPriority
    status: TaskStatus
    overdue: bool
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class TaskResponse(BaseModel):
    """Response for a single task."""

    success: bool = True
    message: Optional[str] = None
    data: TaskData


class TaskListResponse(BaseModel):
    """Response for a task listing."""

    success: bool = True
    count: int
    data: list[TaskData]


class TaskStats(BaseModel):
    """Per-user task counters."""

    total: int
    completed: int
    incomplete: int
    overdue: int


class TaskStatsResponse(BaseModel):
    """Response for task statistics."""

    success: bool = True
    data: TaskStats


class DeleteTaskResponse(BaseModel):
    """Response for task deletion."""

    success: bool = True
    message: str = "Task deleted successfully"
    data: dict = Field(default_factory=dict)
