"""
Task Service
============

Persistence and ownership-scoped querying for tasks.

Every single-task operation resolves the record through
``get_task_for_owner`` first, so a request from anyone but the owner is
rejected before any field is touched.
"""

import logging
from typing import Any, Mapping, Optional
import uuid

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.errors import ErrorCodes, ForbiddenError, NotFoundError
from app.models.task import Task, TaskStatus
from app.schemas.task import TaskFilter
from app.services import task_lifecycle
from app.utils.helpers import generate_uuid, utc_now

logger = logging.getLogger(__name__)


class TaskService:
    """Service for task operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Core CRUD
    # =========================================================================

    async def create_task(
        self,
        owner_id: uuid.UUID,
        fields: Mapping[str, Any],
    ) -> Task:
        """Validate and persist a new task owned by ``owner_id``."""
        valid = task_lifecycle.validate(fields)
        now = utc_now()

        task = Task(
            task_id=generate_uuid(),
            user_id=owner_id,
            title=valid.title,
            description=valid.description,
            deadline=valid.deadline,
            priority=valid.priority,
            status=valid.status,
            is_overdue=task_lifecycle.compute_overdue(valid.deadline, valid.status, now),
            created_at=now,
            updated_at=now,
        )
        self.db.add(task)
        await self.db.flush()

        logger.info("Task %s created for user %s", task.task_id, owner_id)
        return task

    async def get_task_for_owner(
        self,
        owner_id: uuid.UUID,
        task_id: uuid.UUID,
    ) -> Task:
        """
        Load a task and check ownership.

        Raises:
            NotFoundError: No task with this id
            ForbiddenError: The task belongs to another user
        """
        task = await self.db.get(Task, task_id)

        if task is None:
            raise NotFoundError("Task not found", code=ErrorCodes.TASK_NOT_FOUND)

        if task.user_id != owner_id:
            logger.warning(
                "User %s denied access to task %s owned by %s",
                owner_id,
                task_id,
                task.user_id,
            )
            raise ForbiddenError(
                "Not authorized to access this task",
                code=ErrorCodes.TASK_FORBIDDEN,
            )

        return task

    async def get_task(
        self,
        owner_id: uuid.UUID,
        task_id: uuid.UUID,
    ) -> Task:
        """Get a single owned task."""
        task = await self.get_task_for_owner(owner_id, task_id)
        if settings.OVERDUE_REFRESH_ON_READ:
            await self._refresh_overdue([task])
        return task

    async def list_tasks(
        self,
        owner_id: uuid.UUID,
        task_filter: Optional[TaskFilter] = None,
    ) -> list[Task]:
        """
        List the owner's tasks matching the filter, newest first.
        """
        task_filter = task_filter or TaskFilter()
        conditions = [Task.user_id == owner_id]

        if task_filter.status is not None:
            conditions.append(Task.status == task_filter.status)
        if task_filter.priority is not None:
            conditions.append(Task.priority == task_filter.priority)
        if task_filter.search:
            conditions.append(
                func.lower(Task.title).contains(
                    task_filter.search.lower(), autoescape=True
                )
            )

        stmt = (
            select(Task)
            .where(*conditions)
            .order_by(Task.created_at.desc())
        )
        result = await self.db.execute(stmt)
        tasks = list(result.scalars().all())

        if settings.OVERDUE_REFRESH_ON_READ:
            await self._refresh_overdue(tasks)
        return tasks

    async def update_task(
        self,
        owner_id: uuid.UUID,
        task_id: uuid.UUID,
        fields: Mapping[str, Any],
    ) -> Task:
        """
        Apply a partial update to an owned task.

        Only supplied fields are validated and written; overdue is
        recomputed from the resulting deadline and status.
        """
        task = await self.get_task_for_owner(owner_id, task_id)
        changes = task_lifecycle.validate_partial(fields)

        for name, value in changes.items():
            setattr(task, name, value)

        now = utc_now()
        task_lifecycle.refresh_overdue(task, now)
        task.updated_at = now

        await self.db.flush()
        return task

    async def toggle_task_status(
        self,
        owner_id: uuid.UUID,
        task_id: uuid.UUID,
    ) -> Task:
        """Flip Incomplete ↔ Completed on an owned task."""
        task = await self.get_task_for_owner(owner_id, task_id)

        now = utc_now()
        task.status = task_lifecycle.toggle_status(task.status)
        task_lifecycle.refresh_overdue(task, now)
        task.updated_at = now

        await self.db.flush()
        return task

    async def delete_task(
        self,
        owner_id: uuid.UUID,
        task_id: uuid.UUID,
    ) -> None:
        """Permanently delete an owned task."""
        task = await self.get_task_for_owner(owner_id, task_id)
        await self.db.delete(task)
        await self.db.flush()

        logger.info("Task %s deleted by user %s", task_id, owner_id)

    # =========================================================================
    # Statistics
    # =========================================================================

    async def get_task_stats(self, owner_id: uuid.UUID) -> dict:
        """
        Count the owner's tasks by status, plus overdue ones.

        Single query with conditional aggregates.
        """
        if settings.OVERDUE_REFRESH_ON_READ:
            await self.list_tasks(owner_id)

        stmt = (
            select(
                func.count().label("total"),
                func.sum(
                    case((Task.status == TaskStatus.COMPLETED, 1), else_=0)
                ).label("completed"),
                func.sum(
                    case(
                        (
                            (Task.status == TaskStatus.INCOMPLETE)
                            & Task.is_overdue.is_(True),
                            1,
                        ),
                        else_=0,
                    )
                ).label("overdue"),
            )
            .select_from(Task)
            .where(Task.user_id == owner_id)
        )
        result = await self.db.execute(stmt)
        row = result.one()

        total = row.total or 0
        completed = int(row.completed or 0)
        return {
            "total": total,
            "completed": completed,
            "incomplete": total - completed,
            "overdue": int(row.overdue or 0),
        }

    async def _refresh_overdue(self, tasks: list[Task]) -> None:
        """Recompute overdue against now and persist changed flags."""
        now = utc_now()
        changed = [task for task in tasks if task_lifecycle.refresh_overdue(task, now)]
        if changed:
            await self.db.flush()
