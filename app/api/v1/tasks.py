"""
Tasks API Endpoints
===================

Handles task CRUD, filtered listing, status toggling and statistics.
Every route requires a bearer token; ownership is enforced by the
task service.
"""

from typing import Optional
import uuid

from fastapi import APIRouter, Query, status

from app.dependencies import CurrentSession, DBSession
from app.schemas.common import ErrorResponse
from app.schemas.task import (
    DeleteTaskResponse,
    PriorityFilter,
    StatusFilter,
    TaskCreate,
    TaskFilter,
    TaskListResponse,
    TaskResponse,
    TaskStatsResponse,
    TaskUpdate,
)
from app.services.task_service import TaskService

router = APIRouter()

_OWNED_TASK_ERRORS = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Task belongs to another user"},
    404: {"model": ErrorResponse, "description": "Task not found"},
}


@router.get(
    "",
    response_model=TaskListResponse,
)
async def list_tasks(
    session: CurrentSession,
    db: DBSession,
    status_filter: Optional[StatusFilter] = Query(default=None, alias="status"),
    priority: Optional[PriorityFilter] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=100),
):
    """
    Get the caller's tasks, newest first.

    - **status**: Incomplete, Completed or All
    - **priority**: Low, Medium, High or All
    - **search**: case-insensitive substring of the title
    """
    task_filter = TaskFilter.from_query(
        status=status_filter,
        priority=priority,
        search=search,
    )
    tasks = await TaskService(db).list_tasks(session.user_id, task_filter)

    return {
        "success": True,
        "count": len(tasks),
        "data": [task.to_api_dict() for task in tasks],
    }


@router.get(
    "/stats",
    response_model=TaskStatsResponse,
)
async def get_task_stats(
    session: CurrentSession,
    db: DBSession,
):
    """
    Get total, completed, incomplete and overdue counts for the caller.
    """
    stats = await TaskService(db).get_task_stats(session.user_id)
    return {"success": True, "data": stats}


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    task_data: TaskCreate,
    session: CurrentSession,
    db: DBSession,
):
    """
    Create a new task. Priority defaults to Medium, status to Incomplete.
    """
    task = await TaskService(db).create_task(
        session.user_id,
        task_data.model_dump(),
    )

    return {
        "success": True,
        "message": "Task created successfully",
        "data": task.to_api_dict(),
    }


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses=_OWNED_TASK_ERRORS,
)
async def get_task(
    task_id: uuid.UUID,
    session: CurrentSession,
    db: DBSession,
):
    """
    Get a specific task by ID.
    """
    task = await TaskService(db).get_task(session.user_id, task_id)
    return {"success": True, "data": task.to_api_dict()}


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses=_OWNED_TASK_ERRORS,
)
async def update_task(
    task_id: uuid.UUID,
    task_data: TaskUpdate,
    session: CurrentSession,
    db: DBSession,
):
    """
    Update any subset of a task's fields.
    """
    task = await TaskService(db).update_task(
        session.user_id,
        task_id,
        task_data.model_dump(exclude_unset=True),
    )

    return {
        "success": True,
        "message": "Task updated successfully",
        "data": task.to_api_dict(),
    }


@router.patch(
    "/{task_id}/toggle",
    response_model=TaskResponse,
    responses=_OWNED_TASK_ERRORS,
)
async def toggle_task_status(
    task_id: uuid.UUID,
    session: CurrentSession,
    db: DBSession,
):
    """
    Flip a task between Incomplete and Completed.
    """
    task = await TaskService(db).toggle_task_status(session.user_id, task_id)

    return {
        "success": True,
        "message": f"Task marked as {task.status.value.lower()}",
        "data": task.to_api_dict(),
    }


@router.delete(
    "/{task_id}",
    response_model=DeleteTaskResponse,
    responses=_OWNED_TASK_ERRORS,
)
async def delete_task(
    task_id: uuid.UUID,
    session: CurrentSession,
    db: DBSession,
):
    """
    Delete a task permanently.
    """
    await TaskService(db).delete_task(session.user_id, task_id)

    return DeleteTaskResponse(
        success=True,
        message="Task deleted successfully",
    )
