"""
Task Lifecycle
==============

Field constraints and the derived ``overdue`` flag for tasks.

Everything here is pure: no I/O, no session access. The task service
calls into this module on every create, update and status toggle so the
invariants hold no matter which write path touched the record:

- title is 1-100 characters and description 1-500 characters after trimming
- ``overdue`` is true iff the task is Incomplete and its deadline is
  strictly before the moment of the write
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Mapping, Optional

from app.core.errors import ValidationError
from app.models.task import Task, TaskPriority, TaskStatus
from app.utils.helpers import ensure_utc, parse_datetime, utc_now

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


@dataclass(frozen=True)
class TaskFields:
    """Validated field set for a new task."""

    title: str
    description: str
    deadline: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.INCOMPLETE


# =============================================================================
# Field validators
# =============================================================================

def _clean_text(value: Any, field: str, max_length: int) -> str:
    label = field.capitalize()
    if value is None:
        raise ValidationError(f"{label} is required", field=field)
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string", field=field)

    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{label} cannot be empty", field=field)
    if len(cleaned) > max_length:
        raise ValidationError(
            f"{label} cannot be more than {max_length} characters",
            field=field,
        )
    return cleaned


def _parse_deadline(value: Any) -> datetime:
    if value is None or value == "":
        raise ValidationError("Deadline is required", field="deadline")

    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return parse_datetime(value)
        except ValueError:
            raise ValidationError("Deadline is not a valid date", field="deadline")

    raise ValidationError("Deadline is not a valid date", field="deadline")


def _parse_priority(value: Any) -> TaskPriority:
    if value is None:
        return TaskPriority.MEDIUM
    try:
        return TaskPriority(value)
    except ValueError:
        allowed = ", ".join(p.value for p in TaskPriority)
        raise ValidationError(f"Priority must be one of: {allowed}", field="priority")


def _parse_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"Status must be one of: {allowed}", field="status")


# =============================================================================
# Public API
# =============================================================================

def validate(fields: Mapping[str, Any]) -> TaskFields:
    """
    Validate the fields of a task being created.

    Priority defaults to Medium. New tasks always start Incomplete.

    Raises:
        ValidationError: On a missing/empty/too-long title or description,
            or a missing/unparsable deadline or unknown priority
    """
    return TaskFields(
        title=_clean_text(fields.get("title"), "title", TITLE_MAX_LENGTH),
        description=_clean_text(
            fields.get("description"), "description", DESCRIPTION_MAX_LENGTH
        ),
        deadline=_parse_deadline(fields.get("deadline")),
        priority=_parse_priority(fields.get("priority")),
        status=TaskStatus.INCOMPLETE,
    )


def validate_partial(fields: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate only the supplied fields of an update.

    Keys other than the five editable task fields are ignored. A supplied ``None``
    for a required field is rejected like an empty value.
    """
    cleaned: dict[str, Any] = {}

    if "title" in fields:
        cleaned["title"] = _clean_text(fields["title"], "title", TITLE_MAX_LENGTH)
    if "description" in fields:
        cleaned["description"] = _clean_text(
            fields["description"], "description", DESCRIPTION_MAX_LENGTH
        )
    if "deadline" in fields:
        cleaned["deadline"] = _parse_deadline(fields["deadline"])
    if "priority" in fields:
        if fields["priority"] is None:
            raise ValidationError("Priority is required", field="priority")
        cleaned["priority"] = _parse_priority(fields["priority"])
    if "status" in fields:
        if fields["status"] is None:
            raise ValidationError("Status is required", field="status")
        cleaned["status"] = _parse_status(fields["status"])

    return cleaned


def compute_overdue(
    deadline: datetime,
    status: TaskStatus,
    now: datetime,
) -> bool:
    """Return True iff the task is Incomplete and its deadline has passed."""
    return status == TaskStatus.INCOMPLETE and ensure_utc(deadline) < ensure_utc(now)


def toggle_status(current: TaskStatus) -> TaskStatus:
    """Completed ↔ Incomplete."""
    if current == TaskStatus.COMPLETED:
        return TaskStatus.INCOMPLETE
    return TaskStatus.COMPLETED


def refresh_overdue(task: Task, now: Optional[datetime] = None) -> bool:
    """
    Recompute ``task.is_overdue`` in place.

    Returns:
        True if the flag changed
    """
    overdue = compute_overdue(task.deadline, task.status, now or utc_now())
    changed = bool(task.is_overdue) != overdue
    task.is_overdue = overdue
    return changed
