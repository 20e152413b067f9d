from datetime import datetime, UTC
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, ValidationInfo, field_validator

from tasktracker.errors import FieldError
from tasktracker.models.task import TaskPriority, TaskStatus

TITLE_MAX_LENGTH = 255

STATUS_MESSAGE = "Status must be one of: " + ", ".join(s.value for s in TaskStatus)
PRIORITY_MESSAGE = "Priority must be one of: " + ", ".join(p.value for p in TaskPriority)
DUE_DATE_FORMAT_MESSAGE = "Due date must be in format: YYYY-MM-DD HH:MM:SS"
DUE_DATE_FUTURE_MESSAGE = "Due date must be a future date"

# pydantic error types that don't go through our validators
_TYPE_MESSAGES = {
    ("title", "missing"): "Task title is required",
    ("due_date", "datetime_parsing"): DUE_DATE_FORMAT_MESSAGE,
    ("due_date", "datetime_from_date_parsing"): DUE_DATE_FORMAT_MESSAGE,
    ("due_date", "datetime_type"): DUE_DATE_FORMAT_MESSAGE,
    ("description", "string_type"): "Description must be a string",
}


def _check_title(v: Any) -> str:
    if v is None:
        raise ValueError("Task title is required")
    if not isinstance(v, str):
        raise ValueError("Task title must be a string")
    v = v.strip()
    if not v:
        raise ValueError("Task title is required")
    if len(v) > TITLE_MAX_LENGTH:
        raise ValueError(f"Task title cannot exceed {TITLE_MAX_LENGTH} characters")
    return v


def _check_choice(v: Any, enum_cls, message: str):
    if isinstance(v, enum_cls):
        return v
    try:
        return enum_cls(v)
    except ValueError:
        raise ValueError(message)


def _check_due_date(v: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
    if v is None:
        return v
    if v.tzinfo is None:
        # naive timestamps are taken as UTC
        v = v.replace(tzinfo=UTC)
    now = (info.context or {}).get("now") or datetime.now(UTC)
    if v <= now:
        raise ValueError(DUE_DATE_FUTURE_MESSAGE)
    return v.astimezone(UTC)


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_rules(cls, v):
        return _check_title(v)

    @field_validator("status", mode="before")
    @classmethod
    def status_choice(cls, v):
        # explicit null falls back to the default, like omitting it
        if v is None or v == "":
            return TaskStatus.PENDING
        return _check_choice(v, TaskStatus, STATUS_MESSAGE)

    @field_validator("priority", mode="before")
    @classmethod
    def priority_choice(cls, v):
        if v is None or v == "":
            return TaskPriority.MEDIUM
        return _check_choice(v, TaskPriority, PRIORITY_MESSAGE)

    @field_validator("due_date")
    @classmethod
    def due_date_in_future(cls, v, info: ValidationInfo):
        return _check_due_date(v, info)


class TaskUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_rules(cls, v):
        return _check_title(v)

    @field_validator("status", mode="before")
    @classmethod
    def status_choice(cls, v):
        return _check_choice(v, TaskStatus, STATUS_MESSAGE)

    @field_validator("priority", mode="before")
    @classmethod
    def priority_choice(cls, v):
        return _check_choice(v, TaskPriority, PRIORITY_MESSAGE)

    @field_validator("due_date")
    @classmethod
    def due_date_in_future(cls, v, info: ValidationInfo):
        return _check_due_date(v, info)


def _to_field_error(err: Mapping[str, Any]) -> FieldError:
    loc = err.get("loc") or ()
    field = str(loc[0]) if loc else "payload"
    if err.get("type") == "value_error":
        # raised by our validators; keep our own wording
        return FieldError(field, str(err["ctx"]["error"]))
    message = _TYPE_MESSAGES.get((field, err.get("type")), err.get("msg", "Invalid value"))
    return FieldError(field, message)


def validate_task_fields(
    payload: Any, partial: bool = False, now: Optional[datetime] = None
) -> Tuple[Optional[Dict[str, Any]], List[FieldError]]:
    """Validate a task payload independently of any transport.

    Returns ``(fields, [])`` on success or ``(None, errors)`` on failure. With
    ``partial=True`` only the keys present in the payload are returned. Keys
    that are not task fields (``id``, ``owner_id``, ``user_id``,
    ``created_at``...) are dropped.
    """
    schema = TaskUpdate if partial else TaskCreate
    try:
        validated = schema.model_validate(payload, context={"now": now or datetime.now(UTC)})
    except PydanticValidationError as exc:
        return None, [_to_field_error(err) for err in exc.errors()]
    return validated.model_dump(exclude_unset=partial), []


class TaskOut(BaseModel):
    id: int
    owner_id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskPageOut(BaseModel):
    items: List[TaskOut]
    page: int
    per_page: int
    total: int
    pages: int
    message: Optional[str] = None
