"""Failure outcomes of the task core.

ValidationError, NotFound and Forbidden are expected outcomes the caller can
act on. StorageError wraps persistence failures and is reported to clients as a
generic server error.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class TaskError(Exception):
    """Base class for task core failures."""


class ValidationError(TaskError):
    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))

    def as_dict(self) -> Dict[str, List[str]]:
        """Group messages by field, preserving order."""
        grouped: Dict[str, List[str]] = {}
        for err in self.errors:
            grouped.setdefault(err.field, []).append(err.message)
        return grouped


class NotFound(TaskError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class Forbidden(TaskError):
    def __init__(self, task_id: int, caller_id: int):
        self.task_id = task_id
        self.caller_id = caller_id
        super().__init__(f"User {caller_id} does not own task {task_id}")


class StorageError(TaskError):
    """Underlying persistence failure.

    ``caller_id`` is filled in by whoever knows the caller (the guard, or the
    store itself for owner-scoped operations) so the failure can be logged with
    full context.
    """

    def __init__(self, operation: str, task_id: Optional[int] = None, caller_id: Optional[int] = None):
        self.operation = operation
        self.task_id = task_id
        self.caller_id = caller_id
        super().__init__(f"Storage failure during {operation}")
