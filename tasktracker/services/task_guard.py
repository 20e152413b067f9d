import logging
from typing import Any, Mapping

from tasktracker.errors import Forbidden, NotFound, StorageError
from tasktracker.models.task import Task
from tasktracker.services.task_store import TaskStore

logger = logging.getLogger(__name__)


class TaskAccessGuard:
    """Authorizes single-task operations before they reach the store.

    The lookup always happens first: an unknown id is ``NotFound`` for every
    caller, and only an existing task owned by someone else is ``Forbidden``.
    """

    def __init__(self, store: TaskStore):
        self.store = store

    def _authorize(self, task_id: int, caller_id: int, action: str) -> Task:
        try:
            task = self.store.find(task_id)
        except StorageError as exc:
            exc.caller_id = caller_id
            raise
        if task is None:
            logger.warning("Task not found for %s. Task ID: %s, User ID: %s", action, task_id, caller_id)
            raise NotFound(task_id)
        if task.owner_id != caller_id:
            logger.warning("Unauthorized %s attempt. Task ID: %s, User ID: %s", action, task_id, caller_id)
            raise Forbidden(task_id, caller_id)
        return task

    def get(self, task_id: int, caller_id: int) -> Task:
        return self._authorize(task_id, caller_id, "retrieval")

    def update(self, task_id: int, caller_id: int, fields: Mapping[str, Any]) -> Task:
        self._authorize(task_id, caller_id, "update")
        try:
            return self.store.update(task_id, fields)
        except StorageError as exc:
            exc.caller_id = caller_id
            raise

    def delete(self, task_id: int, caller_id: int) -> None:
        self._authorize(task_id, caller_id, "deletion")
        try:
            self.store.delete(task_id)
        except StorageError as exc:
            exc.caller_id = caller_id
            raise
