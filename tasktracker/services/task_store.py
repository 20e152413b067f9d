import logging
from datetime import datetime, UTC
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tasktracker.errors import NotFound, StorageError, ValidationError
from tasktracker.models.task import Task
from tasktracker.schemas.task import validate_task_fields
from tasktracker.services.task_query import TaskCriteria, TaskPage, TaskSort, build_task_query, paginate

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TaskStore:
    """Persistence of task records over one SQLAlchemy session.

    Every write is a single commit; on any SQLAlchemy failure the session is
    rolled back and a ``StorageError`` is raised in its place. Ownership is
    not checked here, see ``TaskAccessGuard``.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, owner_id: int, fields: Mapping[str, Any]) -> Task:
        now = _utcnow()
        data, errors = validate_task_fields(fields, partial=False, now=now)
        if errors:
            raise ValidationError(errors)

        # owner always comes from the caller, never from the payload
        task = Task(owner_id=owner_id, created_at=now, updated_at=now, **data)
        try:
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("create", caller_id=owner_id) from exc
        logger.info("Task created successfully. Task ID: %s, User ID: %s", task.id, owner_id)
        return task

    def find(self, task_id: int) -> Optional[Task]:
        try:
            return self.db.get(Task, task_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("retrieve", task_id=task_id) from exc

    def get(self, task_id: int) -> Task:
        task = self.find(task_id)
        if task is None:
            raise NotFound(task_id)
        return task

    def update(self, task_id: int, fields: Mapping[str, Any]) -> Task:
        task = self.get(task_id)
        now = _utcnow()
        data, errors = validate_task_fields(fields, partial=True, now=now)
        if errors:
            raise ValidationError(errors)

        # the schema only knows mutable fields, so id/owner_id/created_at never get here
        for name, value in data.items():
            setattr(task, name, value)
        task.updated_at = now
        try:
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("update", task_id=task_id) from exc
        logger.info("Task updated successfully. Task ID: %s, User ID: %s", task.id, task.owner_id)
        return task

    def delete(self, task_id: int) -> None:
        task = self.get(task_id)
        owner_id = task.owner_id
        try:
            self.db.delete(task)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("delete", task_id=task_id) from exc
        logger.info("Task deleted successfully. Task ID: %s, User ID: %s", task_id, owner_id)

    def list(self, owner_id: int, criteria: Optional[TaskCriteria] = None,
             sort: Optional[TaskSort] = None, page: Optional[int] = None) -> TaskPage:
        query = build_task_query(self.db, owner_id, criteria or TaskCriteria(), sort)
        try:
            result = paginate(query, page)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("list", caller_id=owner_id) from exc
        if result.is_empty:
            logger.info("No tasks found for user ID: %s", owner_id)
        return result
