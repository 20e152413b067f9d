"""Owner-scoped task listing: filters, ordering and pagination.

Listing is always restricted to one owner's tasks. The filter set is a plain
value (``TaskCriteria``) so it can be built, inspected and tested on its own,
then turned into a single SQLAlchemy query by ``build_task_query``.
"""
from dataclasses import dataclass, field
from math import ceil
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query, Session

from tasktracker.errors import FieldError, ValidationError
from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.schemas.task import PRIORITY_MESSAGE, STATUS_MESSAGE

PAGE_SIZE = 15
DEFAULT_SORT_BY = "created_at"
DEFAULT_SORT_ORDER = "desc"
SORT_ORDERS = ("asc", "desc")

# every persisted column is sortable
SORTABLE_FIELDS = tuple(c.key for c in Task.__table__.columns)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class TaskCriteria:
    """Optional filters; ``None`` means the predicate is not applied."""

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: Optional[str] = None

    @classmethod
    def from_params(cls, status: Optional[str] = None, priority: Optional[str] = None,
                    search: Optional[str] = None) -> "TaskCriteria":
        errors: List[FieldError] = []
        status_value = priority_value = None
        if not _blank(status):
            try:
                status_value = TaskStatus(status.strip())
            except ValueError:
                errors.append(FieldError("status", STATUS_MESSAGE))
        if not _blank(priority):
            try:
                priority_value = TaskPriority(priority.strip())
            except ValueError:
                errors.append(FieldError("priority", PRIORITY_MESSAGE))
        if errors:
            raise ValidationError(errors)
        return cls(
            status=status_value,
            priority=priority_value,
            search=None if _blank(search) else search,
        )


@dataclass(frozen=True)
class TaskSort:
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER

    @classmethod
    def from_params(cls, sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> "TaskSort":
        sort_by = DEFAULT_SORT_BY if _blank(sort_by) else sort_by.strip()
        sort_order = DEFAULT_SORT_ORDER if _blank(sort_order) else sort_order.strip().lower()
        errors = []
        if sort_by not in SORTABLE_FIELDS:
            errors.append(FieldError("sort_by", "Sort field must be one of: " + ", ".join(SORTABLE_FIELDS)))
        if sort_order not in SORT_ORDERS:
            errors.append(FieldError("sort_order", "Sort order must be one of: asc, desc"))
        if errors:
            raise ValidationError(errors)
        return cls(sort_by=sort_by, sort_order=sort_order)


@dataclass
class TaskPage:
    items: List[Task] = field(default_factory=list)
    page: int = 1
    per_page: int = PAGE_SIZE
    total: int = 0

    @property
    def pages(self) -> int:
        return ceil(self.total / self.per_page) if self.total > 0 else 1

    @property
    def is_empty(self) -> bool:
        return not self.items


def _like_pattern(term: str) -> str:
    # match the term literally, not as a LIKE pattern
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_task_query(db: Session, owner_id: int, criteria: TaskCriteria,
                     sort: Optional[TaskSort] = None) -> Query:
    """Compose the filtered, ordered query over ``owner_id``'s tasks."""
    sort = sort or TaskSort()
    predicates = [Task.owner_id == owner_id]
    if criteria.status is not None:
        predicates.append(Task.status == criteria.status)
    if criteria.priority is not None:
        predicates.append(Task.priority == criteria.priority)
    if criteria.search:
        pattern = _like_pattern(criteria.search)
        predicates.append(or_(
            Task.title.ilike(pattern, escape="\\"),
            Task.description.ilike(pattern, escape="\\"),
        ))

    column = getattr(Task, sort.sort_by)
    if sort.sort_order == "asc":
        ordering = [column.asc(), Task.id.asc()]
    else:
        ordering = [column.desc(), Task.id.desc()]
    return db.query(Task).filter(and_(*predicates)).order_by(*ordering)


def paginate(query: Query, page: Optional[int] = None, per_page: int = PAGE_SIZE) -> TaskPage:
    # normalize page
    if page is None or page < 1:
        page = 1
    total = query.order_by(None).count()
    offset = (page - 1) * per_page
    if offset >= total:
        # past the last page; the offset may not even fit the database integer
        return TaskPage(items=[], page=page, per_page=per_page, total=total)
    items = query.limit(per_page).offset(offset).all()
    return TaskPage(items=items, page=page, per_page=per_page, total=total)
