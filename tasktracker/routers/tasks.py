from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from tasktracker.database import get_db
from tasktracker.schemas.task import TaskOut, TaskPageOut
from tasktracker.services.task_guard import TaskAccessGuard
from tasktracker.services.task_query import TaskCriteria, TaskSort
from tasktracker.services.task_store import TaskStore
from tasktracker.utils.auth import get_current_user_id

router = APIRouter(prefix="/tasks", tags=["tasks"])

NO_TASKS_MESSAGE = "No tasks found."


def get_task_store(db: Session = Depends(get_db)) -> TaskStore:
    return TaskStore(db)


def get_task_guard(store: TaskStore = Depends(get_task_store)) -> TaskAccessGuard:
    return TaskAccessGuard(store)


@router.get("/", response_model=TaskPageOut)
def list_tasks(
    status: Optional[str] = Query(None, description="pending, in-progress or completed"),
    priority: Optional[str] = Query(None, description="low, medium or high"),
    search: Optional[str] = Query(None, description="Search in title and description"),
    sort_by: Optional[str] = Query(None, description="Any task field, defaults to created_at"),
    sort_order: Optional[str] = Query(None, description="asc or desc, defaults to desc"),
    page: Optional[int] = None,
    store: TaskStore = Depends(get_task_store),
    user_id: int = Depends(get_current_user_id),
):
    """Return one page (15 tasks) of the caller's tasks.

    An empty page still answers 200, with ``message`` set so clients can tell
    "nothing matched" apart from a populated page.
    """
    criteria = TaskCriteria.from_params(status=status, priority=priority, search=search)
    sort = TaskSort.from_params(sort_by=sort_by, sort_order=sort_order)
    result = store.list(user_id, criteria, sort, page)
    return {
        "items": result.items,
        "page": result.page,
        "per_page": result.per_page,
        "total": result.total,
        "pages": result.pages,
        "message": NO_TASKS_MESSAGE if result.is_empty else None,
    }


@router.post("/", response_model=TaskOut, status_code=201)
def create_task(
    payload: Dict[str, Any] = Body(...),
    store: TaskStore = Depends(get_task_store),
    user_id: int = Depends(get_current_user_id),
):
    return store.create(user_id, payload)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, guard: TaskAccessGuard = Depends(get_task_guard), user_id: int = Depends(get_current_user_id)):
    return guard.get(task_id, user_id)


@router.put("/{task_id}", response_model=TaskOut)
@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: Dict[str, Any] = Body(...),
    guard: TaskAccessGuard = Depends(get_task_guard),
    user_id: int = Depends(get_current_user_id),
):
    return guard.update(task_id, user_id, payload)


@router.delete("/{task_id}")
def delete_task(task_id: int, guard: TaskAccessGuard = Depends(get_task_guard), user_id: int = Depends(get_current_user_id)):
    guard.delete(task_id, user_id)
    return {"detail": "Task deleted successfully"}
