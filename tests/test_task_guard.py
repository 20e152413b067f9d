import logging

import pytest

from tasktracker.errors import Forbidden, NotFound
from tasktracker.models.task import TaskStatus
from tasktracker.services.task_guard import TaskAccessGuard


@pytest.fixture
def guard(store):
    return TaskAccessGuard(store)


def test_missing_task_is_not_found_for_anyone(guard, make_user):
    stranger = make_user()
    with pytest.raises(NotFound):
        guard.get(12345, stranger)
    with pytest.raises(NotFound):
        guard.update(12345, stranger, {"title": "x"})
    with pytest.raises(NotFound):
        guard.delete(12345, stranger)


def test_other_users_task_is_forbidden(guard, store, make_user):
    owner, stranger = make_user(), make_user()
    task = store.create(owner, {"title": "private"})

    with pytest.raises(Forbidden):
        guard.get(task.id, stranger)
    with pytest.raises(Forbidden):
        guard.update(task.id, stranger, {"title": "hijacked"})
    with pytest.raises(Forbidden):
        guard.delete(task.id, stranger)

    assert store.get(task.id).title == "private"


def test_forbidden_update_is_not_validated(guard, store, make_user):
    # ownership is decided before the payload is looked at
    owner, stranger = make_user(), make_user()
    task = store.create(owner, {"title": "private"})
    with pytest.raises(Forbidden):
        guard.update(task.id, stranger, {"status": "bogus"})


def test_owner_passes_through(guard, store, make_user):
    owner = make_user()
    task = store.create(owner, {"title": "mine"})

    assert guard.get(task.id, owner).id == task.id
    updated = guard.update(task.id, owner, {"status": "completed"})
    assert updated.status is TaskStatus.COMPLETED

    guard.delete(task.id, owner)
    with pytest.raises(NotFound):
        guard.get(task.id, owner)


def test_denied_attempts_are_logged(guard, store, make_user, caplog):
    owner, stranger = make_user(), make_user()
    task = store.create(owner, {"title": "private"})
    caplog.set_level(logging.WARNING, logger="tasktracker")

    with pytest.raises(Forbidden):
        guard.delete(task.id, stranger)
    with pytest.raises(NotFound):
        guard.get(999, stranger)

    assert f"Unauthorized deletion attempt. Task ID: {task.id}, User ID: {stranger}" in caplog.text
    assert f"Task not found for retrieval. Task ID: 999, User ID: {stranger}" in caplog.text
