import logging

from fastapi.testclient import TestClient

from tasktracker.main import app
from tasktracker.routers.tasks import get_task_store


def _exploding_store():
    raise RuntimeError("unexpected")


def test_unexpected_errors_become_generic_500(alice, caplog):
    _, headers = alice
    client = TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides[get_task_store] = _exploding_store
    caplog.set_level(logging.ERROR, logger="tasktracker")
    try:
        r = client.get("/tasks/", headers=headers)
    finally:
        app.dependency_overrides.pop(get_task_store, None)

    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}
    assert "Unhandled error on GET /tasks/" in caplog.text


def test_http_exceptions_keep_their_status(client: TestClient):
    r = client.get("/tasks/", headers={"Authorization": "Bearer nonsense"})
    assert r.status_code == 401
    assert r.json() == {"detail": "Invalid token"}
