import os
import tempfile
import uuid
from pathlib import Path

# point the app at a throwaway database before anything imports tasktracker
os.environ["DATABASE_URL"] = f"sqlite:///{Path(tempfile.gettempdir()) / 'tasktracker_test.db'}"

import pytest
from fastapi.testclient import TestClient

from tasktracker.main import app
from tasktracker.database import SessionLocal, Base, engine
from tasktracker.models.user import User
from tasktracker.services.task_store import TaskStore


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def store(db):
    return TaskStore(db)


@pytest.fixture
def make_user(db):
    """Insert a user row directly (no bcrypt), return its id."""
    def _make(email=None):
        user = User(email=email or f"user_{uuid.uuid4().hex[:8]}@example.com", password="not-a-real-hash")
        db.add(user)
        db.commit()
        return user.id
    return _make


def signup(client: TestClient, email: str = None, password: str = "Pass123!"):
    """Register and log in through the API; return (user_id, auth headers)."""
    email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
    r = client.post("/auth/register", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    user_id = r.json()["id"]
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return user_id, {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def alice(client):
    return signup(client, "alice@example.com")


@pytest.fixture
def bob(client):
    return signup(client, "bob@example.com")
