"""Demo data: ``python -m tasktracker.seed``.

Tasks are inserted straight through the ORM, so overdue demo tasks are allowed
here even though the API would reject them.
"""
import logging
from datetime import datetime, timedelta, UTC
from itertools import cycle

from sqlalchemy.orm import Session

from tasktracker.config import LOG_DIR, LOG_LEVEL
from tasktracker.database import Base, SessionLocal, engine
from tasktracker.logging_setup import setup_logging
from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.models.user import User
from tasktracker.utils.auth import hash_password

logger = logging.getLogger("tasktracker.seed")

DEMO_USERS = [
    ("gilbertozioma0@gmail.com", "11111111"),
    ("john@example.com", "password"),
    ("jane@example.com", "password"),
]

# (title, description, status, priority, due in days)
DEMO_TASKS = {
    "gilbertozioma0@gmail.com": [
        ("Complete Project Documentation", "Write comprehensive README with API documentation and setup instructions", "in-progress", "high", 7),
        ("Implement User Authentication", "Set up token-based authentication", "completed", "medium", -1),
        ("Create Task CRUD Operations", "Build complete Create, Read, Update, Delete functionality for tasks", "completed", "medium", -2),
        ("Add Filtering and Pagination", "Implement task filtering by status and pagination support", "completed", "low", -3),
        ("Write Automated Tests", "Create comprehensive feature tests for all API endpoints", "pending", "high", 14),
    ],
    "john@example.com": [
        ("Review Code Quality", "Perform code review and ensure PEP 8 standards", "pending", "medium", 10),
        ("Setup CI/CD Pipeline", "Configure GitHub Actions for automated testing", "in-progress", "medium", 20),
        ("Database Optimization", "Add indexes and optimize query performance", "pending", "low", 30),
    ],
    "jane@example.com": [
        ("API Documentation", "Generate OpenAPI/Swagger documentation", "pending", "medium", 5),
        ("Security Audit", "Perform security review and penetration testing", "in-progress", "high", 3),
    ],
}

EXTRA_TASKS_OWNER = "gilbertozioma0@gmail.com"
EXTRA_TASKS = 5


def _extra_tasks(count):
    statuses = cycle(list(TaskStatus))
    priorities = cycle(list(TaskPriority))
    for i in range(1, count + 1):
        due = None if i % 2 == 0 else i * 3
        yield (f"Backlog item {i}", f"Generated backlog task number {i}", next(statuses).value, next(priorities).value, due)


def seed(db: Session) -> dict:
    """Create demo users and their tasks. Users that already exist are skipped."""
    now = datetime.now(UTC)
    created = {"users": 0, "tasks": 0}
    for email, password in DEMO_USERS:
        if db.query(User).filter(User.email == email).first():
            logger.info("Demo user %s already exists, skipping", email)
            continue
        user = User(email=email, password=hash_password(password))
        db.add(user)
        db.flush()
        created["users"] += 1

        rows = list(DEMO_TASKS.get(email, []))
        if email == EXTRA_TASKS_OWNER:
            rows.extend(_extra_tasks(EXTRA_TASKS))
        for title, description, status, priority, due_in in rows:
            db.add(Task(
                owner_id=user.id,
                title=title,
                description=description,
                status=TaskStatus(status),
                priority=TaskPriority(priority),
                due_date=None if due_in is None else now + timedelta(days=due_in),
                created_at=now,
                updated_at=now,
            ))
            created["tasks"] += 1
    db.commit()
    return created


def main():
    setup_logging(LOG_LEVEL, LOG_DIR or None)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = seed(db)
    finally:
        db.close()
    print(f"Database seeded successfully! users={created['users']} tasks={created['tasks']}")
    print("Demo users created:")
    for email, password in DEMO_USERS:
        print(f"- {email} - Password: {password}")


if __name__ == "__main__":
    main()
