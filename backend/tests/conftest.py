"""Pytest fixtures for the Laraflow maintenance jobs.

Provides reusable test fixtures for:
- Database session on an in-memory SQLite database, fresh per test
- A project owner, an assignee, a project and a list
- A task factory and a controllable clock

Usage:
    def test_something(db_session, make_task, clock):
        task = make_task(due_date=date(2024, 1, 10))
        ...
"""

import os
import sys
from datetime import datetime
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("MAIL_ENABLED", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Callable, Generator

from models import Base, Project, Task, TaskList, User


test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FixedClock:
    """Clock returning a settable instant; pass as ``clock=`` to jobs."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 20, 12, 0, 0))


@pytest.fixture
def owner(db_session: Session) -> User:
    """Create the project owner."""
    user = User(name="Olivia Owner", email="owner@test.com")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def assignee(db_session: Session) -> User:
    """Create a user tasks get assigned to."""
    user = User(name="Avery Assignee", email="assignee@test.com")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def project(db_session: Session, owner: User) -> Project:
    project = Project(user_id=owner.id, name="Website Relaunch", color="#3b82f6")
    db_session.add(project)
    db_session.commit()
    db_session.refresh(project)
    return project


@pytest.fixture
def task_list(db_session: Session, project: Project) -> TaskList:
    task_list = TaskList(project_id=project.id, name="To Do", position=0)
    db_session.add(task_list)
    db_session.commit()
    db_session.refresh(task_list)
    return task_list


@pytest.fixture
def make_task(
    db_session: Session,
    project: Project,
    task_list: TaskList,
    assignee: User,
) -> Callable[..., Task]:
    """Factory creating committed tasks in the default project and list.

    Tasks are assigned to ``assignee`` unless ``assigned_to`` is given
    (pass None for an unassigned task).
    """
    counter = {"n": 0}

    def _make(**overrides) -> Task:
        counter["n"] += 1
        values = {
            "project_id": project.id,
            "list_id": task_list.id,
            "assigned_to": assignee.id,
            "title": f"Task {counter['n']}",
            "position": counter["n"],
        }
        values.update(overrides)
        task = Task(**values)
        db_session.add(task)
        db_session.commit()
        db_session.refresh(task)
        return task

    return _make
