"""Database session factory and configuration.

Provides database connectivity and session management for the Laraflow
maintenance jobs.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session

from config import get_settings
from models.base import Base

DATABASE_URL = get_settings().DATABASE_URL

# Pool settings only apply to PostgreSQL (not SQLite)
_engine_kwargs = {
    "pool_pre_ping": True,  # Verify connections before using
    "echo": False,
}

if not DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["pool_size"] = 5
    _engine_kwargs["max_overflow"] = 10

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.query(Task).all()

    Automatically commits on success, rolls back on exception.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ping(db: Session) -> None:
    """Round-trip to the data store.

    Raises:
        sqlalchemy.exc.OperationalError: If the store is unreachable
    """
    db.execute(text("SELECT 1"))


def init_db() -> None:
    """Create all tables known to the model metadata."""
    import models  # noqa: F401 - registers every model on Base.metadata

    Base.metadata.create_all(bind=engine)
