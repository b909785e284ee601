"""SQLModel engine and session management.

This module provides:
- Database engine creation with connection pooling
- Session factory for dependency injection
- Database initialization utilities

PostgreSQL is the primary database. SQLite is supported for local
development and tests; its driver ignores SELECT ... FOR UPDATE and
serializes writers at the file level instead.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from unlingo.config import DATABASE_URL


def build_engine(database_url: str = DATABASE_URL) -> Engine:
    """Create an engine with settings appropriate for the backend."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    # pool_pre_ping ensures connections are valid before use
    return create_engine(
        database_url,
        echo=False,  # Set to True for SQL debugging
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine()


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session.

    Usage:
        with get_session() as session:
            project = session.get(Project, project_id)

    Yields:
        SQLModel Session instance
    """
    with Session(engine) as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise


def get_session_dependency() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions.

    Usage in FastAPI:
        @router.get("/projects/{project_id}")
        def get_project(session: Session = Depends(get_session_dependency)):
            ...
    """
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Create all tables for development and tests.

    Use Alembic migrations for production.
    """
    from unlingo.db import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def drop_all_tables() -> None:
    """Drop all tables. USE WITH CAUTION - data loss will occur."""
    SQLModel.metadata.drop_all(engine)
