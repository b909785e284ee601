"""Database infrastructure for SQLModel + PostgreSQL.

Usage:
    from unlingo.db import get_session, engine

    with get_session() as session:
        project = session.get(Project, project_id)
"""

from unlingo.db.engine import engine, get_session, init_db

__all__ = [
    "engine",
    "get_session",
    "init_db",
]
