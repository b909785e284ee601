"""Test database helpers.

Tests run against in-memory SQLite. StaticPool keeps a single connection
so every session in a test sees the same database.
"""

from typing import Optional

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from unlingo.db import models  # noqa: F401
from unlingo.db.models import (
    Language,
    MAIN_VERSION,
    Namespace,
    NamespaceVersion,
    Project,
    Workspace,
)
from unlingo.config import FREE_PLAN_LIMITS
from api.services.workspace_service import apply_limits


def create_test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


# =============================================================================
# Seed helpers
# =============================================================================
# These insert rows directly, bypassing services, so tests can set up
# arbitrary (including inconsistent) states.


def make_workspace(session: Session, clerk_id: str, **limits: int) -> Workspace:
    workspace = Workspace(clerk_id=clerk_id, type="team")
    apply_limits(workspace, FREE_PLAN_LIMITS)
    for name, value in limits.items():
        setattr(workspace, f"limit_{name}", value)
    session.add(workspace)
    session.commit()
    session.refresh(workspace)
    return workspace


def make_project(session: Session, workspace: Workspace, name: str = "Web") -> Project:
    project = Project(workspace_id=workspace.id, name=name)
    workspace.usage_projects += 1
    session.add(project)
    session.add(workspace)
    session.commit()
    session.refresh(project)
    return project


def make_namespace(session: Session, project: Project, name: str = "common") -> Namespace:
    namespace = Namespace(project_id=project.id, name=name, usage_versions=1)
    session.add(namespace)
    session.flush()
    session.add(
        NamespaceVersion(namespace_id=namespace.id, version=MAIN_VERSION, is_active=True)
    )
    project.usage_namespaces += 1
    session.add(project)
    session.commit()
    session.refresh(namespace)
    return namespace


def get_version(session: Session, namespace: Namespace, version: str = MAIN_VERSION):
    return session.exec(
        select(NamespaceVersion).where(
            NamespaceVersion.namespace_id == namespace.id,
            NamespaceVersion.version == version,
        )
    ).one()


def make_language(
    session: Session,
    version: NamespaceVersion,
    code: str,
    file_id: Optional[str] = None,
    primary: bool = False,
) -> Language:
    namespace = session.get(Namespace, version.namespace_id)
    language = Language(
        namespace_version_id=version.id,
        language_code=code,
        file_id=file_id,
        file_size=10 if file_id else None,
    )
    session.add(language)
    session.flush()
    version.usage_languages += 1
    namespace.usage_languages += 1
    if primary:
        version.primary_language_id = language.id
    session.add(version)
    session.add(namespace)
    session.commit()
    session.refresh(language)
    return language
