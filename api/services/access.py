"""Tenant resolution and ownership-chain verification.

Every service call re-verifies, from scratch, that the caller's
organization owns the workspace and that each record on the path from
the target up to that workspace points at the expected parent:

    Workspace > Project > {Namespace, Screenshot, Release, APIKey}
              > {NamespaceVersion, ScreenshotContainer}
              > {Language, ScreenshotKeyMapping}

Nothing here is cached between calls.

Lookups distinguish "does not exist" (walk_* returns None) from "exists
but belongs elsewhere" (AccessDeniedError). Mutations turn None into
NotFoundError with `expect()`.
"""

from dataclasses import dataclass
from typing import Any, Optional, TypeVar
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from api.auth.identity import Identity
from api.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    DuplicateError,
    NotFoundError,
)
from unlingo.db.models import (
    APIKey,
    Language,
    Namespace,
    NamespaceVersion,
    Project,
    Release,
    Screenshot,
    ScreenshotContainer,
    ScreenshotKeyMapping,
    Workspace,
)

T = TypeVar("T")


@dataclass
class Chain:
    """A verified path from a target record up to its workspace."""

    workspace: Workspace
    project: Optional[Project] = None
    namespace: Optional[Namespace] = None
    version: Optional[NamespaceVersion] = None
    language: Optional[Language] = None
    release: Optional[Release] = None
    screenshot: Optional[Screenshot] = None
    container: Optional[ScreenshotContainer] = None
    mapping: Optional[ScreenshotKeyMapping] = None
    api_key: Optional[APIKey] = None


# =============================================================================
# Workspace
# =============================================================================


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise AuthenticationError()
    return identity


def resolve_workspace(
    session: Session,
    identity: Optional[Identity],
    workspace_id: UUID,
    for_update: bool = False,
) -> Workspace:
    """Confirm the caller's organization is bound to the workspace.

    Raises:
        AuthenticationError: No identity
        NotFoundError: Workspace does not exist
        AccessDeniedError: Workspace is bound to another organization
    """
    identity = require_identity(identity)
    workspace = session.get(Workspace, workspace_id)
    if workspace is None:
        raise NotFoundError("Workspace not found or access denied")
    if not identity.org_id or workspace.clerk_id != identity.org_id:
        raise AccessDeniedError("Workspace not found or access denied")
    if for_update:
        lock(session, workspace)
    return workspace


# =============================================================================
# Chain walking
# =============================================================================


def _parent(session: Session, model: Any, parent_id: UUID) -> Any:
    parent = session.get(model, parent_id)
    if parent is None:
        # Orphaned record: its chain cannot reach any workspace
        raise AccessDeniedError()
    return parent


def walk_project(session: Session, workspace: Workspace, project_id: UUID) -> Optional[Chain]:
    project = session.get(Project, project_id)
    if project is None:
        return None
    if project.workspace_id != workspace.id:
        raise AccessDeniedError("Project not found or access denied")
    return Chain(workspace=workspace, project=project)


def _walk_project_child(
    session: Session, workspace: Workspace, model: Any, row_id: UUID, label: str
) -> Optional[tuple[Any, Chain]]:
    row = session.get(model, row_id)
    if row is None:
        return None
    project = _parent(session, Project, row.project_id)
    if project.workspace_id != workspace.id:
        raise AccessDeniedError(f"{label} not found or access denied")
    return row, Chain(workspace=workspace, project=project)


def walk_namespace(
    session: Session, workspace: Workspace, namespace_id: UUID
) -> Optional[Chain]:
    found = _walk_project_child(session, workspace, Namespace, namespace_id, "Namespace")
    if found is None:
        return None
    namespace, chain = found
    chain.namespace = namespace
    return chain


def walk_version(
    session: Session, workspace: Workspace, version_id: UUID
) -> Optional[Chain]:
    version = session.get(NamespaceVersion, version_id)
    if version is None:
        return None
    chain = walk_namespace(session, workspace, version.namespace_id)
    if chain is None:
        raise AccessDeniedError("Version not found or access denied")
    chain.version = version
    return chain


def walk_language(
    session: Session, workspace: Workspace, language_id: UUID
) -> Optional[Chain]:
    language = session.get(Language, language_id)
    if language is None:
        return None
    chain = walk_version(session, workspace, language.namespace_version_id)
    if chain is None:
        raise AccessDeniedError("Language not found or access denied")
    chain.language = language
    return chain


def walk_release(
    session: Session, workspace: Workspace, release_id: UUID
) -> Optional[Chain]:
    found = _walk_project_child(session, workspace, Release, release_id, "Release")
    if found is None:
        return None
    release, chain = found
    chain.release = release
    return chain


def walk_screenshot(
    session: Session, workspace: Workspace, screenshot_id: UUID
) -> Optional[Chain]:
    found = _walk_project_child(
        session, workspace, Screenshot, screenshot_id, "Screenshot"
    )
    if found is None:
        return None
    screenshot, chain = found
    chain.screenshot = screenshot
    return chain


def walk_container(
    session: Session, workspace: Workspace, container_id: UUID
) -> Optional[Chain]:
    container = session.get(ScreenshotContainer, container_id)
    if container is None:
        return None
    chain = walk_screenshot(session, workspace, container.screenshot_id)
    if chain is None:
        raise AccessDeniedError("Container not found or access denied")
    chain.container = container
    return chain


def walk_mapping(
    session: Session, workspace: Workspace, mapping_id: UUID
) -> Optional[Chain]:
    mapping = session.get(ScreenshotKeyMapping, mapping_id)
    if mapping is None:
        return None
    chain = walk_container(session, workspace, mapping.container_id)
    if chain is None:
        raise AccessDeniedError("Key mapping not found or access denied")
    chain.mapping = mapping
    return chain


def walk_api_key(
    session: Session, workspace: Workspace, api_key_id: UUID
) -> Optional[Chain]:
    found = _walk_project_child(session, workspace, APIKey, api_key_id, "API key")
    if found is None:
        return None
    api_key, chain = found
    if api_key.workspace_id != workspace.id:
        raise AccessDeniedError("API key not found or access denied")
    chain.api_key = api_key
    return chain


def not_found(label: str) -> NotFoundError:
    """The error for a missing record, worded like a denied one."""
    return NotFoundError(f"{label} not found or access denied")


def expect(chain: Optional[T], label: str) -> T:
    """Turn a missing walk result into NotFoundError."""
    if chain is None:
        raise not_found(label)
    return chain


# =============================================================================
# Transactions
# =============================================================================


def lock(session: Session, *rows: Any) -> None:
    """Re-read rows under SELECT ... FOR UPDATE.

    Counter-holding parents are locked before their counters are compared
    against limits, so concurrent writers to the same parent serialize.
    Always lock top-down (workspace, project, namespace, version).
    """
    # refresh() discards unflushed changes on these rows
    session.flush()
    for row in rows:
        session.refresh(row, with_for_update=True)


def commit_unique(session: Session, message: str) -> None:
    """Commit, reporting a unique-constraint race as DuplicateError."""
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise DuplicateError(message) from e
