"""Service for namespace operations.

Every namespace is created together with its "main" version, so a new
namespace starts with one version counted against it.
"""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import DuplicateError
from api.services.access import (
    commit_unique,
    expect,
    lock,
    resolve_workspace,
    walk_namespace,
    walk_project,
)
from api.services.deletion_service import CascadeDeleter
from api.services.usage_service import check_limit, increment
from api.services.validation import validate_namespace_name
from unlingo.db.models import MAIN_VERSION, Namespace, NamespaceVersion, Project
from unlingo.db.pagination import PageResult, PaginationOpts, paginate
from unlingo.logging import get_logger

logger = get_logger(__name__)

DUPLICATE_MESSAGE = "A namespace with this name already exists in this project"


class NamespaceService:
    """Service for namespace CRUD within a project."""

    def __init__(self, deleter: CascadeDeleter):
        self.deleter = deleter

    def get_namespaces(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        return paginate(session, Namespace, Namespace.project_id == project.id, opts=opts)

    def get_namespace(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        namespace_id: UUID,
    ) -> Optional[Namespace]:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = walk_namespace(session, workspace, namespace_id)
        return chain.namespace if chain else None

    def get_namespace_count(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
    ) -> dict[str, Any]:
        """Live namespace count for a project against the plan limit."""
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        count = session.exec(
            select(func.count())
            .select_from(Namespace)
            .where(Namespace.project_id == project.id)
        ).one()
        limit = workspace.limit_namespaces_per_project
        return {"count": count, "limit": limit, "can_create_more": count < limit}

    def create_namespace(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        name: str,
    ) -> Namespace:
        """Create a namespace and its "main" version.

        Raises:
            DuplicateError: Name already used in this project
            LimitReachedError: Project is at its namespace limit
            ValidationError: Invalid name
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        lock(session, project)
        name = validate_namespace_name(name)

        if self._name_taken(session, project, name):
            raise DuplicateError(DUPLICATE_MESSAGE)
        check_limit(
            project.usage_namespaces,
            workspace.limit_namespaces_per_project,
            "namespaces",
            "Namespace limit reached for this project. Please upgrade your plan.",
        )

        namespace = Namespace(
            project_id=project.id, name=name, usage_languages=0, usage_versions=1
        )
        session.add(namespace)
        session.flush()
        session.add(
            NamespaceVersion(
                namespace_id=namespace.id,
                version=MAIN_VERSION,
                usage_languages=0,
                is_active=True,
            )
        )
        increment(project, "usage_namespaces")
        session.add(project)
        commit_unique(session, DUPLICATE_MESSAGE)
        session.refresh(namespace)

        logger.info(
            "namespace_created", namespace_id=str(namespace.id), project_id=str(project.id)
        )
        return namespace

    def update_namespace(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        namespace_id: UUID,
        name: str,
    ) -> Namespace:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_namespace(session, workspace, namespace_id), "Namespace")
        namespace = chain.namespace
        name = validate_namespace_name(name)

        if name != namespace.name:
            if self._name_taken(session, chain.project, name, exclude_id=namespace.id):
                raise DuplicateError(DUPLICATE_MESSAGE)
            namespace.name = name
            session.add(namespace)
            commit_unique(session, DUPLICATE_MESSAGE)
            session.refresh(namespace)
        return namespace

    def delete_namespace(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        namespace_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_namespace(session, workspace, namespace_id), "Namespace")
        self.deleter.delete_namespace(session, chain.project, chain.namespace)

    @staticmethod
    def _name_taken(
        session: Session,
        project: Project,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        statement = select(Namespace).where(
            Namespace.project_id == project.id, Namespace.name == name
        )
        if exclude_id:
            statement = statement.where(Namespace.id != exclude_id)
        return session.exec(statement).first() is not None
