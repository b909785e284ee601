"""Service for project operations.

Creating a project counts against the workspace's project limit and
provisions the project's external API identity once the row is committed.
Deleting one runs the full cascade.
"""

from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import DuplicateError, ValidationError
from api.services.access import (
    commit_unique,
    expect,
    resolve_workspace,
    walk_project,
)
from api.services.deletion_service import CascadeDeleter
from api.services.identity_service import IdentityClient
from api.services.usage_service import check_limit, increment
from unlingo.db.models import Project, Workspace
from unlingo.db.pagination import PageResult, PaginationOpts, paginate
from unlingo.logging import get_logger
from unlingo.scheduler import Scheduler

logger = get_logger(__name__)

MAX_NAME_LENGTH = 100
DUPLICATE_MESSAGE = "A project with this name already exists"


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Project name must be at most {MAX_NAME_LENGTH} characters")
    return name


class ProjectService:
    """Service for project CRUD within a workspace."""

    def __init__(
        self,
        deleter: CascadeDeleter,
        scheduler: Optional[Scheduler] = None,
        identity_client: Optional[IdentityClient] = None,
    ):
        self.deleter = deleter
        self.scheduler = scheduler
        self.identity_client = identity_client

    def get_projects(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        workspace = resolve_workspace(session, identity, workspace_id)
        return paginate(session, Project, Project.workspace_id == workspace.id, opts=opts)

    def get_project(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
    ) -> Optional[Project]:
        """Get a project, or None if it does not exist.

        Raises:
            AccessDeniedError: The project belongs to another workspace
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = walk_project(session, workspace, project_id)
        return chain.project if chain else None

    def create_project(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        name: str,
        description: Optional[str] = None,
    ) -> Project:
        """Create a project in the workspace.

        Raises:
            DuplicateError: Name already used in this workspace
            LimitReachedError: Workspace is at its project limit
        """
        workspace = resolve_workspace(session, identity, workspace_id, for_update=True)
        name = _clean_name(name)

        if self._name_taken(session, workspace, name):
            raise DuplicateError(DUPLICATE_MESSAGE)
        check_limit(
            workspace.usage_projects,
            workspace.limit_projects,
            "projects",
            "Project limit reached. Please upgrade your plan.",
        )

        project = Project(
            workspace_id=workspace.id,
            name=name,
            description=description,
            usage_namespaces=0,
        )
        session.add(project)
        increment(workspace, "usage_projects")
        session.add(workspace)
        commit_unique(session, DUPLICATE_MESSAGE)
        session.refresh(project)

        logger.info(
            "project_created", project_id=str(project.id), workspace_id=str(workspace_id)
        )
        if self.scheduler and self.identity_client:
            self.scheduler.run_after(
                0, self.identity_client.create_identity, project.id, workspace_id
            )
        return project

    def update_project(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Project:
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project

        if name is not None:
            name = _clean_name(name)
            if name != project.name:
                if self._name_taken(session, workspace, name, exclude_id=project.id):
                    raise DuplicateError(DUPLICATE_MESSAGE)
                project.name = name
        if description is not None:
            project.description = description

        session.add(project)
        commit_unique(session, DUPLICATE_MESSAGE)
        session.refresh(project)
        return project

    def delete_project(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        self.deleter.delete_project(session, workspace, project)

    @staticmethod
    def _name_taken(
        session: Session,
        workspace: Workspace,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        statement = select(Project).where(
            Project.workspace_id == workspace.id, Project.name == name
        )
        if exclude_id:
            statement = statement.where(Project.id != exclude_id)
        return session.exec(statement).first() is not None
