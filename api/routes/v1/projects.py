"""Project routes.

Routes for project CRUD within a workspace. Deleting a project removes
everything under it.
"""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from api.responses import CursorPage, SuccessResponse
from api.routes.v1.dependencies import (
    IdentityDep,
    PaginationDep,
    SessionDep,
    get_project_service,
)
from api.services import ProjectService
from api.services.access import not_found


router = APIRouter(prefix="/v1/w/{workspace_id}/projects", tags=["projects"])

ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateProjectRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class UpdateProjectRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    workspace_id: UUID
    name: str
    description: Optional[str]
    usage_namespaces: int
    created_at: datetime


# =============================================================================
# Projects
# =============================================================================


@router.get("", response_model=CursorPage[ProjectRead])
async def list_projects(
    workspace_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: ProjectServiceDep,
):
    """List projects in the workspace, newest first."""
    result = service.get_projects(session, identity, workspace_id, pagination)
    return CursorPage[ProjectRead].from_result(result, ProjectRead.model_validate)


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    workspace_id: UUID,
    request: CreateProjectRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ProjectServiceDep,
):
    """Create a project. Counts against the workspace's project limit."""
    project = service.create_project(
        session, identity, workspace_id, request.name, request.description
    )
    return ProjectRead.model_validate(project)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ProjectServiceDep,
):
    project = service.get_project(session, identity, workspace_id, project_id)
    if project is None:
        raise not_found("Project")
    return ProjectRead.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    workspace_id: UUID,
    project_id: UUID,
    request: UpdateProjectRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ProjectServiceDep,
):
    project = service.update_project(
        session,
        identity,
        workspace_id,
        project_id,
        name=request.name,
        description=request.description,
    )
    return ProjectRead.model_validate(project)


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ProjectServiceDep,
):
    """Delete a project with all its namespaces, releases, screenshots and keys."""
    service.delete_project(session, identity, workspace_id, project_id)
    return SuccessResponse(message="Project deleted")
