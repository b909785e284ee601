"""Release routes.

A release pins a list of (namespace, version) pairs under a tag. The
manifest is checked against the project when written; reading a release
back with /resolved reports pairs whose version has since been deleted.
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
    get_release_service,
)
from api.services import ReleaseService
from api.services.access import not_found


router = APIRouter(prefix="/v1/w/{workspace_id}", tags=["releases"])

ReleaseServiceDep = Annotated[ReleaseService, Depends(get_release_service)]


# =============================================================================
# Request/Response Models
# =============================================================================


class NamespaceVersionPair(BaseModel):
    namespace_id: UUID
    version_id: UUID


class CreateReleaseRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    tag: str = Field(min_length=1, max_length=50)
    namespace_versions: list[NamespaceVersionPair] = Field(default_factory=list)


class UpdateReleaseRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    tag: Optional[str] = Field(None, min_length=1, max_length=50)
    namespace_versions: Optional[list[NamespaceVersionPair]] = None


class ReleaseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    name: str
    tag: str
    namespace_versions: list[NamespaceVersionPair]
    created_at: datetime


class ResolvedPairRead(BaseModel):
    namespace_id: UUID
    version_id: UUID
    namespace_name: Optional[str] = None
    version: Optional[str] = None
    resolved: bool


class ResolvedReleaseRead(ReleaseRead):
    pairs: list[ResolvedPairRead]


def _pairs(items: Optional[list[NamespaceVersionPair]]):
    if items is None:
        return None
    return [(item.namespace_id, item.version_id) for item in items]


# =============================================================================
# Releases
# =============================================================================


@router.get("/projects/{project_id}/releases", response_model=CursorPage[ReleaseRead])
async def list_releases(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: ReleaseServiceDep,
):
    result = service.get_releases(session, identity, workspace_id, project_id, pagination)
    return CursorPage[ReleaseRead].from_result(result, ReleaseRead.model_validate)


@router.post(
    "/projects/{project_id}/releases",
    response_model=ReleaseRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_release(
    workspace_id: UUID,
    project_id: UUID,
    request: CreateReleaseRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ReleaseServiceDep,
):
    release = service.create_release(
        session,
        identity,
        workspace_id,
        project_id,
        request.name,
        request.tag,
        _pairs(request.namespace_versions),
    )
    return ReleaseRead.model_validate(release)


@router.get("/releases/{release_id}", response_model=ReleaseRead)
async def get_release(
    workspace_id: UUID,
    release_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ReleaseServiceDep,
):
    release = service.get_release(session, identity, workspace_id, release_id)
    if release is None:
        raise not_found("Release")
    return ReleaseRead.model_validate(release)


@router.get("/releases/{release_id}/resolved", response_model=ResolvedReleaseRead)
async def resolve_release(
    workspace_id: UUID,
    release_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ReleaseServiceDep,
):
    resolved = service.resolve_release(session, identity, workspace_id, release_id)
    if resolved is None:
        raise not_found("Release")
    return ResolvedReleaseRead(
        **ReleaseRead.model_validate(resolved.release).model_dump(),
        pairs=[
            ResolvedPairRead(
                namespace_id=pair.namespace_id,
                version_id=pair.version_id,
                namespace_name=pair.namespace.name if pair.namespace else None,
                version=pair.version.version if pair.version else None,
                resolved=pair.resolved,
            )
            for pair in resolved.pairs
        ],
    )


@router.patch("/releases/{release_id}", response_model=ReleaseRead)
async def update_release(
    workspace_id: UUID,
    release_id: UUID,
    request: UpdateReleaseRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ReleaseServiceDep,
):
    release = service.update_release(
        session,
        identity,
        workspace_id,
        release_id,
        name=request.name,
        tag=request.tag,
        namespace_versions=_pairs(request.namespace_versions),
    )
    return ReleaseRead.model_validate(release)


@router.delete("/releases/{release_id}", response_model=SuccessResponse)
async def delete_release(
    workspace_id: UUID,
    release_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ReleaseServiceDep,
):
    service.delete_release(session, identity, workspace_id, release_id)
    return SuccessResponse(message="Release deleted")
