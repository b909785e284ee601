"""Namespace and namespace version routes.

Namespaces are created under a project and addressed by ID afterwards.
Versions are created under a namespace, optionally as a copy of another
version of the same namespace.
"""

from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from api.exceptions import NotFoundError
from api.responses import CursorPage, SuccessResponse
from api.routes.v1.dependencies import (
    IdentityDep,
    PaginationDep,
    SessionDep,
    get_language_service,
    get_namespace_service,
    get_version_service,
)
from api.services import LanguageService, NamespaceService, NamespaceVersionService
from api.services.access import not_found


router = APIRouter(prefix="/v1/w/{workspace_id}", tags=["namespaces"])

NamespaceServiceDep = Annotated[NamespaceService, Depends(get_namespace_service)]
VersionServiceDep = Annotated[NamespaceVersionService, Depends(get_version_service)]


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateNamespaceRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class UpdateNamespaceRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class NamespaceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    name: str
    usage_versions: int
    usage_languages: int
    created_at: datetime


class NamespaceCountResponse(BaseModel):
    count: int
    limit: int
    can_create_more: bool


class CreateVersionRequest(BaseModel):
    """Request to create a namespace version.

    Set copy_from_version_id to duplicate another version's languages and
    files into the new version.
    """

    version: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    copy_from_version_id: Optional[UUID] = None


class UpdateVersionRequest(BaseModel):
    version: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class SetPrimaryLanguageRequest(BaseModel):
    language_id: UUID


class VersionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    namespace_id: UUID
    version: str
    description: Optional[str]
    is_active: bool
    usage_languages: int
    primary_language_id: Optional[UUID]
    json_schema_file_id: Optional[str]
    json_schema_size: Optional[int]
    created_at: datetime


# =============================================================================
# Namespaces
# =============================================================================


@router.get(
    "/projects/{project_id}/namespaces", response_model=CursorPage[NamespaceRead]
)
async def list_namespaces(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: NamespaceServiceDep,
):
    result = service.get_namespaces(session, identity, workspace_id, project_id, pagination)
    return CursorPage[NamespaceRead].from_result(result, NamespaceRead.model_validate)


@router.get(
    "/projects/{project_id}/namespaces/count", response_model=NamespaceCountResponse
)
async def count_namespaces(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: NamespaceServiceDep,
):
    """Namespace count against the plan limit, for the create button."""
    return NamespaceCountResponse(
        **service.get_namespace_count(session, identity, workspace_id, project_id)
    )


@router.post(
    "/projects/{project_id}/namespaces",
    response_model=NamespaceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_namespace(
    workspace_id: UUID,
    project_id: UUID,
    request: CreateNamespaceRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: NamespaceServiceDep,
):
    """Create a namespace together with its "main" version."""
    namespace = service.create_namespace(
        session, identity, workspace_id, project_id, request.name
    )
    return NamespaceRead.model_validate(namespace)


@router.get("/namespaces/{namespace_id}", response_model=NamespaceRead)
async def get_namespace(
    workspace_id: UUID,
    namespace_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: NamespaceServiceDep,
):
    namespace = service.get_namespace(session, identity, workspace_id, namespace_id)
    if namespace is None:
        raise not_found("Namespace")
    return NamespaceRead.model_validate(namespace)


@router.patch("/namespaces/{namespace_id}", response_model=NamespaceRead)
async def update_namespace(
    workspace_id: UUID,
    namespace_id: UUID,
    request: UpdateNamespaceRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: NamespaceServiceDep,
):
    namespace = service.update_namespace(
        session, identity, workspace_id, namespace_id, request.name
    )
    return NamespaceRead.model_validate(namespace)


@router.delete("/namespaces/{namespace_id}", response_model=SuccessResponse)
async def delete_namespace(
    workspace_id: UUID,
    namespace_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: NamespaceServiceDep,
):
    service.delete_namespace(session, identity, workspace_id, namespace_id)
    return SuccessResponse(message="Namespace deleted")


# =============================================================================
# Versions
# =============================================================================


@router.get(
    "/namespaces/{namespace_id}/versions", response_model=CursorPage[VersionRead]
)
async def list_versions(
    workspace_id: UUID,
    namespace_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: VersionServiceDep,
):
    result = service.get_namespace_versions(
        session, identity, workspace_id, namespace_id, pagination
    )
    return CursorPage[VersionRead].from_result(result, VersionRead.model_validate)


@router.post(
    "/namespaces/{namespace_id}/versions",
    response_model=VersionRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_version(
    workspace_id: UUID,
    namespace_id: UUID,
    request: CreateVersionRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: VersionServiceDep,
):
    version = service.create_namespace_version(
        session,
        identity,
        workspace_id,
        namespace_id,
        request.version,
        description=request.description,
        copy_from_version_id=request.copy_from_version_id,
    )
    return VersionRead.model_validate(version)


@router.get("/versions/{version_id}", response_model=VersionRead)
async def get_version(
    workspace_id: UUID,
    version_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: VersionServiceDep,
):
    version = service.get_namespace_version(session, identity, workspace_id, version_id)
    if version is None:
        raise not_found("Version")
    return VersionRead.model_validate(version)


@router.patch("/versions/{version_id}", response_model=VersionRead)
async def update_version(
    workspace_id: UUID,
    version_id: UUID,
    request: UpdateVersionRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: VersionServiceDep,
):
    version = service.update_namespace_version(
        session,
        identity,
        workspace_id,
        version_id,
        version=request.version,
        description=request.description,
    )
    return VersionRead.model_validate(version)


@router.delete("/versions/{version_id}", response_model=SuccessResponse)
async def delete_version(
    workspace_id: UUID,
    version_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: VersionServiceDep,
):
    service.delete_namespace_version(session, identity, workspace_id, version_id)
    return SuccessResponse(message="Version deleted")


@router.put("/versions/{version_id}/primary-language", response_model=VersionRead)
async def set_primary_language(
    workspace_id: UUID,
    version_id: UUID,
    request: SetPrimaryLanguageRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: VersionServiceDep,
):
    version = service.set_primary_language(
        session, identity, workspace_id, version_id, request.language_id
    )
    return VersionRead.model_validate(version)


@router.get("/versions/{version_id}/schema")
async def get_json_schema(
    workspace_id: UUID,
    version_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: Annotated[LanguageService, Depends(get_language_service)],
) -> dict[str, Any]:
    """JSON schema generated from the version's primary language."""
    schema = service.get_json_schema(session, identity, workspace_id, version_id)
    if schema is None:
        raise NotFoundError("No schema for this version")
    return schema
