"""Screenshot annotation routes.

Screenshots are uploaded as multipart forms with the image's pixel
dimensions. Containers mark percentage rectangles on a screenshot, and
key mappings attach translation keys to containers.
"""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field

from api.exceptions import NotFoundError
from api.responses import CursorPage, SuccessResponse
from api.routes.v1.dependencies import (
    IdentityDep,
    PaginationDep,
    SessionDep,
    get_screenshot_service,
)
from api.services import ScreenshotService
from api.services.access import not_found
from api.services.screenshot_service import ScreenshotWithUrl
from unlingo import config


router = APIRouter(prefix="/v1/w/{workspace_id}", tags=["screenshots"])

ScreenshotServiceDep = Annotated[ScreenshotService, Depends(get_screenshot_service)]


# =============================================================================
# Request/Response Models
# =============================================================================


class ScreenshotRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    name: str
    description: Optional[str]
    image_file_id: str
    image_size: int
    image_mime_type: str
    width: int
    height: int
    uploaded_by: Optional[str]
    uploaded_at: datetime
    created_at: datetime


class ScreenshotWithUrlRead(ScreenshotRead):
    image_url: Optional[str]


class UpdateScreenshotRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class CreateContainerRequest(BaseModel):
    """Container rectangle, in percent of the image size."""

    x: float
    y: float
    width: float
    height: float
    background_color: Optional[str] = Field(None, max_length=32)
    description: Optional[str] = Field(None, max_length=500)


class UpdateContainerRequest(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    background_color: Optional[str] = Field(None, max_length=32)
    description: Optional[str] = Field(None, max_length=500)


class ContainerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    screenshot_id: UUID
    x: float
    y: float
    width: float
    height: float
    background_color: Optional[str]
    description: Optional[str]
    created_at: datetime


class KeyAssignmentRequest(BaseModel):
    namespace_version_id: UUID
    language_id: UUID
    translation_key: str = Field(min_length=1, max_length=500)


class KeyMappingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    container_id: UUID
    namespace_version_id: UUID
    language_id: UUID
    translation_key: str
    created_at: datetime


def _with_url(item: ScreenshotWithUrl) -> ScreenshotWithUrlRead:
    return ScreenshotWithUrlRead(
        **ScreenshotRead.model_validate(item.screenshot).model_dump(),
        image_url=item.image_url,
    )


# =============================================================================
# Screenshots
# =============================================================================


@router.get(
    "/projects/{project_id}/screenshots",
    response_model=CursorPage[ScreenshotWithUrlRead],
)
async def list_screenshots(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: ScreenshotServiceDep,
):
    result = service.get_screenshots_for_project(
        session, identity, workspace_id, project_id, pagination
    )
    return CursorPage[ScreenshotWithUrlRead].from_result(result, _with_url)


@router.post(
    "/projects/{project_id}/screenshots",
    response_model=ScreenshotRead,
    status_code=status.HTTP_201_CREATED,
)
async def upload_screenshot(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
    file: UploadFile = File(...),
    name: str = Form(...),
    width: int = Form(...),
    height: int = Form(...),
    description: Optional[str] = Form(None),
):
    """Upload a screenshot image (10 MB max)."""
    # Read at most one byte past the limit
    content = await file.read(config.MAX_SCREENSHOT_BYTES + 1)
    content_type = file.content_type or "application/octet-stream"
    image_file_id = service.upload_image(
        session, identity, workspace_id, project_id, content, content_type
    )
    screenshot = service.create_screenshot(
        session,
        identity,
        workspace_id,
        project_id,
        name=name,
        image_file_id=image_file_id,
        image_size=len(content),
        image_mime_type=content_type,
        width=width,
        height=height,
        description=description,
    )
    return ScreenshotRead.model_validate(screenshot)


@router.get("/screenshots/{screenshot_id}", response_model=ScreenshotWithUrlRead)
async def get_screenshot(
    workspace_id: UUID,
    screenshot_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    item = service.get_screenshot(session, identity, workspace_id, screenshot_id)
    if item is None:
        raise not_found("Screenshot")
    return _with_url(item)


@router.patch("/screenshots/{screenshot_id}", response_model=ScreenshotRead)
async def update_screenshot(
    workspace_id: UUID,
    screenshot_id: UUID,
    request: UpdateScreenshotRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    screenshot = service.update_screenshot(
        session,
        identity,
        workspace_id,
        screenshot_id,
        name=request.name,
        description=request.description,
    )
    return ScreenshotRead.model_validate(screenshot)


@router.delete("/screenshots/{screenshot_id}", response_model=SuccessResponse)
async def delete_screenshot(
    workspace_id: UUID,
    screenshot_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    """Delete a screenshot, its containers, key mappings and image."""
    service.delete_screenshot(session, identity, workspace_id, screenshot_id)
    return SuccessResponse(message="Screenshot deleted")


# =============================================================================
# Containers
# =============================================================================


@router.get(
    "/screenshots/{screenshot_id}/containers", response_model=list[ContainerRead]
)
async def list_containers(
    workspace_id: UUID,
    screenshot_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    containers = service.get_containers_for_screenshot(
        session, identity, workspace_id, screenshot_id
    )
    return [ContainerRead.model_validate(c) for c in containers]


@router.post(
    "/screenshots/{screenshot_id}/containers",
    response_model=ContainerRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_container(
    workspace_id: UUID,
    screenshot_id: UUID,
    request: CreateContainerRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    container = service.create_container(
        session, identity, workspace_id, screenshot_id, **request.model_dump()
    )
    return ContainerRead.model_validate(container)


@router.patch("/containers/{container_id}", response_model=ContainerRead)
async def update_container(
    workspace_id: UUID,
    container_id: UUID,
    request: UpdateContainerRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    container = service.update_container(
        session, identity, workspace_id, container_id, **request.model_dump()
    )
    return ContainerRead.model_validate(container)


@router.delete("/containers/{container_id}", response_model=SuccessResponse)
async def delete_container(
    workspace_id: UUID,
    container_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    service.delete_container(session, identity, workspace_id, container_id)
    return SuccessResponse(message="Container deleted")


# =============================================================================
# Key mappings
# =============================================================================


@router.get(
    "/containers/{container_id}/keys", response_model=CursorPage[KeyMappingRead]
)
async def list_container_keys(
    workspace_id: UUID,
    container_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: ScreenshotServiceDep,
):
    result = service.get_container_mappings(
        session, identity, workspace_id, container_id, pagination
    )
    return CursorPage[KeyMappingRead].from_result(result, KeyMappingRead.model_validate)


@router.post("/containers/{container_id}/keys", response_model=KeyMappingRead)
async def assign_key(
    workspace_id: UUID,
    container_id: UUID,
    request: KeyAssignmentRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    """Assign a translation key to a container. Repeating an assignment is a no-op."""
    mapping = service.assign_key_to_container(
        session,
        identity,
        workspace_id,
        container_id,
        request.namespace_version_id,
        request.language_id,
        request.translation_key,
    )
    return KeyMappingRead.model_validate(mapping)


@router.post("/containers/{container_id}/keys/remove", response_model=SuccessResponse)
async def remove_key(
    workspace_id: UUID,
    container_id: UUID,
    request: KeyAssignmentRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    removed = service.remove_key_from_container(
        session,
        identity,
        workspace_id,
        container_id,
        request.namespace_version_id,
        request.language_id,
        request.translation_key,
    )
    if not removed:
        raise NotFoundError("Key is not assigned to this container")
    return SuccessResponse(message="Key removed")


@router.delete("/key-mappings/{mapping_id}", response_model=SuccessResponse)
async def delete_key_mapping(
    workspace_id: UUID,
    mapping_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: ScreenshotServiceDep,
):
    service.delete_key_mapping(session, identity, workspace_id, mapping_id)
    return SuccessResponse(message="Key mapping deleted")
