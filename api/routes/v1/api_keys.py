"""API key routes for the public translations endpoint.

Provides endpoints for:
- Creating and listing a project's API keys
- Deleting keys
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
    get_api_key_service,
)
from api.services import APIKeyService


router = APIRouter(prefix="/v1/w/{workspace_id}", tags=["api-keys"])

APIKeyServiceDep = Annotated[APIKeyService, Depends(get_api_key_service)]


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateAPIKeyRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class APIKeyResponse(BaseModel):
    """Response model for API keys (without the key itself)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    workspace_id: UUID
    project_id: UUID
    name: str
    key_prefix: str
    status: str
    last_used_at: Optional[datetime]
    total_requests: int
    created_at: datetime


class APIKeyCreatedResponse(APIKeyResponse):
    """Response when creating an API key (includes the plaintext key)."""

    key: str  # Only shown once at creation


# =============================================================================
# API Key Management
# =============================================================================


@router.get(
    "/projects/{project_id}/api-keys", response_model=CursorPage[APIKeyResponse]
)
async def list_api_keys(
    workspace_id: UUID,
    project_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: APIKeyServiceDep,
):
    result = service.get_api_keys(session, identity, workspace_id, project_id, pagination)
    return CursorPage[APIKeyResponse].from_result(result, APIKeyResponse.model_validate)


@router.post(
    "/projects/{project_id}/api-keys",
    response_model=APIKeyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_api_key(
    workspace_id: UUID,
    project_id: UUID,
    request: CreateAPIKeyRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: APIKeyServiceDep,
):
    """Create a new API key for the project.

    The full key is only returned once at creation. Store it securely.
    """
    api_key, plaintext_key = service.generate_api_key(
        session, identity, workspace_id, project_id, request.name
    )
    return APIKeyCreatedResponse(
        **APIKeyResponse.model_validate(api_key).model_dump(), key=plaintext_key
    )


@router.delete("/api-keys/{key_id}", response_model=SuccessResponse)
async def delete_api_key(
    workspace_id: UUID,
    key_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: APIKeyServiceDep,
):
    service.delete_api_key(session, identity, workspace_id, key_id)
    return SuccessResponse(message="API key deleted")
