"""Workspace routes.

Routes for reading the caller's workspace, its contact settings and its
usage against plan limits.
"""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.routes.v1.dependencies import (
    IdentityDep,
    SessionDep,
    get_usage_service,
    get_workspace_service,
)
from api.services import UsageService, WorkspaceService
from api.services.access import not_found
from unlingo.db.models import WorkspaceRead, utcnow


router = APIRouter(prefix="/v1", tags=["workspaces"])


# =============================================================================
# Request/Response Models
# =============================================================================


class UpdateContactEmailRequest(BaseModel):
    contact_email: str = Field(min_length=3, max_length=254)


class UsageResponse(BaseModel):
    """Usage summary against the workspace's plan limits."""

    workspace_id: UUID
    is_premium: bool
    limits: dict[str, int]
    current_usage: dict[str, int]
    can_create_project: bool
    requests_remaining: int


class ReconcileResponse(BaseModel):
    corrected: int
    reconciled_at: datetime


def _read(workspace) -> WorkspaceRead:
    return WorkspaceRead(
        id=workspace.id,
        clerk_id=workspace.clerk_id,
        contact_email=workspace.contact_email,
        type=workspace.type,
        is_premium=workspace.is_premium,
        limits=workspace.limits,
        current_usage=workspace.current_usage,
        created_at=workspace.created_at,
    )


# =============================================================================
# Workspace
# =============================================================================


@router.get("/workspaces/current", response_model=WorkspaceRead)
async def get_current_workspace(
    session: SessionDep,
    identity: IdentityDep,
    service: Annotated[WorkspaceService, Depends(get_workspace_service)],
    clerk_id: Optional[str] = None,
):
    """Get the workspace bound to the caller's organization."""
    workspace = service.get_workspace_for_identity(session, identity, clerk_id)
    if workspace is None:
        raise not_found("Workspace")
    return _read(workspace)


@router.get("/w/{workspace_id}", response_model=WorkspaceRead)
async def get_workspace(
    workspace_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: Annotated[WorkspaceService, Depends(get_workspace_service)],
):
    return _read(service.get_workspace(session, identity, workspace_id))


@router.patch("/w/{workspace_id}/contact-email", response_model=WorkspaceRead)
async def update_contact_email(
    workspace_id: UUID,
    request: UpdateContactEmailRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: Annotated[WorkspaceService, Depends(get_workspace_service)],
):
    workspace = service.update_contact_email(
        session, identity, workspace_id, request.contact_email
    )
    return _read(workspace)


# =============================================================================
# Usage
# =============================================================================


@router.get("/w/{workspace_id}/usage", response_model=UsageResponse)
async def get_usage(
    workspace_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: Annotated[UsageService, Depends(get_usage_service)],
):
    """Get current usage and remaining headroom for the workspace."""
    return UsageResponse(**service.get_usage(session, identity, workspace_id))


@router.post("/w/{workspace_id}/usage/reconcile", response_model=ReconcileResponse)
async def reconcile_usage(
    workspace_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    workspaces: Annotated[WorkspaceService, Depends(get_workspace_service)],
    service: Annotated[UsageService, Depends(get_usage_service)],
):
    """Re-derive every usage counter in the workspace from live records."""
    workspace = workspaces.get_workspace(session, identity, workspace_id)
    result = service.reconcile_workspace(session, workspace.id)
    return ReconcileResponse(corrected=result["corrected"], reconciled_at=utcnow())
