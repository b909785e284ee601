"""Language routes: translation files within a namespace version."""

from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from api.responses import CursorPage, SuccessResponse
from api.routes.v1.dependencies import (
    IdentityDep,
    PaginationDep,
    SessionDep,
    get_language_service,
)
from api.services import LanguageService
from api.services.access import not_found


router = APIRouter(prefix="/v1/w/{workspace_id}", tags=["languages"])

LanguageServiceDep = Annotated[LanguageService, Depends(get_language_service)]


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateLanguageRequest(BaseModel):
    language_code: str = Field(min_length=2, max_length=5, examples=["en", "pt-BR"])


class LanguageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    namespace_version_id: UUID
    language_code: str
    file_id: Optional[str]
    file_size: Optional[int]
    created_at: datetime


class LanguageCreatedResponse(LanguageRead):
    """New language plus the primary language's file, usable as a template."""

    primary_file_id: Optional[str]


class LanguageDetail(LanguageRead):
    is_primary: bool
    namespace_id: UUID
    namespace_name: str
    version: str
    project_id: UUID


# =============================================================================
# Languages
# =============================================================================


@router.get("/versions/{version_id}/languages", response_model=CursorPage[LanguageRead])
async def list_languages(
    workspace_id: UUID,
    version_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    pagination: PaginationDep,
    service: LanguageServiceDep,
):
    result = service.get_languages(session, identity, workspace_id, version_id, pagination)
    return CursorPage[LanguageRead].from_result(result, LanguageRead.model_validate)


@router.get(
    "/versions/{version_id}/languages/by-code/{language_code}",
    response_model=LanguageRead,
)
async def get_language_by_code(
    workspace_id: UUID,
    version_id: UUID,
    language_code: str,
    session: SessionDep,
    identity: IdentityDep,
    service: LanguageServiceDep,
):
    language = service.get_language_by_code(
        session, identity, workspace_id, version_id, language_code
    )
    if language is None:
        raise not_found("Language")
    return LanguageRead.model_validate(language)


@router.post(
    "/versions/{version_id}/languages",
    response_model=LanguageCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_language(
    workspace_id: UUID,
    version_id: UUID,
    request: CreateLanguageRequest,
    session: SessionDep,
    identity: IdentityDep,
    service: LanguageServiceDep,
):
    """Add a language. The first language of a version becomes its primary."""
    created = service.create_language(
        session, identity, workspace_id, version_id, request.language_code
    )
    return LanguageCreatedResponse(
        **LanguageRead.model_validate(created.language).model_dump(),
        primary_file_id=created.primary_file_id,
    )


@router.get("/languages/{language_id}", response_model=LanguageDetail)
async def get_language(
    workspace_id: UUID,
    language_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: LanguageServiceDep,
):
    context = service.get_language(session, identity, workspace_id, language_id)
    if context is None:
        raise not_found("Language")
    return LanguageDetail(
        **LanguageRead.model_validate(context.language).model_dump(),
        is_primary=context.is_primary,
        namespace_id=context.namespace_id,
        namespace_name=context.namespace_name,
        version=context.version,
        project_id=context.project_id,
    )


@router.delete("/languages/{language_id}", response_model=SuccessResponse)
async def delete_language(
    workspace_id: UUID,
    language_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: LanguageServiceDep,
):
    service.delete_language(session, identity, workspace_id, language_id)
    return SuccessResponse(message="Language deleted")


# =============================================================================
# Content
# =============================================================================


@router.get("/languages/{language_id}/content")
async def get_language_content(
    workspace_id: UUID,
    language_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: LanguageServiceDep,
) -> dict[str, Any]:
    """Translation file of the language. Empty object if none was saved yet."""
    content = service.get_language_content(session, identity, workspace_id, language_id)
    return content if content is not None else {}


@router.put("/languages/{language_id}/content", response_model=LanguageRead)
async def update_language_content(
    workspace_id: UUID,
    language_id: UUID,
    session: SessionDep,
    identity: IdentityDep,
    service: LanguageServiceDep,
    content: dict[str, Any] = Body(...),
):
    """Replace the translation file. Saving the primary language regenerates the schema."""
    language = service.update_language_content(
        session, identity, workspace_id, language_id, content
    )
    return LanguageRead.model_validate(language)
