"""Public translations API.

Consumed by end-user applications with a project API key, sent either as
X-API-Key or as a Bearer token. Unlike the dashboard routes, every failure
is reported as 400 with a flat {"error": message} body, and responses
allow any origin.
"""

import logging
from typing import Annotated, Any, Callable, Optional

from fastapi import APIRouter, Body, Depends, Header, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError as PayloadError
from sqlalchemy.exc import SQLAlchemyError

from api.exceptions import UnlingoException
from api.routes.v1.dependencies import SessionDep, get_translations_service
from api.services import TranslationsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/translations", tags=["translations"])

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}

TranslationsServiceDep = Annotated[TranslationsService, Depends(get_translations_service)]


class PublishTranslationsRequest(BaseModel):
    version: str = Field(min_length=1, max_length=100)
    translations: dict[str, dict[str, Any]]
    description: Optional[str] = Field(None, max_length=500)


def get_api_key(
    x_api_key: Optional[str] = Header(default=None),
    authorization: Optional[str] = Header(default=None),
) -> Optional[str]:
    if x_api_key:
        return x_api_key
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


APIKeyDep = Annotated[Optional[str], Depends(get_api_key)]


def _respond(call: Callable[[], dict[str, Any]]) -> JSONResponse:
    try:
        return JSONResponse(content=call(), headers=CORS_HEADERS)
    except UnlingoException as e:
        logger.info("Translations API error: %s (code=%s)", e.message, e.error_code)
        return JSONResponse(
            status_code=400, content={"error": e.message}, headers=CORS_HEADERS
        )
    except PayloadError as e:
        logger.info("Translations API invalid payload: %d errors", e.error_count())
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body"},
            headers=CORS_HEADERS,
        )
    except (ValueError, SQLAlchemyError) as e:
        logger.warning("Translations API failure: %s", e)
        return JSONResponse(
            status_code=400, content={"error": "Request failed"}, headers=CORS_HEADERS
        )


@router.get("/{namespace}")
async def get_translations(
    namespace: str,
    session: SessionDep,
    api_key: APIKeyDep,
    service: TranslationsServiceDep,
    version: Optional[str] = Query(default=None),
    language: Optional[str] = Query(default=None),
) -> JSONResponse:
    """Fetch translations for a namespace.

    Without `version` the namespace's active version is served, falling
    back to "main". Without `language` every language is returned, keyed
    by language code.
    """
    return _respond(
        lambda: service.get_translations(session, api_key, namespace, version, language)
    )


@router.post("/{namespace}")
async def publish_translations(
    namespace: str,
    session: SessionDep,
    api_key: APIKeyDep,
    service: TranslationsServiceDep,
    payload: dict[str, Any] = Body(...),
) -> JSONResponse:
    """Publish a new version of a namespace and make it the active one."""

    def publish() -> dict[str, Any]:
        request = PublishTranslationsRequest.model_validate(payload)
        return service.publish_translations(
            session,
            api_key,
            namespace,
            request.version,
            request.translations,
            request.description,
        )

    return _respond(publish)
