"""Inbound webhook routes.

Clerk organization events arrive here, signed through Svix. The signature
is checked against the raw body before anything is parsed.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.routes.v1.dependencies import SessionDep, get_webhook_service
from api.services import ClerkWebhookService
from api.services.webhook_service import verify_signature
from unlingo import config
from unlingo.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/clerk")
async def clerk_webhook(
    request: Request,
    session: SessionDep,
    service: Annotated[ClerkWebhookService, Depends(get_webhook_service)],
) -> dict[str, Any]:
    """Handle a Clerk event (organization.created provisions a workspace)."""
    secret = config.CLERK_WEBHOOK_SECRET
    if not secret:
        logger.error("clerk_webhook_secret_missing")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Webhook endpoint not configured",
        )

    body = await request.body()
    verify_signature(
        secret,
        request.headers.get("svix-id"),
        request.headers.get("svix-timestamp"),
        request.headers.get("svix-signature"),
        body,
    )
    return service.handle(session, body)
