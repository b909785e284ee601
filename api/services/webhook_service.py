"""Clerk webhook verification and dispatch.

Clerk delivers organization lifecycle events through Svix. Each delivery
is signed with HMAC-SHA256 over "{svix-id}.{svix-timestamp}.{body}" using
the base64 secret after the "whsec_" prefix; the svix-signature header
holds one or more space-separated "v1,<base64 signature>" entries.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Optional

from sqlmodel import Session

from api.exceptions import AuthenticationError, ValidationError
from api.services.workspace_service import WorkspaceService
from unlingo.logging import get_logger

logger = get_logger(__name__)

# Reject deliveries whose timestamp is further than this from now
TIMESTAMP_TOLERANCE_SECONDS = 5 * 60


def sign_payload(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    """Compute the v1 signature for a delivery."""
    key = base64.b64decode(secret.removeprefix("whsec_"))
    message = f"{msg_id}.{timestamp}.".encode() + body
    digest = hmac.new(key, message, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode()


def verify_signature(
    secret: str,
    msg_id: Optional[str],
    timestamp: Optional[str],
    signature_header: Optional[str],
    body: bytes,
    now: Optional[float] = None,
) -> None:
    """Verify a Svix-signed delivery.

    Raises:
        AuthenticationError: Missing headers, stale timestamp or bad signature
    """
    if not (msg_id and timestamp and signature_header):
        raise AuthenticationError("Missing webhook signature headers")
    try:
        sent_at = int(timestamp)
    except ValueError as e:
        raise AuthenticationError("Invalid webhook timestamp") from e
    now = time.time() if now is None else now
    if abs(now - sent_at) > TIMESTAMP_TOLERANCE_SECONDS:
        raise AuthenticationError("Webhook timestamp outside tolerance")

    expected = sign_payload(secret, msg_id, timestamp, body)
    for candidate in signature_header.split():
        if hmac.compare_digest(candidate, expected):
            return
    raise AuthenticationError("Invalid webhook signature")


class ClerkWebhookService:
    """Applies verified Clerk events to workspaces."""

    def __init__(self, workspace_service: Optional[WorkspaceService] = None):
        self.workspace_service = workspace_service or WorkspaceService()

    def handle(self, session: Session, body: bytes) -> dict[str, Any]:
        try:
            event = json.loads(body)
        except json.JSONDecodeError as e:
            raise ValidationError("Invalid webhook payload") from e
        if not isinstance(event, dict):
            raise ValidationError("Webhook payload must be a JSON object")

        event_type = event.get("type")
        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise ValidationError("Webhook payload missing type or data.id")
        if not event_type or not data.get("id"):
            raise ValidationError("Webhook payload missing type or data.id")

        if event_type == "organization.created":
            workspace = self.workspace_service.create_organization_workspace(
                session, data["id"]
            )
            return {"handled": True, "workspace_id": str(workspace.id)}

        logger.info("clerk_webhook_ignored", event_type=event_type)
        return {"handled": False}
