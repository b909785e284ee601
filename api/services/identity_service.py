"""External API identity provisioning.

Each project owns one identity in the Unkey identities API (externalId is
the project ID) that its API keys are grouped under. Calls are scheduled
after the triggering transaction commits and never fail the caller:
errors are logged as partial failures.
"""

from typing import Optional
from uuid import UUID

import httpx

from unlingo import config
from unlingo.logging import get_logger

logger = get_logger(__name__)


class IdentityClient:
    """Client for the Unkey identities API."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        root_key: Optional[str] = None,
        timeout: float = config.EXTERNAL_HTTP_TIMEOUT,
    ):
        self.api_url = (api_url or config.UNKEY_API_URL).rstrip("/")
        self.root_key = root_key if root_key is not None else config.UNKEY_ROOT_KEY
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.root_key)

    def _post(self, operation: str, payload: dict) -> bool:
        if not self.enabled:
            logger.info("identity_sync_skipped", operation=operation, reason="no root key")
            return False
        try:
            response = httpx.post(
                f"{self.api_url}/v2/{operation}",
                json=payload,
                headers={"Authorization": f"Bearer {self.root_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("identity_sync_failed", operation=operation, error=str(e))
            return False
        return True

    def create_identity(self, project_id: UUID, workspace_id: UUID) -> bool:
        """Provision the project's identity. Returns False on failure."""
        ok = self._post(
            "identities.createIdentity",
            {
                "externalId": str(project_id),
                "meta": {"workspaceId": str(workspace_id)},
            },
        )
        if ok:
            logger.info(
                "identity_created",
                project_id=str(project_id),
                workspace_id=str(workspace_id),
            )
        return ok

    def delete_identity(self, project_id: UUID, workspace_id: UUID) -> bool:
        """Revoke the project's identity. Returns False on failure."""
        ok = self._post("identities.deleteIdentity", {"identity": str(project_id)})
        if ok:
            logger.info(
                "identity_deleted",
                project_id=str(project_id),
                workspace_id=str(workspace_id),
            )
        return ok
