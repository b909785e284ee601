"""Analytics event ingestion (Openpanel).

Tracking is fire-and-forget: never on the critical path, failures are
swallowed and logged.
"""

from typing import Any, Optional

import httpx

from unlingo import config
from unlingo.logging import get_logger

logger = get_logger(__name__)


class AnalyticsClient:
    """Client for the Openpanel track API."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: float = config.EXTERNAL_HTTP_TIMEOUT,
    ):
        self.api_url = (api_url or config.OPENPANEL_API_URL).rstrip("/")
        self.client_id = client_id if client_id is not None else config.OPENPANEL_CLIENT_ID
        self.client_secret = (
            client_secret if client_secret is not None else config.OPENPANEL_CLIENT_SECRET
        )
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def track(self, event: str, properties: Optional[dict[str, Any]] = None) -> None:
        if not self.enabled:
            return
        try:
            response = httpx.post(
                f"{self.api_url}/track",
                json={
                    "type": "track",
                    "payload": {"name": event, "properties": properties or {}},
                },
                headers={
                    "openpanel-client-id": self.client_id,
                    "openpanel-client-secret": self.client_secret,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("analytics_track_failed", event_name=event, error=str(e))
