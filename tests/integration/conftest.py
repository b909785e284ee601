"""Shared fixtures for integration tests.

Tests drive the real FastAPI app over ASGI. The database, blob storage,
scheduler and external clients are swapped through dependency overrides.
"""

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlmodel import Session

from api.auth.jwt import create_access_token
from api.main import app
from api.routes.v1.dependencies import (
    get_analytics_client,
    get_blob_storage,
    get_identity_client,
    get_task_scheduler,
)
from unlingo.db.engine import get_session_dependency


class SyncClient:
    """Synchronous wrapper around httpx AsyncClient for testing."""

    def __init__(self, app):
        self.app = app
        self.transport = ASGITransport(app=app)
        self.base_url = "http://testserver"

    def _run_async(self, coro):
        """Run async coroutine synchronously."""
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """Make async request."""
        async with AsyncClient(transport=self.transport, base_url=self.base_url) as client:
            response = await client.request(method, url, **kwargs)
            return response

    def get(self, url: str, **kwargs):
        return self._run_async(self._request("GET", url, **kwargs))

    def post(self, url: str, **kwargs):
        return self._run_async(self._request("POST", url, **kwargs))

    def put(self, url: str, **kwargs):
        return self._run_async(self._request("PUT", url, **kwargs))

    def delete(self, url: str, **kwargs):
        return self._run_async(self._request("DELETE", url, **kwargs))

    def patch(self, url: str, **kwargs):
        return self._run_async(self._request("PATCH", url, **kwargs))

    def options(self, url: str, **kwargs):
        return self._run_async(self._request("OPTIONS", url, **kwargs))


@pytest.fixture
def client(engine, storage, scheduler):
    """App client bound to the test database and in-memory storage."""

    def session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session_dependency] = session_override
    app.dependency_overrides[get_blob_storage] = lambda: storage
    app.dependency_overrides[get_task_scheduler] = lambda: scheduler
    app.dependency_overrides[get_identity_client] = lambda: MagicMock()
    app.dependency_overrides[get_analytics_client] = lambda: MagicMock()
    yield SyncClient(app)
    app.dependency_overrides.clear()


def auth_headers(subject: str = "user_a", org_id: str = "org_a") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject, org_id=org_id)}"}


@pytest.fixture
def headers():
    return auth_headers()


@pytest.fixture
def other_headers():
    return auth_headers("user_b", "org_b")
