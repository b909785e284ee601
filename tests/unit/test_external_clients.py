"""Tests for the identity and analytics HTTP clients."""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import httpx

from api.services.analytics_service import AnalyticsClient
from api.services.identity_service import IdentityClient


class TestIdentityClient:
    """Tests for IdentityClient."""

    def test_disabled_without_root_key(self):
        client = IdentityClient(root_key="")
        with patch("api.services.identity_service.httpx.post") as post:
            assert client.create_identity(uuid4(), uuid4()) is False
        post.assert_not_called()

    def test_create_identity(self):
        client = IdentityClient(api_url="https://keys.test/", root_key="root")
        project_id, workspace_id = uuid4(), uuid4()

        with patch("api.services.identity_service.httpx.post") as post:
            post.return_value = MagicMock()
            assert client.create_identity(project_id, workspace_id) is True

        args, kwargs = post.call_args
        assert args[0] == "https://keys.test/v2/identities.createIdentity"
        assert kwargs["json"]["externalId"] == str(project_id)
        assert kwargs["headers"]["Authorization"] == "Bearer root"

    def test_failure_returns_false(self):
        client = IdentityClient(api_url="https://keys.test", root_key="root")
        with patch(
            "api.services.identity_service.httpx.post",
            side_effect=httpx.ConnectError("unreachable"),
        ):
            assert client.delete_identity(uuid4(), uuid4()) is False


class TestAnalyticsClient:
    def test_disabled_without_credentials(self):
        client = AnalyticsClient(client_id="", client_secret="")
        with patch("api.services.analytics_service.httpx.post") as post:
            client.track("translations_fetched")
        post.assert_not_called()

    def test_track_posts_event(self):
        client = AnalyticsClient(
            api_url="https://events.test", client_id="id", client_secret="secret"
        )
        with patch("api.services.analytics_service.httpx.post") as post:
            client.track("translations_fetched", {"namespace": "common"})

        kwargs = post.call_args.kwargs
        assert kwargs["json"]["payload"] == {
            "name": "translations_fetched",
            "properties": {"namespace": "common"},
        }

    def test_errors_swallowed(self):
        client = AnalyticsClient(
            api_url="https://events.test", client_id="id", client_secret="secret"
        )
        with patch(
            "api.services.analytics_service.httpx.post",
            side_effect=httpx.ReadTimeout("slow"),
        ):
            client.track("translations_fetched")
