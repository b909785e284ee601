"""Tests for APIKeyService."""

import pytest

from api.exceptions import AuthenticationError, ValidationError
from api.services.api_key_service import (
    DISPLAY_PREFIX_LENGTH,
    KEY_PREFIX,
    APIKeyService,
    generate_key,
    hash_key,
)
from unlingo.db.models import APIKey, APIKeyStatus

from tests.db_utils import make_project


@pytest.fixture
def service():
    return APIKeyService()


def test_generate_key_format():
    key, prefix, key_hash = generate_key()

    assert key.startswith(KEY_PREFIX)
    assert len(key) == len(KEY_PREFIX) + 64
    assert prefix == key[:DISPLAY_PREFIX_LENGTH]
    assert key_hash == hash_key(key)
    assert key not in key_hash


class TestAPIKeyLifecycle:
    """Tests for creating, authenticating and deleting keys."""

    def test_only_hash_is_stored(self, session, service, workspace, identity):
        project = make_project(session, workspace)

        api_key, plaintext = service.generate_api_key(
            session, identity, workspace.id, project.id, "CI"
        )

        stored = session.get(APIKey, api_key.id)
        assert stored.key_hash == hash_key(plaintext)
        assert stored.key_prefix == plaintext[:DISPLAY_PREFIX_LENGTH]
        assert stored.workspace_id == workspace.id

    def test_authenticate_records_usage(self, session, service, workspace, identity):
        project = make_project(session, workspace)
        api_key, plaintext = service.generate_api_key(
            session, identity, workspace.id, project.id, "CI"
        )

        found = service.authenticate_api_key(session, plaintext)
        session.commit()

        assert found.id == api_key.id
        assert found.total_requests == 1
        assert found.last_used_at is not None

    @pytest.mark.parametrize("key", [None, "", "ulg_live_unknown"])
    def test_authenticate_rejects(self, session, service, key):
        with pytest.raises(AuthenticationError):
            service.authenticate_api_key(session, key)

    def test_revoked_key(self, session, service, workspace, identity):
        project = make_project(session, workspace)
        api_key, plaintext = service.generate_api_key(
            session, identity, workspace.id, project.id, "CI"
        )
        api_key.status = APIKeyStatus.REVOKED.value
        session.add(api_key)
        session.commit()

        with pytest.raises(AuthenticationError):
            service.authenticate_api_key(session, plaintext)

    def test_blank_name(self, session, service, workspace, identity):
        project = make_project(session, workspace)
        with pytest.raises(ValidationError):
            service.generate_api_key(session, identity, workspace.id, project.id, " ")

    def test_delete(self, session, service, workspace, identity):
        project = make_project(session, workspace)
        api_key, plaintext = service.generate_api_key(
            session, identity, workspace.id, project.id, "CI"
        )

        service.delete_api_key(session, identity, workspace.id, api_key.id)

        with pytest.raises(AuthenticationError):
            service.authenticate_api_key(session, plaintext)

    def test_list(self, session, service, workspace, identity):
        project = make_project(session, workspace)
        service.generate_api_key(session, identity, workspace.id, project.id, "CI")
        service.generate_api_key(session, identity, workspace.id, project.id, "Web")

        result = service.get_api_keys(session, identity, workspace.id, project.id)

        assert [key.name for key in result.page] == ["Web", "CI"]
