"""Tests for the public translations service."""

import json
from unittest.mock import MagicMock
from uuid import UUID

import pytest
from sqlmodel import select

from api.exceptions import (
    AuthenticationError,
    DuplicateError,
    LimitReachedError,
    NotFoundError,
    ValidationError,
)
from api.services.api_key_service import APIKeyService
from api.services.language_service import LanguageService
from api.services.namespace_version_service import NamespaceVersionService
from api.services.translations_service import TranslationsService
from api.services.usage_service import UsageService
from unlingo.db.models import Language, Namespace, NamespaceVersion

from tests.db_utils import (
    get_version,
    make_language,
    make_namespace,
    make_project,
    make_workspace,
)


@pytest.fixture
def analytics():
    return MagicMock()


@pytest.fixture
def service(storage, deleter, scheduler, analytics):
    return TranslationsService(
        storage,
        APIKeyService(),
        UsageService(),
        LanguageService(storage, deleter),
        NamespaceVersionService(storage, deleter),
        scheduler=scheduler,
        analytics=analytics,
    )


def setup_project(session, identity, workspace):
    project = make_project(session, workspace)
    namespace = make_namespace(session, project, "common")
    _, key = APIKeyService().generate_api_key(
        session, identity, workspace.id, project.id, "CI"
    )
    return project, namespace, key


def store_json(storage, content):
    return storage.store(json.dumps(content).encode(), "application/json")


# =============================================================================
# Reads
# =============================================================================


class TestGetTranslations:
    """Tests for fetching translations with an API key."""

    def test_all_languages_of_active_version(
        self, session, service, storage, workspace, identity
    ):
        project, namespace, key = setup_project(session, identity, workspace)
        main = get_version(session, namespace)
        make_language(session, main, "en", store_json(storage, {"hi": "Hello"}), primary=True)
        make_language(session, main, "de", store_json(storage, {"hi": "Hallo"}))
        make_language(session, main, "fr")

        result = service.get_translations(session, key, "common")

        assert result["namespace"] == "common"
        assert result["version"] == "main"
        assert result["translations"] == {
            "de": {"hi": "Hallo"},
            "en": {"hi": "Hello"},
            "fr": {},
        }
        assert result["metadata"]["languages"] == ["de", "en", "fr"]
        assert result["metadata"]["project_id"] == str(project.id)
        session.refresh(workspace)
        assert workspace.usage_requests == 1

    def test_single_language(self, session, service, storage, workspace, identity):
        _, namespace, key = setup_project(session, identity, workspace)
        make_language(
            session, get_version(session, namespace), "en-US",
            store_json(storage, {"hi": "Hi"}), primary=True,
        )

        result = service.get_translations(session, key, "common", language="en-us")

        assert result["translations"] == {"hi": "Hi"}

    def test_tracks_fetch(
        self, session, service, scheduler, analytics, workspace, identity
    ):
        _, _, key = setup_project(session, identity, workspace)
        service.get_translations(session, key, "common")

        fn, args, _ = scheduler.calls[0]
        assert fn is analytics.track
        assert args[0] == "translations_fetched"
        assert args[1]["namespace"] == "common"

    def test_unknown_namespace(self, session, service, workspace, identity):
        _, _, key = setup_project(session, identity, workspace)
        with pytest.raises(NotFoundError):
            service.get_translations(session, key, "missing")

    def test_unknown_version(self, session, service, workspace, identity):
        _, _, key = setup_project(session, identity, workspace)
        with pytest.raises(NotFoundError):
            service.get_translations(session, key, "common", version="9.9.9")

    def test_bad_key(self, session, service, workspace, identity):
        setup_project(session, identity, workspace)
        with pytest.raises(AuthenticationError):
            service.get_translations(session, "ulg_live_nope", "common")

    def test_request_hard_limit(self, session, service, identity):
        workspace = make_workspace(session, "org_a", requests=0)
        _, _, key = setup_project(session, identity, workspace)
        with pytest.raises(LimitReachedError):
            service.get_translations(session, key, "common")


# =============================================================================
# Publish
# =============================================================================


class TestPublishTranslations:
    """Tests for publishing a new version through the API."""

    def test_publish_activates_new_version(
        self, session, service, storage, workspace, identity
    ):
        _, namespace, key = setup_project(session, identity, workspace)
        translations = {"en": {"hi": "Hello"}, "de": {"hi": "Hallo"}}

        result = service.publish_translations(session, key, "common", "1.0.0", translations)

        assert result["languages"] == ["en", "de"]
        assert result["is_active"] is True
        version = session.get(NamespaceVersion, UUID(result["version_id"]))
        english = session.exec(
            select(Language).where(
                Language.namespace_version_id == version.id,
                Language.language_code == "en",
            )
        ).one()
        assert version.primary_language_id == english.id
        assert version.json_schema_file_id in storage
        assert get_version(session, namespace).is_active is False

        namespace = session.get(Namespace, namespace.id)
        assert namespace.usage_versions == 2
        assert namespace.usage_languages == 2

        fetched = service.get_translations(session, key, "common")
        assert fetched["version"] == "1.0.0"
        assert fetched["translations"]["de"] == {"hi": "Hallo"}

    def test_duplicate_version(self, session, service, workspace, identity):
        _, _, key = setup_project(session, identity, workspace)
        with pytest.raises(DuplicateError):
            service.publish_translations(session, key, "common", "main", {"en": {}})

    def test_language_limit_allows_exact_count(self, session, service, identity):
        workspace = make_workspace(session, "org_a", languages_per_version=2)
        _, _, key = setup_project(session, identity, workspace)

        service.publish_translations(
            session, key, "common", "1.0.0", {"en": {}, "de": {}}
        )
        with pytest.raises(LimitReachedError):
            service.publish_translations(
                session, key, "common", "2.0.0", {"en": {}, "de": {}, "fr": {}}
            )

    def test_version_limit(self, session, service, storage, identity):
        workspace = make_workspace(session, "org_a", versions_per_namespace=1)
        _, _, key = setup_project(session, identity, workspace)

        with pytest.raises(LimitReachedError):
            service.publish_translations(session, key, "common", "1.0.0", {"en": {}})
        assert len(storage) == 0

    @pytest.mark.parametrize(
        "translations",
        [{}, {"en": "Hello"}, {"en": {}, "EN": {}}, {"english": {}}],
    )
    def test_invalid_payload(self, session, service, workspace, identity, translations):
        _, _, key = setup_project(session, identity, workspace)
        with pytest.raises(ValidationError):
            service.publish_translations(session, key, "common", "1.0.0", translations)
