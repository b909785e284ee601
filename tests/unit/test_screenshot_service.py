"""Tests for ScreenshotService."""

import pytest
from sqlmodel import select

from api.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    DuplicateError,
    InvalidReferenceError,
    ValidationError,
)
from api.services.screenshot_service import ScreenshotService
from unlingo import config
from unlingo.db.models import Namespace, ScreenshotContainer, ScreenshotKeyMapping

from tests.db_utils import get_version, make_language, make_namespace, make_project

PNG = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def service(storage, deleter):
    return ScreenshotService(storage, deleter)


@pytest.fixture
def project(session, workspace):
    return make_project(session, workspace)


def upload(service, session, identity, workspace, project, name="Home", **overrides):
    blob = service.upload_image(session, identity, workspace.id, project.id, PNG, "image/png")
    values = {
        "image_size": len(PNG),
        "image_mime_type": "image/png",
        "width": 1280,
        "height": 720,
    }
    values.update(overrides)
    return service.create_screenshot(
        session, identity, workspace.id, project.id, name, blob, **values
    )


# =============================================================================
# Screenshots
# =============================================================================


class TestCreateScreenshot:
    """Tests for screenshot creation and upload cleanup."""

    def test_create(self, session, service, storage, workspace, identity, project):
        screenshot = upload(service, session, identity, workspace, project)

        assert screenshot.uploaded_by == "user_a"
        assert screenshot.image_file_id in storage
        fetched = service.get_screenshot(session, identity, workspace.id, screenshot.id)
        assert fetched.image_url.endswith(screenshot.image_file_id)

    def test_non_image_deletes_blob(
        self, session, service, storage, workspace, identity, project
    ):
        with pytest.raises(ValidationError):
            upload(
                service, session, identity, workspace, project,
                image_mime_type="application/pdf",
            )
        assert len(storage) == 0

    def test_oversized_deletes_blob(
        self, session, service, storage, workspace, identity, project
    ):
        with pytest.raises(ValidationError):
            upload(
                service, session, identity, workspace, project,
                image_size=config.MAX_SCREENSHOT_BYTES + 1,
            )
        assert len(storage) == 0

    def test_bad_dimensions(self, session, service, storage, workspace, identity, project):
        with pytest.raises(ValidationError):
            upload(service, session, identity, workspace, project, width=0)
        assert len(storage) == 0

    def test_duplicate_name_deletes_blob(
        self, session, service, storage, workspace, identity, project
    ):
        upload(service, session, identity, workspace, project)
        with pytest.raises(DuplicateError):
            upload(service, session, identity, workspace, project)
        assert len(storage) == 1

    def test_cleanup_failure_keeps_original_error(
        self, session, service, storage, workspace, identity, project, monkeypatch
    ):
        def broken_delete(blob_id):
            raise RuntimeError("storage unavailable")

        monkeypatch.setattr(storage, "delete", broken_delete)
        with pytest.raises(ValidationError, match="dimensions"):
            upload(service, session, identity, workspace, project, height=0)
        assert len(storage) == 1

    def test_list_includes_urls(self, session, service, workspace, identity, project):
        upload(service, session, identity, workspace, project, "Home")
        upload(service, session, identity, workspace, project, "Settings")

        result = service.get_screenshots_for_project(
            session, identity, workspace.id, project.id
        )

        assert len(result.page) == 2
        assert all(item.image_url for item in result.page)

    def test_delete_removes_image_and_containers(
        self, session, service, storage, workspace, identity, project
    ):
        screenshot = upload(service, session, identity, workspace, project)
        service.create_container(
            session, identity, workspace.id, screenshot.id, 10, 10, 20, 5
        )
        image = screenshot.image_file_id

        service.delete_screenshot(session, identity, workspace.id, screenshot.id)

        assert image not in storage
        assert session.exec(select(ScreenshotContainer)).all() == []


class TestUploadImage:
    """Images are only written to storage for an authorized, valid upload."""

    def test_stores_image(self, session, service, storage, workspace, identity, project):
        blob = service.upload_image(
            session, identity, workspace.id, project.id, PNG, "image/png"
        )
        assert storage.get(blob) == PNG

    def test_unauthenticated_stores_nothing(
        self, session, service, storage, workspace, project
    ):
        with pytest.raises(AuthenticationError):
            service.upload_image(session, None, workspace.id, project.id, PNG, "image/png")
        assert len(storage) == 0

    def test_foreign_project_stores_nothing(
        self, session, service, storage, workspace, other_workspace, other_identity, project
    ):
        with pytest.raises(AccessDeniedError):
            service.upload_image(
                session, other_identity, other_workspace.id, project.id, PNG, "image/png"
            )
        assert len(storage) == 0

    def test_oversized_stores_nothing(
        self, session, service, storage, workspace, identity, project
    ):
        content = b"\0" * (config.MAX_SCREENSHOT_BYTES + 1)
        with pytest.raises(ValidationError):
            service.upload_image(
                session, identity, workspace.id, project.id, content, "image/png"
            )
        assert len(storage) == 0

    def test_non_image_stores_nothing(
        self, session, service, storage, workspace, identity, project
    ):
        with pytest.raises(ValidationError):
            service.upload_image(
                session, identity, workspace.id, project.id, b"%PDF", "application/pdf"
            )
        assert len(storage) == 0


# =============================================================================
# Containers
# =============================================================================


class TestContainers:
    @pytest.mark.parametrize(
        "rect",
        [(-1, 0, 10, 10), (0, 101, 10, 10), (0, 0, 0, 10), (0, 0, 10, 150)],
    )
    def test_rectangle_bounds(
        self, session, service, workspace, identity, project, rect
    ):
        screenshot = upload(service, session, identity, workspace, project)
        with pytest.raises(ValidationError):
            service.create_container(
                session, identity, workspace.id, screenshot.id, *rect
            )

    def test_partial_update(self, session, service, workspace, identity, project):
        screenshot = upload(service, session, identity, workspace, project)
        container = service.create_container(
            session, identity, workspace.id, screenshot.id, 10, 10, 20, 5
        )

        updated = service.update_container(
            session, identity, workspace.id, container.id, x=50, description="Header"
        )

        assert (updated.x, updated.y, updated.width) == (50, 10, 20)
        assert updated.description == "Header"


# =============================================================================
# Key mappings
# =============================================================================


class TestKeyMappings:
    """Tests for assigning translation keys to containers."""

    @pytest.fixture
    def setup(self, session, service, workspace, identity, project):
        version = get_version(session, make_namespace(session, project))
        language = make_language(session, version, "en", primary=True)
        screenshot = upload(service, session, identity, workspace, project)
        container = service.create_container(
            session, identity, workspace.id, screenshot.id, 0, 0, 50, 50
        )
        return container, version, language

    def test_assign_is_idempotent(self, session, service, workspace, identity, setup):
        container, version, language = setup

        first = service.assign_key_to_container(
            session, identity, workspace.id, container.id, version.id, language.id, "nav.home"
        )
        second = service.assign_key_to_container(
            session, identity, workspace.id, container.id, version.id, language.id, "nav.home"
        )

        assert first.id == second.id
        assert len(session.exec(select(ScreenshotKeyMapping)).all()) == 1

    def test_version_from_other_project(
        self, session, service, workspace, identity, setup
    ):
        container, _, _ = setup
        foreign = get_version(
            session, make_namespace(session, make_project(session, workspace, "Mobile"))
        )
        foreign_language = make_language(session, foreign, "en")

        with pytest.raises(InvalidReferenceError) as exc_info:
            service.assign_key_to_container(
                session, identity, workspace.id, container.id,
                foreign.id, foreign_language.id, "nav.home",
            )
        assert exc_info.value.message == "Invalid namespace version selected"

    def test_language_from_other_version(
        self, session, service, workspace, identity, project, setup
    ):
        container, version, _ = setup
        other_version = get_version(session, make_namespace(session, project, "errors"))
        other_language = make_language(session, other_version, "de")

        with pytest.raises(InvalidReferenceError) as exc_info:
            service.assign_key_to_container(
                session, identity, workspace.id, container.id,
                version.id, other_language.id, "nav.home",
            )
        assert exc_info.value.message == "Invalid language selected"

    def test_remove(self, session, service, workspace, identity, setup):
        container, version, language = setup
        service.assign_key_to_container(
            session, identity, workspace.id, container.id, version.id, language.id, "title"
        )

        assert service.remove_key_from_container(
            session, identity, workspace.id, container.id, version.id, language.id, "title"
        ) is True
        assert service.remove_key_from_container(
            session, identity, workspace.id, container.id, version.id, language.id, "title"
        ) is False

    def test_language_deletion_removes_mappings(
        self, session, service, deleter, workspace, identity, setup
    ):
        container, version, language = setup
        service.assign_key_to_container(
            session, identity, workspace.id, container.id, version.id, language.id, "title"
        )
        namespace = session.get(Namespace, version.namespace_id)

        deleter.delete_language(session, namespace, version, language)

        assert session.exec(select(ScreenshotKeyMapping)).all() == []
