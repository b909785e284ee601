"""Tests for the cascading deletion engine."""

from unittest.mock import MagicMock

import pytest
from sqlmodel import select

from api.services.deletion_service import CascadeDeleter
from unlingo import scheduler as scheduler_module
from unlingo.db.models import (
    APIKey,
    Language,
    Namespace,
    NamespaceVersion,
    Project,
    Release,
    Screenshot,
    ScreenshotContainer,
    ScreenshotKeyMapping,
)
from unlingo.db.models.release import manifest_entry
from unlingo.scheduler import Scheduler

from tests.db_utils import get_version, make_language, make_namespace, make_project


def populate(session, storage, workspace):
    """A project with two namespaces, a screenshot, a release and an API key."""
    project = make_project(session, workspace)
    common = make_namespace(session, project, "common")
    errors = make_namespace(session, project, "errors")
    main = get_version(session, common)
    main.json_schema_file_id = storage.store(b"{}")
    session.add(main)
    session.commit()
    en = make_language(session, main, "en", storage.store(b'{"a": "b"}'), primary=True)
    make_language(session, main, "de", storage.store(b'{"a": "c"}'))
    make_language(session, get_version(session, errors), "en")

    screenshot = Screenshot(
        project_id=project.id,
        name="Home",
        image_file_id=storage.store(b"png", "image/png"),
        image_size=3,
        image_mime_type="image/png",
        width=10,
        height=10,
    )
    session.add(screenshot)
    session.flush()
    container = ScreenshotContainer(
        screenshot_id=screenshot.id, x=0, y=0, width=10, height=10
    )
    session.add(container)
    session.flush()
    session.add(
        ScreenshotKeyMapping(
            container_id=container.id,
            namespace_version_id=main.id,
            language_id=en.id,
            translation_key="title",
        )
    )
    session.add(
        Release(
            project_id=project.id,
            name="Spring",
            tag="v1",
            namespace_versions=[manifest_entry(common.id, main.id)],
        )
    )
    session.add(
        APIKey(
            workspace_id=workspace.id,
            project_id=project.id,
            name="CI",
            key_hash="hash",
            key_prefix="ulg_live_abcdefgh",
        )
    )
    session.commit()
    return project


def count(session, model):
    return len(session.exec(select(model)).all())


# =============================================================================
# Project cascade
# =============================================================================


class TestDeleteProject:
    """Tests for deleting a whole project."""

    def test_removes_every_dependent_record(self, session, storage, workspace):
        identity_client = MagicMock()
        scheduler = MagicMock()
        deleter = CascadeDeleter(
            storage, scheduler=scheduler, identity_client=identity_client
        )
        project = populate(session, storage, workspace)
        project_id = project.id
        assert len(storage) == 4

        deleter.delete_project(session, workspace, project)

        for model in (
            Project,
            Namespace,
            NamespaceVersion,
            Language,
            Release,
            Screenshot,
            ScreenshotContainer,
            ScreenshotKeyMapping,
            APIKey,
        ):
            assert count(session, model) == 0, model.__name__
        assert len(storage) == 0
        session.refresh(workspace)
        assert workspace.usage_projects == 0
        scheduler.run_after.assert_called_once_with(
            0, identity_client.delete_identity, project_id, workspace.id
        )

    def test_identity_revocation_failure_is_logged(
        self, session, storage, workspace, monkeypatch
    ):
        """The project is gone even when the identity service call fails."""
        scheduler_logger = MagicMock()
        monkeypatch.setattr(scheduler_module, "logger", scheduler_logger)
        identity_client = MagicMock()
        identity_client.delete_identity.side_effect = RuntimeError("unkey down")
        scheduler = Scheduler(max_workers=1)
        deleter = CascadeDeleter(
            storage, scheduler=scheduler, identity_client=identity_client
        )
        project = populate(session, storage, workspace)
        project_id = project.id

        deleter.delete_project(session, workspace, project)
        scheduler.shutdown(wait=True)

        identity_client.delete_identity.assert_called_once_with(project_id, workspace.id)
        scheduler_logger.error.assert_called_once()
        assert scheduler_logger.error.call_args.args[0] == "scheduled_task_failed"
        assert scheduler_logger.error.call_args.kwargs["error"] == "unkey down"
        assert count(session, Project) == 0
        session.refresh(workspace)
        assert workspace.usage_projects == 0

    def test_other_projects_untouched(self, session, storage, deleter, workspace):
        keep = make_project(session, workspace, "Mobile")
        make_namespace(session, keep, "common")
        project = populate(session, storage, workspace)

        deleter.delete_project(session, workspace, project)

        assert session.get(Project, keep.id) is not None
        assert count(session, Namespace) == 1
        assert count(session, NamespaceVersion) == 1

    def test_blob_failure_does_not_abort(self, session, storage, deleter, workspace):
        project = populate(session, storage, workspace)
        failures = []
        real_delete = storage.delete

        def flaky_delete(blob_id):
            if not failures:
                failures.append(blob_id)
                raise RuntimeError("storage unavailable")
            real_delete(blob_id)

        storage.delete = flaky_delete

        deleter.delete_project(session, workspace, project)

        assert count(session, Project) == 0
        assert len(storage) == 1
        assert failures[0] in storage


# =============================================================================
# Narrower roots
# =============================================================================


class TestDeleteVersion:
    def test_counters_and_blobs(self, session, storage, deleter, workspace):
        project = make_project(session, workspace)
        namespace = make_namespace(session, project)
        version = NamespaceVersion(namespace_id=namespace.id, version="1.0.0")
        session.add(version)
        namespace.usage_versions += 1
        session.add(namespace)
        session.commit()
        make_language(session, version, "en", storage.store(b"{}"), primary=True)
        make_language(session, version, "de", storage.store(b"{}"))
        make_language(session, get_version(session, namespace), "en")

        session.refresh(namespace)
        deleter.delete_version(session, namespace, version)

        session.refresh(namespace)
        assert namespace.usage_versions == 1
        assert namespace.usage_languages == 1
        assert count(session, Language) == 1
        assert len(storage) == 0

    @pytest.mark.parametrize("usage", [0, 1])
    def test_counter_floors_at_zero(self, session, storage, deleter, workspace, usage):
        project = make_project(session, workspace)
        namespace = make_namespace(session, project)
        version = get_version(session, namespace)
        language = make_language(session, version, "en")
        version.usage_languages = usage
        session.add(version)
        session.commit()

        deleter.delete_language(session, namespace, version, language)

        session.refresh(version)
        assert version.usage_languages == 0
