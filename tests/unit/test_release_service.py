"""Tests for ReleaseService."""

from uuid import uuid4

import pytest

from api.exceptions import DuplicateError, InvalidReferenceError, ValidationError
from api.services.namespace_service import NamespaceService
from api.services.release_service import ReleaseService
from unlingo.db.models import NamespaceVersion, Release

from tests.db_utils import get_version, make_namespace, make_project


@pytest.fixture
def service():
    return ReleaseService()


@pytest.fixture
def project(session, workspace):
    return make_project(session, workspace)


class TestCreateRelease:
    """Tests for release creation and manifest validation."""

    def test_create_with_pairs(self, session, service, workspace, identity, project):
        common = make_namespace(session, project, "common")
        errors = make_namespace(session, project, "errors")
        pairs = [
            (common.id, get_version(session, common).id),
            (errors.id, get_version(session, errors).id),
        ]

        release = service.create_release(
            session, identity, workspace.id, project.id, "Spring", "v1", pairs
        )

        assert release.pairs() == pairs
        assert release.namespace_versions[0] == {
            "namespace_id": str(common.id),
            "version_id": str(pairs[0][1]),
        }

    def test_empty_manifest_allowed(self, session, service, workspace, identity, project):
        release = service.create_release(
            session, identity, workspace.id, project.id, "Empty", "v0", []
        )
        assert release.namespace_versions == []

    def test_namespace_from_other_project(
        self, session, service, workspace, identity, project
    ):
        foreign = make_namespace(session, make_project(session, workspace, "Mobile"))
        with pytest.raises(InvalidReferenceError) as exc_info:
            service.create_release(
                session,
                identity,
                workspace.id,
                project.id,
                "Spring",
                "v1",
                [(foreign.id, get_version(session, foreign).id)],
            )
        assert exc_info.value.message == "Invalid namespace selected"

    def test_version_from_other_namespace(
        self, session, service, workspace, identity, project
    ):
        common = make_namespace(session, project, "common")
        errors = make_namespace(session, project, "errors")
        with pytest.raises(InvalidReferenceError) as exc_info:
            service.create_release(
                session,
                identity,
                workspace.id,
                project.id,
                "Spring",
                "v1",
                [(common.id, get_version(session, errors).id)],
            )
        assert exc_info.value.message == "Invalid namespace version selected"

    def test_unknown_version(self, session, service, workspace, identity, project):
        common = make_namespace(session, project, "common")
        with pytest.raises(InvalidReferenceError):
            service.create_release(
                session, identity, workspace.id, project.id, "R", "v1", [(common.id, uuid4())]
            )

    def test_duplicate_tag(self, session, service, workspace, identity, project):
        service.create_release(session, identity, workspace.id, project.id, "A", "v1", [])
        with pytest.raises(DuplicateError):
            service.create_release(
                session, identity, workspace.id, project.id, "B", "v1", []
            )

    def test_same_tag_in_other_project(self, session, service, workspace, identity, project):
        other = make_project(session, workspace, "Mobile")
        service.create_release(session, identity, workspace.id, project.id, "A", "v1", [])
        release = service.create_release(
            session, identity, workspace.id, other.id, "A", "v1", []
        )
        assert release.project_id == other.id

    def test_blank_tag(self, session, service, workspace, identity, project):
        with pytest.raises(ValidationError):
            service.create_release(
                session, identity, workspace.id, project.id, "A", "   ", []
            )


class TestUpdateRelease:
    def test_retag_to_taken_tag(self, session, service, workspace, identity, project):
        service.create_release(session, identity, workspace.id, project.id, "A", "v1", [])
        second = service.create_release(
            session, identity, workspace.id, project.id, "B", "v2", []
        )

        with pytest.raises(DuplicateError):
            service.update_release(session, identity, workspace.id, second.id, tag="v1")

    def test_replace_manifest(self, session, service, workspace, identity, project):
        common = make_namespace(session, project, "common")
        release = service.create_release(
            session, identity, workspace.id, project.id, "A", "v1", []
        )

        updated = service.update_release(
            session,
            identity,
            workspace.id,
            release.id,
            name="Renamed",
            namespace_versions=[(common.id, get_version(session, common).id)],
        )

        assert updated.name == "Renamed"
        assert updated.tag == "v1"
        assert len(updated.pairs()) == 1


class TestResolveRelease:
    """Tests for resolving manifests against live records."""

    def test_deleted_version_resolves_to_none(
        self, session, service, deleter, workspace, identity, project
    ):
        common = make_namespace(session, project, "common")
        main = get_version(session, common)
        extra = NamespaceVersion(namespace_id=common.id, version="1.0.0")
        session.add(extra)
        session.commit()
        release = service.create_release(
            session,
            identity,
            workspace.id,
            project.id,
            "A",
            "v1",
            [(common.id, main.id), (common.id, extra.id)],
        )

        deleter.delete_version(session, common, extra)
        resolved = service.resolve_release(session, identity, workspace.id, release.id)

        assert [pair.resolved for pair in resolved.pairs] == [True, False]
        assert resolved.pairs[1].namespace.id == common.id
        assert resolved.pairs[1].version is None
        assert len(session.get(Release, release.id).pairs()) == 2

    def test_namespace_deletion_strips_manifest(
        self, session, service, deleter, workspace, identity, project
    ):
        common = make_namespace(session, project, "common")
        errors = make_namespace(session, project, "errors")
        release = service.create_release(
            session,
            identity,
            workspace.id,
            project.id,
            "A",
            "v1",
            [
                (common.id, get_version(session, common).id),
                (errors.id, get_version(session, errors).id),
            ],
        )

        NamespaceService(deleter).delete_namespace(
            session, identity, workspace.id, errors.id
        )

        session.refresh(release)
        assert [pair[0] for pair in release.pairs()] == [common.id]

    def test_missing_release(self, session, service, workspace, identity):
        assert service.resolve_release(session, identity, workspace.id, uuid4()) is None
