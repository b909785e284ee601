"""Tests for usage counters, limits and reconciliation."""

from datetime import datetime, timezone

import pytest

from api.exceptions import LimitReachedError
from api.services import usage_service
from api.services.usage_service import (
    UsageService,
    check_limit,
    decrement,
    month_start,
)
from unlingo.db.models import Namespace, NamespaceVersion, utcnow

from tests.db_utils import (
    get_version,
    make_language,
    make_namespace,
    make_project,
    make_workspace,
)


@pytest.fixture
def service():
    return UsageService()


# =============================================================================
# Primitives
# =============================================================================


class TestCheckLimit:
    def test_below_limit_passes(self):
        check_limit(2, 3, "projects")

    def test_at_limit_raises_with_details(self):
        with pytest.raises(LimitReachedError) as exc_info:
            check_limit(3, 3, "projects", "Project limit reached")

        error = exc_info.value
        assert error.status_code == 403
        assert error.message == "Project limit reached"
        assert error.details == {"resource_type": "projects", "limit": 3, "current": 3}

    def test_zero_limit_blocks(self):
        with pytest.raises(LimitReachedError):
            check_limit(0, 0, "languages")


def test_decrement_floors_at_zero():
    class Row:
        usage = 1

    row = Row()
    decrement(row, "usage", 5)
    assert row.usage == 0


def test_month_start():
    assert month_start(datetime(2026, 3, 17, 12, 30, 5, 10)) == datetime(2026, 3, 1)


# =============================================================================
# Request metering
# =============================================================================


class TestRecordRequest:
    """Tests for monthly request accounting."""

    def test_counts_requests(self, session, service, workspace):
        service.record_request(session, workspace)
        service.record_request(session, workspace)
        session.commit()

        session.refresh(workspace)
        assert workspace.usage_requests == 2
        assert workspace.usage_period_start == month_start(workspace.usage_period_start)

    def test_resets_in_new_month(self, session, service, workspace, monkeypatch):
        workspace.usage_requests = 500
        workspace.usage_period_start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        session.add(workspace)
        session.commit()
        monkeypatch.setattr(
            usage_service, "utcnow", lambda: datetime(2026, 2, 3, 9, 0, tzinfo=timezone.utc)
        )

        service.record_request(session, workspace)
        session.commit()

        session.refresh(workspace)
        assert workspace.usage_requests == 1
        assert workspace.usage_period_start == datetime(2026, 2, 1, tzinfo=timezone.utc)

    def test_soft_overage_allowed(self, session, service):
        workspace = make_workspace(session, "org_a", requests=10)
        workspace.usage_requests = 12
        workspace.usage_period_start = month_start(utcnow())
        session.add(workspace)
        session.commit()

        service.record_request(session, workspace)
        assert workspace.usage_requests == 13

    def test_hard_limit(self, session, service):
        workspace = make_workspace(session, "org_a", requests=10)
        workspace.usage_requests = 13
        workspace.usage_period_start = month_start(utcnow())
        session.add(workspace)
        session.commit()

        with pytest.raises(LimitReachedError) as exc_info:
            service.record_request(session, workspace)
        assert exc_info.value.details["resource_type"] == "requests"


# =============================================================================
# Reconciliation
# =============================================================================


class TestReconcile:
    """Tests for re-deriving counters from live rows."""

    def test_repairs_drift(self, session, service, workspace):
        project = make_project(session, workspace)
        namespace = make_namespace(session, project)
        version = get_version(session, namespace)
        make_language(session, version, "en")
        make_language(session, version, "de")

        workspace.usage_projects = 7
        project.usage_namespaces = 0
        namespace.usage_versions = 4
        namespace.usage_languages = 1
        version.usage_languages = 9
        for row in (workspace, project, namespace, version):
            session.add(row)
        session.commit()

        result = service.reconcile_workspace(session, workspace.id)

        assert result == {"corrected": 5}
        session.refresh(workspace)
        session.refresh(project)
        assert workspace.usage_projects == 1
        assert project.usage_namespaces == 1
        namespace = session.get(Namespace, namespace.id)
        assert (namespace.usage_versions, namespace.usage_languages) == (1, 2)
        assert session.get(NamespaceVersion, version.id).usage_languages == 2

    def test_consistent_counters_untouched(self, session, service, workspace):
        project = make_project(session, workspace)
        namespace = make_namespace(session, project)
        make_language(session, get_version(session, namespace), "en")

        assert service.reconcile_workspace(session, workspace.id) == {"corrected": 0}

    def test_usage_summary(self, session, service, workspace, identity):
        make_project(session, workspace)

        summary = service.get_usage(session, identity, workspace.id)

        assert summary["current_usage"]["projects"] == 1
        assert summary["limits"]["projects"] == 1
        assert summary["can_create_project"] is False
