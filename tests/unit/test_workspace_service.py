"""Tests for WorkspaceService."""

import pytest

from api.auth.identity import Identity
from api.exceptions import AccessDeniedError, AuthenticationError, ValidationError
from api.services.workspace_service import WorkspaceService
from unlingo.config import FREE_PLAN_LIMITS, PREMIUM_PLAN_LIMITS


@pytest.fixture
def service():
    return WorkspaceService()


class TestWorkspaceLookup:
    def test_own_workspace(self, session, service, workspace, identity):
        assert service.get_workspace_for_identity(session, identity).id == workspace.id

    def test_not_onboarded(self, session, service):
        identity = Identity(subject="user_c", org_id="org_c")
        assert service.get_workspace_for_identity(session, identity) is None

    def test_other_organization_denied(self, session, service, workspace, other_identity):
        with pytest.raises(AccessDeniedError):
            service.get_workspace_for_identity(session, other_identity, "org_a")

    def test_requires_identity(self, session, service, workspace):
        with pytest.raises(AuthenticationError):
            service.get_workspace_for_identity(session, None)

    def test_personal_identity_reaches_nothing(self, session, service, workspace):
        with pytest.raises(AccessDeniedError):
            service.get_workspace_for_identity(session, Identity(subject="user_a"))


class TestWorkspaceUpdates:
    """Tests for contact email and plan limit updates."""

    def test_contact_email(self, session, service, workspace, identity):
        updated = service.update_contact_email(
            session, identity, workspace.id, " billing@example.com "
        )
        assert updated.contact_email == "billing@example.com"

    def test_invalid_email(self, session, service, workspace, identity):
        with pytest.raises(ValidationError):
            service.update_contact_email(session, identity, workspace.id, "nope")

    def test_upgrade_and_downgrade(self, session, service, workspace):
        workspace.usage_projects = 5
        session.add(workspace)
        session.commit()

        upgraded = service.update_workspace_limits(
            session, workspace.id, is_premium=True, request_limit=1_000_000
        )
        assert upgraded.is_premium is True
        assert upgraded.limit_projects == PREMIUM_PLAN_LIMITS["projects"]
        assert upgraded.limit_requests == 1_000_000

        downgraded = service.update_workspace_limits(session, workspace.id, is_premium=False)
        assert downgraded.limit_projects == FREE_PLAN_LIMITS["projects"]
        assert downgraded.limit_requests == FREE_PLAN_LIMITS["requests"]
        # Usage is never rewritten by a plan change
        assert downgraded.usage_projects == 5


class TestCreateOrganizationWorkspace:
    def test_defaults_to_free_limits(self, session, service):
        ws = service.create_organization_workspace(session, "org_new", "team@example.com")
        assert ws.clerk_id == "org_new"
        assert ws.contact_email == "team@example.com"
        assert ws.limit_projects == FREE_PLAN_LIMITS["projects"]
        assert ws.usage_projects == 0

    def test_idempotent_per_organization(self, session, service):
        first = service.create_organization_workspace(session, "org_new")
        second = service.create_organization_workspace(session, "org_new")
        assert first.id == second.id
        assert service.get_by_clerk_id(session, "org_new").id == first.id

    def test_requires_organization(self, session, service):
        with pytest.raises(ValidationError):
            service.create_organization_workspace(session, "")
