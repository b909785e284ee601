"""Service for workspace lifecycle operations.

Workspaces are created when an organization onboards (Clerk webhook),
re-limited when its subscription changes, and read by dashboard callers
whose organization is bound to them.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import AccessDeniedError, NotFoundError, ValidationError
from api.services.access import require_identity, resolve_workspace
from unlingo.config import FREE_PLAN_LIMITS, PREMIUM_PLAN_LIMITS
from unlingo.db.models import Workspace
from unlingo.logging import get_logger

logger = get_logger(__name__)


def apply_limits(workspace: Workspace, limits: dict[str, int]) -> None:
    workspace.limit_requests = limits["requests"]
    workspace.limit_projects = limits["projects"]
    workspace.limit_namespaces_per_project = limits["namespaces_per_project"]
    workspace.limit_languages_per_version = limits["languages_per_version"]
    workspace.limit_versions_per_namespace = limits["versions_per_namespace"]


class WorkspaceService:
    """Service for workspace management."""

    def create_organization_workspace(
        self,
        session: Session,
        clerk_org_id: str,
        contact_email: Optional[str] = None,
    ) -> Workspace:
        """Create the team workspace for an organization.

        Idempotent: returns the existing workspace when the organization
        already has one.

        Args:
            session: Database session
            clerk_org_id: External organization identifier
            contact_email: Optional billing/contact address

        Returns:
            The organization's workspace
        """
        if not clerk_org_id:
            raise ValidationError("Organization ID is required")

        existing = self.get_by_clerk_id(session, clerk_org_id)
        if existing:
            logger.info("workspace_exists", clerk_id=clerk_org_id)
            return existing

        workspace = Workspace(clerk_id=clerk_org_id, contact_email=contact_email, type="team")
        apply_limits(workspace, FREE_PLAN_LIMITS)
        session.add(workspace)
        try:
            session.commit()
        except IntegrityError:
            # Concurrent onboarding of the same organization
            session.rollback()
            existing = self.get_by_clerk_id(session, clerk_org_id)
            if existing is None:
                raise
            return existing
        session.refresh(workspace)

        logger.info("workspace_created", workspace_id=str(workspace.id), clerk_id=clerk_org_id)
        return workspace

    def get_by_clerk_id(self, session: Session, clerk_id: str) -> Optional[Workspace]:
        return session.exec(select(Workspace).where(Workspace.clerk_id == clerk_id)).first()

    def get_workspace(
        self, session: Session, identity: Optional[Identity], workspace_id: UUID
    ) -> Workspace:
        return resolve_workspace(session, identity, workspace_id)

    def get_workspace_for_identity(
        self, session: Session, identity: Optional[Identity], clerk_id: Optional[str] = None
    ) -> Optional[Workspace]:
        """Look up the workspace bound to the caller's organization.

        Args:
            clerk_id: Organization to look up; defaults to the caller's own.
                Asking for any other organization is denied.

        Returns:
            The workspace, or None if the organization has not onboarded
        """
        identity = require_identity(identity)
        clerk_id = clerk_id or identity.org_id
        if not clerk_id or clerk_id != identity.org_id:
            raise AccessDeniedError("Workspace not found or access denied")
        return self.get_by_clerk_id(session, clerk_id)

    def update_contact_email(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        contact_email: str,
    ) -> Workspace:
        workspace = resolve_workspace(session, identity, workspace_id)
        email = contact_email.strip()
        if "@" not in email or len(email) > 254:
            raise ValidationError("Invalid email address")
        workspace.contact_email = email
        session.add(workspace)
        session.commit()
        session.refresh(workspace)
        return workspace

    def update_workspace_limits(
        self,
        session: Session,
        workspace_id: UUID,
        is_premium: bool,
        request_limit: Optional[int] = None,
    ) -> Workspace:
        """Apply plan limits after a subscription change.

        Usage counters are left alone; a downgrade below current usage
        only blocks further creation.

        Args:
            workspace_id: Workspace whose subscription changed
            is_premium: Whether a paid subscription is active
            request_limit: Monthly request allowance of the purchased
                product, when known
        """
        workspace = session.get(Workspace, workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace not found")

        limits = dict(PREMIUM_PLAN_LIMITS if is_premium else FREE_PLAN_LIMITS)
        if is_premium and request_limit:
            limits["requests"] = request_limit
        apply_limits(workspace, limits)
        workspace.is_premium = is_premium

        session.add(workspace)
        session.commit()
        session.refresh(workspace)
        logger.info(
            "workspace_limits_updated",
            workspace_id=str(workspace.id),
            is_premium=is_premium,
            requests=workspace.limit_requests,
        )
        return workspace
