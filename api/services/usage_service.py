"""Usage accounting and plan limit enforcement.

Each scope carries denormalized counters of its live children:

    Workspace.usage_projects          projects in the workspace
    Project.usage_namespaces          namespaces in the project
    Namespace.usage_versions          versions in the namespace
    Namespace.usage_languages         languages across the namespace's versions
    NamespaceVersion.usage_languages  languages in the version

Counters change in the same transaction as the insert or delete that
triggers them, with the holding row locked (see access.lock). Decrements
floor at zero. reconcile_workspace() re-derives every counter from live
rows to recover from drift.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import LimitReachedError, NotFoundError
from api.services.access import lock, resolve_workspace
from unlingo.config import REQUEST_HARD_LIMIT_FACTOR
from unlingo.db.models import (
    Language,
    Namespace,
    NamespaceVersion,
    Project,
    Workspace,
    utcnow,
)
from unlingo.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Counter primitives
# =============================================================================


def check_limit(
    current: int, limit: int, resource_type: str, message: Optional[str] = None
) -> None:
    """Reject creation when `current` is at or above `limit`.

    Raises:
        LimitReachedError: current >= limit
    """
    if current >= limit:
        raise LimitReachedError(
            message, resource_type=resource_type, limit=limit, current=current
        )


def increment(row: Any, attr: str, amount: int = 1) -> None:
    setattr(row, attr, getattr(row, attr) + amount)


def decrement(row: Any, attr: str, amount: int = 1) -> None:
    """Decrement a counter, never below zero."""
    setattr(row, attr, max(0, getattr(row, attr) - amount))


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class UsageService:
    """Reads, records and reconciles usage counters."""

    def get_usage(
        self, session: Session, identity: Optional[Identity], workspace_id: UUID
    ) -> dict[str, Any]:
        """Usage summary for the workspace dashboard.

        Returns:
            Dict with limits, current usage and per-resource headroom
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        usage = workspace.current_usage
        limits = workspace.limits
        return {
            "workspace_id": workspace.id,
            "is_premium": workspace.is_premium,
            "limits": limits,
            "current_usage": usage,
            "can_create_project": usage["projects"] < limits["projects"],
            "requests_remaining": max(0, limits["requests"] - usage["requests"]),
        }

    def record_request(self, session: Session, workspace: Workspace) -> None:
        """Count one public API request against the monthly request limit.

        The counter resets at the start of each calendar month. Requests
        are refused once usage exceeds the limit by REQUEST_HARD_LIMIT_FACTOR.

        Raises:
            LimitReachedError: Hard request limit exceeded
        """
        lock(session, workspace)
        period = month_start(utcnow())
        if workspace.usage_period_start is None or workspace.usage_period_start < period:
            workspace.usage_period_start = period
            workspace.usage_requests = 0

        hard_limit = int(workspace.limit_requests * REQUEST_HARD_LIMIT_FACTOR)
        check_limit(
            workspace.usage_requests,
            hard_limit,
            "requests",
            "Request limit exceeded for this billing period",
        )
        increment(workspace, "usage_requests")
        session.add(workspace)

    # =========================================================================
    # Reconciliation
    # =========================================================================

    def reconcile_workspace(self, session: Session, workspace_id: UUID) -> dict[str, int]:
        """Re-derive every counter under the workspace from live rows.

        Returns:
            Dict with the number of counters that were corrected
        """
        workspace = session.get(Workspace, workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace not found")
        lock(session, workspace)

        corrected = 0

        def fix(row: Any, attr: str, actual: int) -> None:
            nonlocal corrected
            if getattr(row, attr) != actual:
                logger.warning(
                    "usage_counter_drift",
                    table=row.__tablename__,
                    row_id=str(row.id),
                    counter=attr,
                    stored=getattr(row, attr),
                    actual=actual,
                )
                setattr(row, attr, actual)
                session.add(row)
                corrected += 1

        projects = session.exec(
            select(Project).where(Project.workspace_id == workspace.id)
        ).all()
        fix(workspace, "usage_projects", len(projects))

        for project in projects:
            namespaces = session.exec(
                select(Namespace).where(Namespace.project_id == project.id)
            ).all()
            fix(project, "usage_namespaces", len(namespaces))

            for namespace in namespaces:
                versions = session.exec(
                    select(NamespaceVersion).where(
                        NamespaceVersion.namespace_id == namespace.id
                    )
                ).all()
                fix(namespace, "usage_versions", len(versions))

                namespace_languages = 0
                for version in versions:
                    count = session.exec(
                        select(func.count())
                        .select_from(Language)
                        .where(Language.namespace_version_id == version.id)
                    ).one()
                    fix(version, "usage_languages", count)
                    namespace_languages += count
                fix(namespace, "usage_languages", namespace_languages)

        session.commit()
        logger.info(
            "usage_reconciled", workspace_id=str(workspace.id), corrected=corrected
        )
        return {"corrected": corrected}
