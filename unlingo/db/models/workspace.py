"""Workspace model: the tenant root.

Each workspace is bound to exactly one external organization identity
(clerk_id) and carries the plan limits and workspace-level usage counters.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from unlingo.db.custom_types import UTCDateTime
from unlingo.db.models.base import UUIDModel, TimestampMixin


class WorkspaceBase(SQLModel):
    """Base workspace fields shared across Create/Read."""

    clerk_id: str = Field(unique=True, index=True)
    contact_email: Optional[str] = None
    type: str = Field(default="team")


class Workspace(UUIDModel, WorkspaceBase, TimestampMixin, table=True):
    """Workspace table - the boundary of data isolation."""

    __tablename__ = "workspaces"

    is_premium: bool = Field(default=False)

    # Plan limits
    limit_requests: int = Field(default=0)
    limit_projects: int = Field(default=0)
    limit_namespaces_per_project: int = Field(default=0)
    limit_languages_per_version: int = Field(default=0)
    limit_versions_per_namespace: int = Field(default=0)

    # Usage counters
    usage_projects: int = Field(default=0)
    usage_requests: int = Field(default=0)
    # First day of the month usage_requests counts toward
    usage_period_start: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    @property
    def limits(self) -> dict[str, int]:
        return {
            "requests": self.limit_requests,
            "projects": self.limit_projects,
            "namespaces_per_project": self.limit_namespaces_per_project,
            "languages_per_version": self.limit_languages_per_version,
            "versions_per_namespace": self.limit_versions_per_namespace,
        }

    @property
    def current_usage(self) -> dict[str, int]:
        return {
            "projects": self.usage_projects,
            "requests": self.usage_requests,
        }


class WorkspaceRead(WorkspaceBase):
    """Schema for reading workspace data."""

    id: UUID
    is_premium: bool
    limits: dict[str, int]
    current_usage: dict[str, int]
    created_at: datetime
