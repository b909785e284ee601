"""Release model: a tagged manifest pinning namespace versions."""

from typing import Any
from uuid import UUID

from sqlalchemy import JSON, UniqueConstraint
from sqlmodel import Column, Field

from unlingo.db.models.base import UUIDModel, TimestampMixin


class Release(UUIDModel, TimestampMixin, table=True):
    """Release table. Tags are unique within a project.

    namespace_versions is a frozen, ordered list of
    {"namespace_id": str, "version_id": str} pairs. It is a snapshot of
    identifiers, validated when written and never repaired afterwards.
    """

    __tablename__ = "releases"
    __table_args__ = (
        UniqueConstraint("project_id", "tag", name="uq_releases_project_tag"),
    )

    project_id: UUID = Field(foreign_key="projects.id", index=True)
    name: str = Field(max_length=100)
    tag: str = Field(max_length=50)

    # Using JSON instead of JSONB for SQLite compatibility in tests.
    namespace_versions: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    def pairs(self) -> list[tuple[UUID, UUID]]:
        """Manifest as (namespace_id, version_id) UUID pairs."""
        return [
            (UUID(item["namespace_id"]), UUID(item["version_id"]))
            for item in self.namespace_versions or []
        ]


def manifest_entry(namespace_id: UUID, version_id: UUID) -> dict[str, str]:
    return {"namespace_id": str(namespace_id), "version_id": str(version_id)}
