"""Project model.

A project belongs to one workspace and owns namespaces, releases,
screenshots and API keys.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from unlingo.db.models.base import UUIDModel, TimestampMixin


class ProjectBase(SQLModel):
    name: str = Field(max_length=100)
    description: Optional[str] = None


class Project(UUIDModel, ProjectBase, TimestampMixin, table=True):
    """Project table. Names are unique within a workspace."""

    __tablename__ = "projects"
    __table_args__ = (
        UniqueConstraint("workspace_id", "name", name="uq_projects_workspace_name"),
    )

    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)

    usage_namespaces: int = Field(default=0)
