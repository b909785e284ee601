"""Namespace, NamespaceVersion and Language models.

Namespace -> NamespaceVersion -> Language is the translation content tree.
Each level carries the usage counters its children are limited by.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from unlingo.db.models.base import UUIDModel, TimestampMixin


MAIN_VERSION = "main"


class Namespace(UUIDModel, TimestampMixin, table=True):
    """A named grouping of translatable content within a project."""

    __tablename__ = "namespaces"
    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_namespaces_project_name"),
    )

    project_id: UUID = Field(foreign_key="projects.id", index=True)
    name: str = Field(max_length=100)

    # Languages across every version of this namespace
    usage_languages: int = Field(default=0)
    usage_versions: int = Field(default=0)


class NamespaceVersion(UUIDModel, TimestampMixin, table=True):
    """A version ("main" or semantic) of a namespace holding one file per language."""

    __tablename__ = "namespace_versions"
    __table_args__ = (
        UniqueConstraint(
            "namespace_id", "version", name="uq_namespace_versions_namespace_version"
        ),
    )

    namespace_id: UUID = Field(foreign_key="namespaces.id", index=True)
    version: str = Field(max_length=100)
    description: Optional[str] = None

    # Served by the public translations endpoint when no version is requested
    is_active: bool = Field(default=False)

    usage_languages: int = Field(default=0)

    json_schema_file_id: Optional[str] = None
    json_schema_size: Optional[int] = None

    # No FK: the language row is deleted before the version it points back to
    primary_language_id: Optional[UUID] = Field(default=None)


class Language(UUIDModel, TimestampMixin, table=True):
    """A translation file for one language code within a namespace version."""

    __tablename__ = "languages"
    __table_args__ = (
        UniqueConstraint(
            "namespace_version_id",
            "language_code",
            name="uq_languages_version_code",
        ),
    )

    namespace_version_id: UUID = Field(foreign_key="namespace_versions.id", index=True)
    language_code: str = Field(max_length=5)

    file_id: Optional[str] = None
    file_size: Optional[int] = None

