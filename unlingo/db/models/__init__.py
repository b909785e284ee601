"""SQLModel database models for Unlingo.

Tenant:
- Workspace: tenant root bound to one external organization

Translation content:
- Project, Namespace, NamespaceVersion, Language

Releases:
- Release: tagged manifest of (namespace, version) pairs

Screenshots:
- Screenshot, ScreenshotContainer, ScreenshotKeyMapping

Access:
- APIKey: project-scoped key for the public translations endpoint
"""

from unlingo.db.models.base import UUIDModel, TimestampMixin, utcnow
from unlingo.db.models.workspace import Workspace, WorkspaceBase, WorkspaceRead
from unlingo.db.models.project import Project, ProjectBase
from unlingo.db.models.namespace import (
    MAIN_VERSION,
    Namespace,
    NamespaceVersion,
    Language,
)
from unlingo.db.models.release import Release, manifest_entry
from unlingo.db.models.screenshot import (
    Screenshot,
    ScreenshotContainer,
    ScreenshotKeyMapping,
)
from unlingo.db.models.api_key import APIKey, APIKeyStatus

__all__ = [
    "UUIDModel",
    "TimestampMixin",
    "utcnow",
    "Workspace",
    "WorkspaceBase",
    "WorkspaceRead",
    "Project",
    "ProjectBase",
    "MAIN_VERSION",
    "Namespace",
    "NamespaceVersion",
    "Language",
    "Release",
    "manifest_entry",
    "Screenshot",
    "ScreenshotContainer",
    "ScreenshotKeyMapping",
    "APIKey",
    "APIKeyStatus",
]
