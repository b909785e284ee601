"""API services module."""

from api.services.analytics_service import AnalyticsClient
from api.services.api_key_service import APIKeyService
from api.services.deletion_service import CascadeDeleter
from api.services.identity_service import IdentityClient
from api.services.language_service import LanguageService
from api.services.namespace_service import NamespaceService
from api.services.namespace_version_service import NamespaceVersionService
from api.services.project_service import ProjectService
from api.services.release_service import ReleaseService
from api.services.screenshot_service import ScreenshotService
from api.services.translations_service import TranslationsService
from api.services.usage_service import UsageService
from api.services.webhook_service import ClerkWebhookService
from api.services.workspace_service import WorkspaceService

__all__ = [
    "AnalyticsClient",
    "APIKeyService",
    "CascadeDeleter",
    "IdentityClient",
    "LanguageService",
    "NamespaceService",
    "NamespaceVersionService",
    "ProjectService",
    "ReleaseService",
    "ScreenshotService",
    "TranslationsService",
    "UsageService",
    "ClerkWebhookService",
    "WorkspaceService",
]
