"""Shared dependencies for v1 routes.

Dashboard routes follow the pattern /api/v1/w/{workspace_id}/... and pass
the workspace ID and caller identity straight to the service layer, which
re-verifies the ownership chain on every call.

Storage, scheduler and external clients are provided through dependency
functions so tests can override them on the app.
"""

from typing import Annotated, Optional

from fastapi import Depends, Query
from sqlmodel import Session

from api.auth.dependencies import get_identity
from api.auth.identity import Identity
from api.services import (
    AnalyticsClient,
    APIKeyService,
    CascadeDeleter,
    ClerkWebhookService,
    IdentityClient,
    LanguageService,
    NamespaceService,
    NamespaceVersionService,
    ProjectService,
    ReleaseService,
    ScreenshotService,
    TranslationsService,
    UsageService,
    WorkspaceService,
)
from unlingo.db.engine import get_session_dependency
from unlingo.db.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PaginationOpts
from unlingo.scheduler import Scheduler, get_scheduler
from unlingo.storage import BlobStorage, get_storage


SessionDep = Annotated[Session, Depends(get_session_dependency)]
IdentityDep = Annotated[Optional[Identity], Depends(get_identity)]


def get_pagination(
    num_items: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(default=None),
) -> PaginationOpts:
    return PaginationOpts(num_items=num_items, cursor=cursor)


PaginationDep = Annotated[PaginationOpts, Depends(get_pagination)]


# =============================================================================
# Infrastructure
# =============================================================================


def get_blob_storage() -> BlobStorage:
    return get_storage()


def get_task_scheduler() -> Scheduler:
    return get_scheduler()


def get_identity_client() -> IdentityClient:
    return IdentityClient()


def get_analytics_client() -> AnalyticsClient:
    return AnalyticsClient()


StorageDep = Annotated[BlobStorage, Depends(get_blob_storage)]
SchedulerDep = Annotated[Scheduler, Depends(get_task_scheduler)]
IdentityClientDep = Annotated[IdentityClient, Depends(get_identity_client)]
AnalyticsDep = Annotated[AnalyticsClient, Depends(get_analytics_client)]


def get_deleter(
    storage: StorageDep, scheduler: SchedulerDep, identity_client: IdentityClientDep
) -> CascadeDeleter:
    return CascadeDeleter(storage, scheduler=scheduler, identity_client=identity_client)


DeleterDep = Annotated[CascadeDeleter, Depends(get_deleter)]


# =============================================================================
# Services
# =============================================================================


def get_workspace_service() -> WorkspaceService:
    return WorkspaceService()


def get_usage_service() -> UsageService:
    return UsageService()


def get_webhook_service(
    workspaces: Annotated[WorkspaceService, Depends(get_workspace_service)],
) -> ClerkWebhookService:
    return ClerkWebhookService(workspaces)


def get_project_service(
    deleter: DeleterDep, scheduler: SchedulerDep, identity_client: IdentityClientDep
) -> ProjectService:
    return ProjectService(deleter, scheduler=scheduler, identity_client=identity_client)


def get_namespace_service(deleter: DeleterDep) -> NamespaceService:
    return NamespaceService(deleter)


def get_version_service(storage: StorageDep, deleter: DeleterDep) -> NamespaceVersionService:
    return NamespaceVersionService(storage, deleter)


def get_language_service(
    storage: StorageDep,
    deleter: DeleterDep,
    scheduler: SchedulerDep,
    analytics: AnalyticsDep,
) -> LanguageService:
    return LanguageService(storage, deleter, scheduler=scheduler, analytics=analytics)


def get_release_service() -> ReleaseService:
    return ReleaseService()


def get_screenshot_service(storage: StorageDep, deleter: DeleterDep) -> ScreenshotService:
    return ScreenshotService(storage, deleter)


def get_api_key_service() -> APIKeyService:
    return APIKeyService()


def get_translations_service(
    storage: StorageDep,
    scheduler: SchedulerDep,
    analytics: AnalyticsDep,
    languages: Annotated[LanguageService, Depends(get_language_service)],
    versions: Annotated[NamespaceVersionService, Depends(get_version_service)],
) -> TranslationsService:
    return TranslationsService(
        storage,
        api_keys=APIKeyService(),
        usage=UsageService(),
        languages=languages,
        versions=versions,
        scheduler=scheduler,
        analytics=analytics,
    )
