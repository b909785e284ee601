"""v1 API routes with workspace scoping.

Dashboard routes follow the pattern:
/api/v1/w/{workspace_id}/...

The workspace in the URL is checked against the caller's organization by
the service layer on every request.

Public routes (API key authenticated) use:
/api/v1/translations/...
"""

from api.routes.v1.workspaces import router as workspaces_router
from api.routes.v1.projects import router as projects_router
from api.routes.v1.namespaces import router as namespaces_router
from api.routes.v1.languages import router as languages_router
from api.routes.v1.releases import router as releases_router
from api.routes.v1.screenshots import router as screenshots_router
from api.routes.v1.api_keys import router as api_keys_router
from api.routes.v1.translations import router as translations_router
from api.routes.v1.webhooks import router as webhooks_router

__all__ = [
    "workspaces_router",
    "projects_router",
    "namespaces_router",
    "languages_router",
    "releases_router",
    "screenshots_router",
    "api_keys_router",
    "translations_router",
    "webhooks_router",
]
