"""FastAPI backend for Unlingo."""

from fastapi import FastAPI

from api.error_handlers import register_error_handlers
from api.middleware import PublicPathCORSMiddleware, RequestContextMiddleware
from api.routes import health
from api.routes.v1 import (
    workspaces_router,
    projects_router,
    namespaces_router,
    languages_router,
    releases_router,
    screenshots_router,
    api_keys_router,
    translations_router,
    webhooks_router,
)
from unlingo.config import CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL
from unlingo.logging import configure_structlog

# Configure logging
configure_structlog(json_format=LOG_FORMAT == "json", log_level=LOG_LEVEL)


app = FastAPI(
    title="Unlingo API",
    description="Translation management: projects, namespaces, versions and releases",
    version="1.0.0",
)

# Middleware is added in reverse order of execution
# Order of execution: CORS -> RequestContext -> Route
app.add_middleware(RequestContextMiddleware)

# CORS (outermost - handles preflight requests). The public translations
# API is open to any origin; everything else only to the dashboard.
app.add_middleware(
    PublicPathCORSMiddleware,
    public_prefixes=["/api/v1/translations"],
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global error handlers
register_error_handlers(app)

# v1 routes with workspace scoping
app.include_router(workspaces_router, prefix="/api")
app.include_router(projects_router, prefix="/api")
app.include_router(namespaces_router, prefix="/api")
app.include_router(languages_router, prefix="/api")
app.include_router(releases_router, prefix="/api")
app.include_router(screenshots_router, prefix="/api")
app.include_router(api_keys_router, prefix="/api")

# Public routes
app.include_router(translations_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")

# Health check routes (no auth required)
app.include_router(health.router, prefix="/api")
