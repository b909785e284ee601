"""Middleware module for the API."""

from api.middleware.cors import PublicPathCORSMiddleware
from api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "PublicPathCORSMiddleware",
    "RequestContextMiddleware",
]
