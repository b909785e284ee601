"""Authentication module for the API."""

from api.auth.identity import Identity
from api.auth.jwt import create_access_token, verify_token
from api.auth.dependencies import get_identity

__all__ = [
    "Identity",
    "create_access_token",
    "verify_token",
    "get_identity",
]
