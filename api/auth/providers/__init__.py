"""Authentication provider factory.

The provider is selected via the AUTH_PROVIDER environment variable:

    AUTH_PROVIDER=local  (default) - HS256 JWT signed with JWT_SECRET
    AUTH_PROVIDER=clerk  - Clerk session tokens verified against JWKS

Usage:
    from api.auth.providers import get_provider

    provider = get_provider()
    result = await provider.verify_token(token)
"""

import os
from functools import lru_cache

from api.auth.providers.base import AuthResult, BaseAuthProvider
from unlingo.config import AUTH_PROVIDER


@lru_cache(maxsize=1)
def get_provider() -> BaseAuthProvider:
    """Get the configured authentication provider (cached singleton).

    Use clear_provider_cache() to reset after changing AUTH_PROVIDER
    (mainly for testing).

    Raises:
        ValueError: If AUTH_PROVIDER is set to an unknown value
    """
    # Read env var at call time, not import time
    provider_name = os.getenv("AUTH_PROVIDER", AUTH_PROVIDER).lower()

    if provider_name == "local":
        from api.auth.providers.local import LocalAuthProvider

        return LocalAuthProvider()

    if provider_name == "clerk":
        from api.auth.providers.clerk import ClerkAuthProvider

        return ClerkAuthProvider()

    raise ValueError(
        f"Unknown AUTH_PROVIDER: {provider_name}. "
        f"Supported values: local, clerk"
    )


def clear_provider_cache() -> None:
    """Clear the cached provider instance."""
    get_provider.cache_clear()


__all__ = [
    "AuthResult",
    "BaseAuthProvider",
    "get_provider",
    "clear_provider_cache",
]
