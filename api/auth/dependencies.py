"""FastAPI dependencies for authentication.

Dashboard routes resolve the caller to an Identity (or None when no token
is sent). Services decide what an absent identity means; an invalid token
is rejected here with 401.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.auth.identity import Identity
from api.auth.providers import get_provider
from api.exceptions import AuthenticationError
from unlingo.logging import bind_context


# auto_error=False so a missing header reaches the service as None
security = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Identity]:
    """Verify the bearer token, if any, and return the caller identity.

    Raises:
        AuthenticationError: Token present but invalid
    """
    if not credentials:
        return None

    result = await get_provider().verify_token(credentials.credentials)
    identity = result.to_identity()
    if identity is None:
        raise AuthenticationError(result.error or "Invalid or expired token")

    bind_context(org_id=identity.org_id)
    return identity
