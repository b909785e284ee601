"""HS256 JWT utilities for the local auth provider."""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 30


def _get_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is required for local auth. "
            "Set it to a secure random string (e.g., openssl rand -hex 32)"
        )
    return secret


def create_access_token(
    subject: str,
    org_id: Optional[str] = None,
    expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
) -> str:
    """Create a signed access token for `subject` acting in `org_id`."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": subject,
        "exp": now + timedelta(minutes=expires_minutes),
        "iat": now,
        "jti": str(uuid4()),
    }
    if org_id:
        claims["org_id"] = org_id
    return jwt.encode(claims, _get_secret(), algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Verify and decode a token.

    Returns:
        Decoded payload dict if valid, None if invalid/expired
    """
    try:
        return jwt.decode(token, _get_secret(), algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
