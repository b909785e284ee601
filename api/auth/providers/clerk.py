"""Clerk authentication provider using JWKS verification.

Verifies RS256 session tokens issued by Clerk against the instance's
public JWKS. The active organization is read from the `org_id` claim
(v1 session tokens) or the `o.id` claim (v2 session tokens).
"""

import os
import time
from typing import Optional

import httpx
from jose import JWTError, jwt

from api.auth.providers.base import AuthResult, BaseAuthProvider


JWKS_CACHE_TTL = 3600  # 1 hour in seconds


def extract_org_id(claims: dict) -> Optional[str]:
    """Return the active organization ID from Clerk session claims."""
    org_id = claims.get("org_id")
    if org_id:
        return org_id
    org = claims.get("o")
    if isinstance(org, dict):
        return org.get("id")
    return None


class ClerkAuthProvider(BaseAuthProvider):
    """Clerk external authentication provider."""

    def __init__(self, jwks_url: Optional[str] = None) -> None:
        self.jwks_url = jwks_url or os.getenv("CLERK_JWKS_URL")
        if not self.jwks_url:
            raise RuntimeError(
                "CLERK_JWKS_URL environment variable is required when using Clerk auth. "
                "Set it to https://your-domain.clerk.accounts.dev/.well-known/jwks.json"
            )
        self._jwks: Optional[dict] = None
        self._jwks_fetched_at: float = 0

    @property
    def name(self) -> str:
        return "clerk"

    async def verify_token(self, token: str) -> AuthResult:
        """Verify a Clerk session token.

        Fetches JWKS (cached, refreshed once on unknown kid) and verifies
        the token signature.
        """
        try:
            kid = jwt.get_unverified_header(token).get("kid")
            if not kid:
                return AuthResult(
                    valid=False,
                    provider=self.name,
                    error="Token missing key ID (kid)",
                )

            key = self._find_key(await self._get_jwks(), kid)
            if not key:
                # Keys may have rotated
                key = self._find_key(await self._refresh_jwks(), kid)
            if not key:
                return AuthResult(
                    valid=False,
                    provider=self.name,
                    error=f"No matching key found for kid: {kid}",
                )

            payload = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                options={
                    "verify_aud": False,  # Clerk session tokens carry no aud
                    "verify_iss": False,  # Trust is anchored on the JWKS URL
                },
            )

            subject = payload.get("sub")
            if not subject:
                return AuthResult(
                    valid=False,
                    provider=self.name,
                    error="Token missing 'sub' claim",
                )

            return AuthResult(
                valid=True,
                subject=subject,
                org_id=extract_org_id(payload),
                provider=self.name,
                raw_claims=payload,
            )

        except JWTError as e:
            return AuthResult(
                valid=False,
                provider=self.name,
                error=f"JWT verification failed: {str(e)}",
            )
        except httpx.HTTPError as e:
            return AuthResult(
                valid=False,
                provider=self.name,
                error=f"Failed to fetch JWKS: {str(e)}",
            )

    async def _get_jwks(self) -> dict:
        if self._jwks and (time.time() - self._jwks_fetched_at) < JWKS_CACHE_TTL:
            return self._jwks
        return await self._refresh_jwks()

    async def _refresh_jwks(self) -> dict:
        async with httpx.AsyncClient() as client:
            response = await client.get(self.jwks_url, timeout=10.0)
            response.raise_for_status()
            self._jwks = response.json()
            self._jwks_fetched_at = time.time()
            return self._jwks

    @staticmethod
    def _find_key(jwks: dict, kid: str) -> Optional[dict]:
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key
        return None
