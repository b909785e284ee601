"""Local authentication provider using JWT with a shared secret.

For local development and self-hosted deployments. Tokens carry the
organization in an `org_id` claim.
"""

from api.auth.jwt import verify_token as jwt_verify_token
from api.auth.providers.base import AuthResult, BaseAuthProvider


class LocalAuthProvider(BaseAuthProvider):
    """HS256 JWT provider (JWT_SECRET)."""

    @property
    def name(self) -> str:
        return "local"

    async def verify_token(self, token: str) -> AuthResult:
        payload = jwt_verify_token(token)

        if not payload:
            return AuthResult(
                valid=False,
                provider=self.name,
                error="Invalid or expired token",
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
            org_id=payload.get("org_id"),
            provider=self.name,
            raw_claims=payload,
        )
