"""Base authentication provider abstraction.

Providers verify tokens and extract the caller's user and organization.
Authorization (which workspace the organization may touch) is enforced
by the services on every call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from api.auth.identity import Identity


@dataclass
class AuthResult:
    """Result of authentication token verification.

    Attributes:
        valid: Whether the token was successfully verified
        subject: External user ID (e.g., Clerk user_xxx)
        org_id: Active organization ID from the token, if any
        provider: Name of the auth provider (e.g., "local", "clerk")
        error: Error message if validation failed
        raw_claims: Full JWT claims for debugging/auditing
    """

    valid: bool
    subject: Optional[str] = None
    org_id: Optional[str] = None
    provider: str = "unknown"
    error: Optional[str] = None
    raw_claims: Optional[dict] = field(default=None)

    def to_identity(self) -> Optional[Identity]:
        if not self.valid or not self.subject:
            return None
        return Identity(subject=self.subject, org_id=self.org_id)


class BaseAuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this provider (e.g., 'local', 'clerk')."""
        ...

    @abstractmethod
    async def verify_token(self, token: str) -> AuthResult:
        """Verify an authentication token.

        Args:
            token: The bearer token (typically JWT)

        Returns:
            AuthResult with validation status and identity if valid
        """
        ...
