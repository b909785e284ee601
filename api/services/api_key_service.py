"""API key service for the public translations endpoint.

Provides:
- Project-scoped key creation with secure hashing
- Key authentication
- Key deletion

Only the SHA-256 hash of a key is stored. The plaintext key is returned
once, at creation.
"""

import hashlib
import secrets
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import AuthenticationError, ValidationError
from api.services.access import (
    expect,
    resolve_workspace,
    walk_api_key,
    walk_project,
)
from unlingo.db.models import APIKey, APIKeyStatus
from unlingo.db.models.base import utcnow
from unlingo.db.pagination import PageResult, PaginationOpts, paginate
from unlingo.logging import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "ulg_live_"
# Characters of the plaintext key kept for display
DISPLAY_PREFIX_LENGTH = len(KEY_PREFIX) + 8
MAX_NAME_LENGTH = 100


def generate_key() -> tuple[str, str, str]:
    """Generate a new key.

    Returns:
        tuple: (plaintext key, display prefix, hash)
    """
    key = KEY_PREFIX + secrets.token_hex(32)
    return key, key[:DISPLAY_PREFIX_LENGTH], hash_key(key)


def hash_key(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


class APIKeyService:
    """Service for managing project API keys."""

    def generate_api_key(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        name: str,
    ) -> tuple[APIKey, str]:
        """Create a new API key for a project.

        Returns:
            tuple: (APIKey model, plaintext key)
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        name = (name or "").strip()
        if not name:
            raise ValidationError("API key name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"API key name must be at most {MAX_NAME_LENGTH} characters")

        key, prefix, key_hash = generate_key()
        api_key = APIKey(
            workspace_id=workspace.id,
            project_id=project.id,
            name=name,
            key_hash=key_hash,
            key_prefix=prefix,
        )
        session.add(api_key)
        session.commit()
        session.refresh(api_key)

        logger.info(
            "api_key_created", api_key_id=str(api_key.id), project_id=str(project.id)
        )
        return api_key, key

    def get_api_keys(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        return paginate(session, APIKey, APIKey.project_id == project.id, opts=opts)

    def delete_api_key(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        api_key_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        api_key = expect(walk_api_key(session, workspace, api_key_id), "API key").api_key
        session.delete(api_key)
        session.commit()
        logger.info("api_key_deleted", api_key_id=str(api_key_id))

    def authenticate_api_key(self, session: Session, key: Optional[str]) -> APIKey:
        """Resolve a plaintext key to its active APIKey row.

        Records usage on the row; the caller commits.

        Raises:
            AuthenticationError: Missing, unknown or revoked key
        """
        if not key:
            raise AuthenticationError("API key required")

        api_key = session.exec(
            select(APIKey).where(APIKey.key_hash == hash_key(key))
        ).first()
        if not api_key:
            raise AuthenticationError("Invalid API key")
        if api_key.status != APIKeyStatus.ACTIVE.value:
            raise AuthenticationError("API key has been revoked")

        api_key.last_used_at = utcnow()
        api_key.total_requests += 1
        session.add(api_key)
        return api_key
