"""API key model for the public translations endpoint.

Keys are scoped to a single project. Only the SHA-256 hash is stored;
the plaintext key is returned once at creation.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlmodel import Field

from unlingo.db.custom_types import UTCDateTime
from unlingo.db.models.base import UUIDModel, TimestampMixin


class APIKeyStatus(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"


class APIKey(UUIDModel, TimestampMixin, table=True):
    __tablename__ = "api_keys"

    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True)

    name: str = Field(max_length=100)
    key_hash: str = Field(unique=True, index=True)
    # First characters of the plaintext key, for display
    key_prefix: str = Field(max_length=20)

    status: str = Field(default=APIKeyStatus.ACTIVE.value)
    last_used_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    total_requests: int = Field(default=0)
