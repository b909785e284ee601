"""Base models for SQLModel tables.

All tables use UUID primary keys so identifiers are opaque and cannot be
enumerated across tenants.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from unlingo.db.custom_types import UTCDateTime


def utcnow() -> datetime:
    """Timezone-aware UTC now, the form stored in every timestamp column."""
    return datetime.now(timezone.utc)


class UUIDModel(SQLModel):
    """Base model with UUID primary key."""

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        index=True,
        nullable=False,
    )


class TimestampMixin(SQLModel):
    """Mixin for created_at and updated_at timestamps.

    created_at is the ordering key for cursor pagination, so it is indexed.
    """

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=UTCDateTime,
        nullable=False,
        index=True,
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_type=UTCDateTime,
        sa_column_kwargs={"onupdate": utcnow},
    )
