"""Screenshot annotation models.

Screenshot -> ScreenshotContainer -> ScreenshotKeyMapping anchors
translation keys onto regions of an uploaded UI image.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from unlingo.db.custom_types import UTCDateTime
from unlingo.db.models.base import UUIDModel, TimestampMixin, utcnow


class Screenshot(UUIDModel, TimestampMixin, table=True):
    """An uploaded UI image within a project. Names are unique per project."""

    __tablename__ = "screenshots"
    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_screenshots_project_name"),
    )

    project_id: UUID = Field(foreign_key="projects.id", index=True)
    name: str = Field(max_length=100)
    description: Optional[str] = None

    image_file_id: str
    image_size: int
    image_mime_type: str
    width: int
    height: int

    uploaded_by: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class ScreenshotContainer(UUIDModel, TimestampMixin, table=True):
    """A rectangular region on a screenshot.

    Position and size are percentages of the image dimensions.
    """

    __tablename__ = "screenshot_containers"

    screenshot_id: UUID = Field(foreign_key="screenshots.id", index=True)

    x: float
    y: float
    width: float
    height: float

    background_color: Optional[str] = None
    description: Optional[str] = None


class ScreenshotKeyMapping(UUIDModel, TimestampMixin, table=True):
    """Assignment of a translation key (for a version and language) to a container."""

    __tablename__ = "screenshot_key_mappings"
    __table_args__ = (
        UniqueConstraint(
            "container_id",
            "namespace_version_id",
            "language_id",
            "translation_key",
            name="uq_key_mappings_assignment",
        ),
    )

    container_id: UUID = Field(foreign_key="screenshot_containers.id", index=True)
    namespace_version_id: UUID = Field(foreign_key="namespace_versions.id", index=True)
    language_id: UUID = Field(foreign_key="languages.id", index=True)
    translation_key: str
