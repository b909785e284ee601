"""Service for screenshots, their containers and key mappings.

Screenshot > ScreenshotContainer > ScreenshotKeyMapping anchors
translation keys onto regions of an uploaded UI image. Images are
uploaded to blob storage before the screenshot row is created; if the
row cannot be created the uploaded blob is deleted again.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import DuplicateError, InvalidReferenceError, ValidationError
from api.services.access import (
    commit_unique,
    expect,
    resolve_workspace,
    walk_container,
    walk_mapping,
    walk_project,
    walk_screenshot,
)
from api.services.deletion_service import CascadeDeleter
from unlingo import config
from unlingo.db.models import (
    Language,
    Namespace,
    NamespaceVersion,
    Project,
    Screenshot,
    ScreenshotContainer,
    ScreenshotKeyMapping,
)
from unlingo.db.pagination import PageResult, PaginationOpts, paginate
from unlingo.logging import get_logger
from unlingo.storage import BlobStorage

logger = get_logger(__name__)

MAX_NAME_LENGTH = 100


def _duplicate_message(name: str) -> str:
    return f"A screenshot named '{name}' already exists in this project"


@dataclass
class ScreenshotWithUrl:
    screenshot: Screenshot
    image_url: Optional[str]


def _check_image(mime_type: Optional[str], size: int) -> None:
    if not (mime_type or "").startswith("image/"):
        raise ValidationError("File must be an image")
    if size > config.MAX_SCREENSHOT_BYTES:
        raise ValidationError("Image must be 10 MB or smaller")


def _check_rectangle(
    x: Optional[float],
    y: Optional[float],
    width: Optional[float],
    height: Optional[float],
) -> None:
    """Container geometry is in percent of the image."""
    for label, value in (("x", x), ("y", y), ("width", width), ("height", height)):
        if value is not None and not 0 <= value <= 100:
            raise ValidationError(f"Container {label} must be between 0 and 100")
    for label, value in (("width", width), ("height", height)):
        if value is not None and value <= 0:
            raise ValidationError(f"Container {label} must be greater than 0")


class ScreenshotService:
    """Service for the screenshot annotation workflow."""

    def __init__(self, storage: BlobStorage, deleter: CascadeDeleter):
        self.storage = storage
        self.deleter = deleter

    # =========================================================================
    # Screenshots
    # =========================================================================

    def get_screenshots_for_project(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        """Page through a project's screenshots with their image URLs."""
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        result = paginate(
            session, Screenshot, Screenshot.project_id == project.id, opts=opts
        )
        result.page = [self._with_url(screenshot) for screenshot in result.page]
        return result

    def get_screenshot(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        screenshot_id: UUID,
    ) -> Optional[ScreenshotWithUrl]:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = walk_screenshot(session, workspace, screenshot_id)
        return self._with_url(chain.screenshot) if chain else None

    def upload_image(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        content: bytes,
        content_type: str,
    ) -> str:
        """Store a screenshot image for `project_id` and return its blob ID.

        Access to the project, the mime type and the size are checked
        before anything is written to storage.
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        expect(walk_project(session, workspace, project_id), "Project")
        _check_image(content_type, len(content))
        return self.storage.store(content, content_type)

    def create_screenshot(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        name: str,
        image_file_id: str,
        image_size: int,
        image_mime_type: str,
        width: int,
        height: int,
        description: Optional[str] = None,
    ) -> Screenshot:
        """Create a screenshot for an already uploaded image.

        The image blob is deleted if anything here fails.

        Raises:
            ValidationError: Bad name, mime type, dimensions or size
            DuplicateError: Name already used in this project
        """
        try:
            workspace = resolve_workspace(session, identity, workspace_id)
            project = expect(
                walk_project(session, workspace, project_id), "Project"
            ).project
            name = self._clean_name(name)
            _check_image(image_mime_type, image_size)
            if width <= 0 or height <= 0:
                raise ValidationError("Image dimensions must be positive")
            if self._name_taken(session, project, name):
                raise DuplicateError(_duplicate_message(name))

            screenshot = Screenshot(
                project_id=project.id,
                name=name,
                description=description,
                image_file_id=image_file_id,
                image_size=image_size,
                image_mime_type=image_mime_type,
                width=width,
                height=height,
                uploaded_by=identity.subject,
            )
            session.add(screenshot)
            commit_unique(session, _duplicate_message(name))
        except Exception:
            self._discard_image(image_file_id)
            raise

        session.refresh(screenshot)
        logger.info(
            "screenshot_created",
            screenshot_id=str(screenshot.id),
            project_id=str(project_id),
            size=image_size,
        )
        return screenshot

    def update_screenshot(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        screenshot_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Screenshot:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_screenshot(session, workspace, screenshot_id), "Screenshot")
        screenshot = chain.screenshot

        if name is not None:
            name = self._clean_name(name)
            if name != screenshot.name:
                if self._name_taken(session, chain.project, name, exclude_id=screenshot.id):
                    raise DuplicateError(_duplicate_message(name))
                screenshot.name = name
        if description is not None:
            screenshot.description = description

        session.add(screenshot)
        commit_unique(session, _duplicate_message(screenshot.name))
        session.refresh(screenshot)
        return screenshot

    def delete_screenshot(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        screenshot_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_screenshot(session, workspace, screenshot_id), "Screenshot")
        self.deleter.delete_screenshot(session, chain.screenshot)

    # =========================================================================
    # Containers
    # =========================================================================

    def get_containers_for_screenshot(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        screenshot_id: UUID,
    ) -> list[ScreenshotContainer]:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_screenshot(session, workspace, screenshot_id), "Screenshot")
        return list(
            session.exec(
                select(ScreenshotContainer)
                .where(ScreenshotContainer.screenshot_id == chain.screenshot.id)
                .order_by(ScreenshotContainer.created_at)
            ).all()
        )

    def create_container(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        screenshot_id: UUID,
        x: float,
        y: float,
        width: float,
        height: float,
        background_color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ScreenshotContainer:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_screenshot(session, workspace, screenshot_id), "Screenshot")
        _check_rectangle(x, y, width, height)

        container = ScreenshotContainer(
            screenshot_id=chain.screenshot.id,
            x=x,
            y=y,
            width=width,
            height=height,
            background_color=background_color,
            description=description,
        )
        session.add(container)
        session.commit()
        session.refresh(container)
        return container

    def update_container(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        container_id: UUID,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        background_color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ScreenshotContainer:
        workspace = resolve_workspace(session, identity, workspace_id)
        container = expect(
            walk_container(session, workspace, container_id), "Container"
        ).container
        _check_rectangle(x, y, width, height)

        updates = {
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "background_color": background_color,
            "description": description,
        }
        for attr, value in updates.items():
            if value is not None:
                setattr(container, attr, value)

        session.add(container)
        session.commit()
        session.refresh(container)
        return container

    def delete_container(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        container_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_container(session, workspace, container_id), "Container")
        self.deleter.delete_container(session, chain.container)

    # =========================================================================
    # Key mappings
    # =========================================================================

    def get_container_mappings(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        container_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        workspace = resolve_workspace(session, identity, workspace_id)
        container = expect(
            walk_container(session, workspace, container_id), "Container"
        ).container
        return paginate(
            session,
            ScreenshotKeyMapping,
            ScreenshotKeyMapping.container_id == container.id,
            opts=opts,
        )

    def assign_key_to_container(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        container_id: UUID,
        namespace_version_id: UUID,
        language_id: UUID,
        translation_key: str,
    ) -> ScreenshotKeyMapping:
        """Assign a translation key to a container.

        Assigning the same (version, language, key) twice returns the
        existing mapping.

        Raises:
            InvalidReferenceError: Version outside the screenshot's project,
                or language outside the version
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_container(session, workspace, container_id), "Container")
        translation_key = (translation_key or "").strip()
        if not translation_key:
            raise ValidationError("Translation key is required")

        version = session.get(NamespaceVersion, namespace_version_id)
        namespace = session.get(Namespace, version.namespace_id) if version else None
        if namespace is None or namespace.project_id != chain.project.id:
            raise InvalidReferenceError("Invalid namespace version selected")
        language = session.get(Language, language_id)
        if language is None or language.namespace_version_id != version.id:
            raise InvalidReferenceError("Invalid language selected")

        existing = self._find_mapping(
            session, chain.container.id, version.id, language.id, translation_key
        )
        if existing:
            return existing

        mapping = ScreenshotKeyMapping(
            container_id=chain.container.id,
            namespace_version_id=version.id,
            language_id=language.id,
            translation_key=translation_key,
        )
        session.add(mapping)
        try:
            commit_unique(session, "Key is already assigned to this container")
        except DuplicateError:
            # A concurrent assignment won; hand back its row
            existing = self._find_mapping(
                session, chain.container.id, version.id, language.id, translation_key
            )
            if existing is None:
                raise
            return existing
        session.refresh(mapping)
        return mapping

    def remove_key_from_container(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        container_id: UUID,
        namespace_version_id: UUID,
        language_id: UUID,
        translation_key: str,
    ) -> bool:
        """Remove an assignment. Returns False if there was none."""
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_container(session, workspace, container_id), "Container")
        mapping = self._find_mapping(
            session,
            chain.container.id,
            namespace_version_id,
            language_id,
            (translation_key or "").strip(),
        )
        if mapping is None:
            return False
        session.delete(mapping)
        session.commit()
        return True

    def delete_key_mapping(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        mapping_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        mapping = expect(walk_mapping(session, workspace, mapping_id), "Key mapping").mapping
        session.delete(mapping)
        session.commit()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _discard_image(self, image_file_id: str) -> None:
        try:
            self.storage.delete(image_file_id)
        except Exception as e:
            logger.error("blob_delete_failed", blob_id=image_file_id, error=str(e))

    def _with_url(self, screenshot: Screenshot) -> ScreenshotWithUrl:
        return ScreenshotWithUrl(
            screenshot=screenshot,
            image_url=self.storage.get_url(screenshot.image_file_id),
        )

    @staticmethod
    def _clean_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Screenshot name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Screenshot name must be at most {MAX_NAME_LENGTH} characters"
            )
        return name

    @staticmethod
    def _name_taken(
        session: Session,
        project: Project,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        statement = select(Screenshot).where(
            Screenshot.project_id == project.id, Screenshot.name == name
        )
        if exclude_id:
            statement = statement.where(Screenshot.id != exclude_id)
        return session.exec(statement).first() is not None

    @staticmethod
    def _find_mapping(
        session: Session,
        container_id: UUID,
        namespace_version_id: UUID,
        language_id: UUID,
        translation_key: str,
    ) -> Optional[ScreenshotKeyMapping]:
        return session.exec(
            select(ScreenshotKeyMapping).where(
                ScreenshotKeyMapping.container_id == container_id,
                ScreenshotKeyMapping.namespace_version_id == namespace_version_id,
                ScreenshotKeyMapping.language_id == language_id,
                ScreenshotKeyMapping.translation_key == translation_key,
            )
        ).first()
