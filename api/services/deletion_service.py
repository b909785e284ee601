"""Cascading deletion engine.

Removes a deletion root (project, namespace, version, language,
screenshot or container) together with every dependent record, then
corrects the ancestor usage counters. The storage layer has no ON DELETE
cascade; children are flushed out before their parents.

Records are removed in one database transaction. Blob deletion runs after
that transaction commits, one blob at a time, so a failed commit never
leaves records pointing at deleted blobs. A blob that cannot be deleted is
logged (blob_delete_failed) and skipped; the cascade does not roll back.

Callers verify the ownership chain before handing records to the engine.
"""

from typing import Optional

from sqlmodel import Session, select

from api.services.access import lock
from api.services.identity_service import IdentityClient
from api.services.usage_service import decrement
from unlingo.db.models import (
    APIKey,
    Language,
    Namespace,
    NamespaceVersion,
    Project,
    Release,
    Screenshot,
    ScreenshotContainer,
    ScreenshotKeyMapping,
    Workspace,
)
from unlingo.logging import get_logger
from unlingo.scheduler import Scheduler
from unlingo.storage import BlobStorage

logger = get_logger(__name__)


class CascadeDeleter:
    """Deletes subtrees of the entity hierarchy and their blobs."""

    def __init__(
        self,
        storage: BlobStorage,
        scheduler: Optional[Scheduler] = None,
        identity_client: Optional[IdentityClient] = None,
    ):
        self.storage = storage
        self.scheduler = scheduler
        self.identity_client = identity_client

    # =========================================================================
    # Deletion roots
    # =========================================================================

    def delete_project(self, session: Session, workspace: Workspace, project: Project) -> None:
        """Delete a project and everything it owns.

        Order: releases, screenshots (containers, key mappings, image),
        namespaces (versions, languages, files, schemas), API keys, then
        the project. The workspace project counter is decremented and the
        project's external identity revocation is scheduled.
        """
        lock(session, workspace)
        blobs: list[str] = []

        for release in session.exec(
            select(Release).where(Release.project_id == project.id)
        ).all():
            session.delete(release)
        session.flush()

        for screenshot in session.exec(
            select(Screenshot).where(Screenshot.project_id == project.id)
        ).all():
            self._remove_screenshot(session, screenshot, blobs)

        for namespace in session.exec(
            select(Namespace).where(Namespace.project_id == project.id)
        ).all():
            self._remove_namespace(session, namespace, blobs)

        for api_key in session.exec(
            select(APIKey).where(APIKey.project_id == project.id)
        ).all():
            session.delete(api_key)
        session.flush()

        project_id = project.id
        session.delete(project)
        decrement(workspace, "usage_projects")
        session.add(workspace)
        session.commit()

        logger.info(
            "project_deleted",
            project_id=str(project_id),
            workspace_id=str(workspace.id),
            blobs=len(blobs),
        )
        self._purge(blobs)

        if self.scheduler and self.identity_client:
            self.scheduler.run_after(
                0, self.identity_client.delete_identity, project_id, workspace.id
            )

    def delete_namespace(
        self, session: Session, project: Project, namespace: Namespace
    ) -> None:
        """Delete a namespace with its versions, and drop it from release manifests."""
        lock(session, project)
        blobs: list[str] = []

        namespace_key = str(namespace.id)
        for release in session.exec(
            select(Release).where(Release.project_id == project.id)
        ).all():
            kept = [
                entry
                for entry in release.namespace_versions or []
                if entry.get("namespace_id") != namespace_key
            ]
            if len(kept) != len(release.namespace_versions or []):
                release.namespace_versions = kept
                session.add(release)

        self._remove_namespace(session, namespace, blobs)
        decrement(project, "usage_namespaces")
        session.add(project)
        session.commit()

        logger.info("namespace_deleted", namespace_id=namespace_key, blobs=len(blobs))
        self._purge(blobs)

    def delete_version(
        self, session: Session, namespace: Namespace, version: NamespaceVersion
    ) -> None:
        """Delete a namespace version with its languages, files and schema.

        Releases that pin the version keep their stale reference.
        """
        lock(session, namespace)
        blobs: list[str] = []
        version_id = version.id

        removed_languages = self._remove_version(session, version, blobs)
        decrement(namespace, "usage_versions")
        decrement(namespace, "usage_languages", removed_languages)
        session.add(namespace)
        session.commit()

        logger.info(
            "version_deleted",
            version_id=str(version_id),
            languages=removed_languages,
            blobs=len(blobs),
        )
        self._purge(blobs)

    def delete_language(
        self,
        session: Session,
        namespace: Namespace,
        version: NamespaceVersion,
        language: Language,
    ) -> None:
        """Delete a language, its key mappings and its file."""
        lock(session, namespace, version)
        blobs: list[str] = []
        language_id = language.id

        self._remove_language(session, language, blobs)
        if version.primary_language_id == language_id:
            version.primary_language_id = None
        decrement(version, "usage_languages")
        decrement(namespace, "usage_languages")
        session.add(version)
        session.add(namespace)
        session.commit()

        logger.info("language_deleted", language_id=str(language_id))
        self._purge(blobs)

    def delete_screenshot(self, session: Session, screenshot: Screenshot) -> None:
        """Delete a screenshot, its containers and key mappings, and its image."""
        blobs: list[str] = []
        screenshot_id = screenshot.id
        self._remove_screenshot(session, screenshot, blobs)
        session.commit()

        logger.info("screenshot_deleted", screenshot_id=str(screenshot_id))
        self._purge(blobs)

    def delete_container(self, session: Session, container: ScreenshotContainer) -> None:
        """Delete a container and its key mappings."""
        container_id = container.id
        self._remove_container(session, container)
        session.commit()
        logger.info("container_deleted", container_id=str(container_id))

    # =========================================================================
    # Subtree removal (no commit)
    # =========================================================================

    def _remove_screenshot(
        self, session: Session, screenshot: Screenshot, blobs: list[str]
    ) -> None:
        for container in session.exec(
            select(ScreenshotContainer).where(
                ScreenshotContainer.screenshot_id == screenshot.id
            )
        ).all():
            self._remove_container(session, container)

        if screenshot.image_file_id:
            blobs.append(screenshot.image_file_id)
        session.delete(screenshot)
        session.flush()

    def _remove_container(self, session: Session, container: ScreenshotContainer) -> None:
        for mapping in session.exec(
            select(ScreenshotKeyMapping).where(
                ScreenshotKeyMapping.container_id == container.id
            )
        ).all():
            session.delete(mapping)
        session.flush()
        session.delete(container)
        session.flush()

    def _remove_namespace(
        self, session: Session, namespace: Namespace, blobs: list[str]
    ) -> None:
        for version in session.exec(
            select(NamespaceVersion).where(NamespaceVersion.namespace_id == namespace.id)
        ).all():
            self._remove_version(session, version, blobs)
        session.delete(namespace)
        session.flush()

    def _remove_version(
        self, session: Session, version: NamespaceVersion, blobs: list[str]
    ) -> int:
        """Remove a version and its languages. Returns the number of languages."""
        languages = session.exec(
            select(Language).where(Language.namespace_version_id == version.id)
        ).all()
        for language in languages:
            self._remove_language(session, language, blobs)

        # Mappings pinned to this version through any language
        for mapping in session.exec(
            select(ScreenshotKeyMapping).where(
                ScreenshotKeyMapping.namespace_version_id == version.id
            )
        ).all():
            session.delete(mapping)
        session.flush()

        if version.json_schema_file_id:
            blobs.append(version.json_schema_file_id)
        session.delete(version)
        session.flush()
        return len(languages)

    def _remove_language(
        self, session: Session, language: Language, blobs: list[str]
    ) -> None:
        for mapping in session.exec(
            select(ScreenshotKeyMapping).where(
                ScreenshotKeyMapping.language_id == language.id
            )
        ).all():
            session.delete(mapping)
        session.flush()

        if language.file_id:
            blobs.append(language.file_id)
        session.delete(language)
        session.flush()

    # =========================================================================
    # Blobs
    # =========================================================================

    def _purge(self, blobs: list[str]) -> None:
        for blob_id in blobs:
            try:
                self.storage.delete(blob_id)
            except Exception as e:
                logger.error("blob_delete_failed", blob_id=blob_id, error=str(e))
