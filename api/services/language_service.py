"""Service for language operations and translation file content.

The first language added to a version becomes its primary language. The
primary language's file is the template for the others: creating a
language resolves and returns that file reference, and saving the primary
language regenerates the version's JSON schema and aligns every other
language with its keys in the same transaction.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import DuplicateError, NotFoundError, ValidationError
from api.services.access import (
    commit_unique,
    expect,
    lock,
    resolve_workspace,
    walk_language,
    walk_version,
)
from api.services.analytics_service import AnalyticsClient
from api.services.deletion_service import CascadeDeleter
from api.services.json_schema import build_schema
from api.services.structure_sync import synchronize
from api.services.usage_service import check_limit, increment
from api.services.validation import normalize_language_code
from unlingo.db.models import Language, NamespaceVersion
from unlingo.db.pagination import PageResult, PaginationOpts, paginate
from unlingo.logging import get_logger
from unlingo.scheduler import Scheduler
from unlingo.storage import BlobStorage

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass
class LanguageContext:
    """A language with the context the editor needs."""

    language: Language
    is_primary: bool
    namespace_id: UUID
    namespace_name: str
    version: str
    project_id: UUID


@dataclass
class CreatedLanguage:
    language: Language
    # File of the version's primary language at creation time, if any
    primary_file_id: Optional[str]


def encode_json(content: Any) -> bytes:
    return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


class LanguageService:
    """Service for languages within a namespace version."""

    def __init__(
        self,
        storage: BlobStorage,
        deleter: CascadeDeleter,
        scheduler: Optional[Scheduler] = None,
        analytics: Optional[AnalyticsClient] = None,
    ):
        self.storage = storage
        self.deleter = deleter
        self.scheduler = scheduler
        self.analytics = analytics

    # =========================================================================
    # Queries
    # =========================================================================

    def get_languages(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        workspace = resolve_workspace(session, identity, workspace_id)
        version = expect(walk_version(session, workspace, version_id), "Version").version
        return paginate(
            session, Language, Language.namespace_version_id == version.id, opts=opts
        )

    def get_language(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        language_id: UUID,
    ) -> Optional[LanguageContext]:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = walk_language(session, workspace, language_id)
        if chain is None:
            return None
        return LanguageContext(
            language=chain.language,
            is_primary=chain.version.primary_language_id == chain.language.id,
            namespace_id=chain.namespace.id,
            namespace_name=chain.namespace.name,
            version=chain.version.version,
            project_id=chain.project.id,
        )

    def get_language_by_code(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
        language_code: str,
    ) -> Optional[Language]:
        workspace = resolve_workspace(session, identity, workspace_id)
        version = expect(walk_version(session, workspace, version_id), "Version").version
        return self.find_by_code(session, version, normalize_language_code(language_code))

    @staticmethod
    def find_by_code(
        session: Session, version: NamespaceVersion, language_code: str
    ) -> Optional[Language]:
        return session.exec(
            select(Language).where(
                Language.namespace_version_id == version.id,
                Language.language_code == language_code,
            )
        ).first()

    def get_language_content(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        language_id: UUID,
    ) -> Optional[dict[str, Any]]:
        """Return the parsed translation file, or None if it has no file."""
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_language(session, workspace, language_id), "Language")
        language = chain.language
        if not language.file_id:
            return None

        content = self.read_json(language.file_id)
        self._track(
            "language_content_fetched",
            {
                "workspace_id": str(workspace.id),
                "project_id": str(chain.project.id),
                "namespace": chain.namespace.name,
                "version": chain.version.version,
                "language": language.language_code,
            },
        )
        return content

    def get_json_schema(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
    ) -> Optional[dict[str, Any]]:
        workspace = resolve_workspace(session, identity, workspace_id)
        version = expect(walk_version(session, workspace, version_id), "Version").version
        if not version.json_schema_file_id:
            return None
        return self.read_json(version.json_schema_file_id)

    def read_json(self, blob_id: str) -> Any:
        data = self.storage.get(blob_id)
        if data is None:
            raise NotFoundError("Translation file not found in storage")
        try:
            return json.loads(data)
        except ValueError as e:
            raise ValidationError("Stored translation file is not valid JSON") from e

    # =========================================================================
    # Mutations
    # =========================================================================

    def create_language(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
        language_code: str,
    ) -> CreatedLanguage:
        """Add a language to a version.

        Raises:
            DuplicateError: Code already present in the version
            LimitReachedError: Version is at its language limit
            ValidationError: Invalid language code
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_version(session, workspace, version_id), "Version")
        namespace, version = chain.namespace, chain.version
        lock(session, namespace, version)
        code = normalize_language_code(language_code)

        message = f"Language '{code}' already exists in this version"
        if self.find_by_code(session, version, code):
            raise DuplicateError(message)
        check_limit(
            version.usage_languages,
            workspace.limit_languages_per_version,
            "languages",
            "Language limit reached for this version. Please upgrade your plan.",
        )

        primary_file_id = None
        if version.primary_language_id:
            primary = session.get(Language, version.primary_language_id)
            primary_file_id = primary.file_id if primary else None

        language = Language(namespace_version_id=version.id, language_code=code)
        session.add(language)
        session.flush()
        if version.primary_language_id is None:
            version.primary_language_id = language.id
        increment(version, "usage_languages")
        increment(namespace, "usage_languages")
        session.add(version)
        session.add(namespace)
        commit_unique(session, message)
        session.refresh(language)

        logger.info(
            "language_created",
            language_id=str(language.id),
            version_id=str(version_id),
            language_code=code,
        )
        return CreatedLanguage(language=language, primary_file_id=primary_file_id)

    def update_language_content(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        language_id: UUID,
        content: dict[str, Any],
    ) -> Language:
        """Replace a language's translation file.

        Saving the primary language also regenerates the version's schema.
        """
        if not isinstance(content, dict):
            raise ValidationError("Translation content must be a JSON object")

        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_language(session, workspace, language_id), "Language")
        language, version = chain.language, chain.version
        return self.store_content(session, version, language, content)

    def store_content(
        self,
        session: Session,
        version: NamespaceVersion,
        language: Language,
        content: dict[str, Any],
    ) -> Language:
        """Store `content` as the language's file and commit.

        When `language` is the version's primary language the schema is
        regenerated and the other languages are aligned with its keys:
        languages without a file get a copy of `content`, the rest get
        missing keys added and dropped keys removed.

        Replaced blobs are deleted after the commit; the new ones are
        deleted if anything before the commit fails.
        """
        new_blobs: list[str] = []
        old_blobs: list[str] = []
        try:
            self._replace_file(session, language, content, new_blobs, old_blobs)
            if version.primary_language_id == language.id:
                schema = encode_json(build_schema(content))
                new_blobs.append(self.storage.store(schema, JSON_CONTENT_TYPE))
                if version.json_schema_file_id:
                    old_blobs.append(version.json_schema_file_id)
                version.json_schema_file_id = new_blobs[-1]
                version.json_schema_size = len(schema)
                session.add(version)
                self._synchronize_languages(
                    session, version, language, content, new_blobs, old_blobs
                )
            session.commit()
        except Exception:
            session.rollback()
            for blob_id in new_blobs:
                self.storage.delete(blob_id)
            raise
        session.refresh(language)

        for blob_id in old_blobs:
            try:
                self.storage.delete(blob_id)
            except Exception as e:
                logger.error("blob_delete_failed", blob_id=blob_id, error=str(e))
        return language

    def _replace_file(
        self,
        session: Session,
        language: Language,
        content: dict[str, Any],
        new_blobs: list[str],
        old_blobs: list[str],
    ) -> None:
        data = encode_json(content)
        new_blobs.append(self.storage.store(data, JSON_CONTENT_TYPE))
        if language.file_id:
            old_blobs.append(language.file_id)
        language.file_id = new_blobs[-1]
        language.file_size = len(data)
        session.add(language)

    def _synchronize_languages(
        self,
        session: Session,
        version: NamespaceVersion,
        primary: Language,
        content: dict[str, Any],
        new_blobs: list[str],
        old_blobs: list[str],
    ) -> None:
        others = session.exec(
            select(Language).where(
                Language.namespace_version_id == version.id,
                Language.id != primary.id,
            )
        ).all()
        synced = 0
        for other in others:
            data = self.storage.get(other.file_id) if other.file_id else None
            if data is None:
                aligned, applied = content, 1
            else:
                try:
                    existing = json.loads(data)
                except ValueError as e:
                    raise ValidationError(
                        f"Stored file for '{other.language_code}' is not valid JSON"
                    ) from e
                if not isinstance(existing, dict):
                    existing = {}
                aligned, applied = synchronize(existing, content)
            if applied:
                self._replace_file(session, other, aligned, new_blobs, old_blobs)
                synced += 1

        if synced:
            logger.info(
                "languages_synchronized",
                version_id=str(version.id),
                primary_language_id=str(primary.id),
                languages=synced,
            )

    def delete_language(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        language_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_language(session, workspace, language_id), "Language")
        self.deleter.delete_language(session, chain.namespace, chain.version, chain.language)

    def _track(self, event: str, properties: dict[str, Any]) -> None:
        if self.scheduler and self.analytics:
            self.scheduler.run_after(0, self.analytics.track, event, properties)
