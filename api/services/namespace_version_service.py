"""Service for namespace version operations, including version copy.

A version may be created empty or as a copy of another version of the
same namespace. Copying is best-effort: the new version is committed
first, then each source language is duplicated (file blob included).
A language whose file cannot be copied is still created, without a file,
and the failure is logged. The copy never rolls back the new version.
"""

from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import DuplicateError, InvalidReferenceError
from api.services.access import (
    commit_unique,
    expect,
    lock,
    not_found,
    resolve_workspace,
    walk_language,
    walk_namespace,
    walk_version,
)
from api.services.deletion_service import CascadeDeleter
from api.services.usage_service import check_limit, increment
from api.services.validation import validate_version
from unlingo.db.models import Language, Namespace, NamespaceVersion
from unlingo.db.pagination import PageResult, PaginationOpts, paginate
from unlingo.logging import get_logger
from unlingo.storage import BlobStorage, BlobStorageError

logger = get_logger(__name__)


def _duplicate_message(version: str) -> str:
    return f"Version '{version}' already exists for this namespace"


class NamespaceVersionService:
    """Service for version CRUD within a namespace."""

    def __init__(self, storage: BlobStorage, deleter: CascadeDeleter):
        self.storage = storage
        self.deleter = deleter

    def get_namespace_versions(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        namespace_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        workspace = resolve_workspace(session, identity, workspace_id)
        namespace = expect(
            walk_namespace(session, workspace, namespace_id), "Namespace"
        ).namespace
        return paginate(
            session,
            NamespaceVersion,
            NamespaceVersion.namespace_id == namespace.id,
            opts=opts,
        )

    def get_namespace_version(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
    ) -> Optional[NamespaceVersion]:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = walk_version(session, workspace, version_id)
        return chain.version if chain else None

    def create_namespace_version(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        namespace_id: UUID,
        version: str,
        description: Optional[str] = None,
        copy_from_version_id: Optional[UUID] = None,
    ) -> NamespaceVersion:
        """Create a version, optionally copying another version's languages.

        Args:
            version: "main" or a semantic version string
            copy_from_version_id: Version of the same namespace to copy

        Raises:
            DuplicateError: Version string already used in this namespace
            LimitReachedError: Namespace is at its version limit
            InvalidReferenceError: Copy source belongs to another namespace
            NotFoundError: Copy source does not exist
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        namespace = expect(
            walk_namespace(session, workspace, namespace_id), "Namespace"
        ).namespace
        lock(session, namespace)
        version = validate_version(version)

        if self.version_taken(session, namespace, version):
            raise DuplicateError(_duplicate_message(version))
        check_limit(
            namespace.usage_versions,
            workspace.limit_versions_per_namespace,
            "versions",
            "Version limit reached for this namespace. Please upgrade your plan.",
        )

        source = None
        if copy_from_version_id:
            source_chain = walk_version(session, workspace, copy_from_version_id)
            if source_chain is None:
                raise not_found("Source version")
            source = source_chain.version
            if source.namespace_id != namespace.id:
                raise InvalidReferenceError(
                    "Source version must belong to the same namespace"
                )

        new_version = NamespaceVersion(
            namespace_id=namespace.id,
            version=version,
            description=description,
            usage_languages=0,
        )
        session.add(new_version)
        increment(namespace, "usage_versions")
        session.add(namespace)
        commit_unique(session, _duplicate_message(version))
        session.refresh(new_version)

        logger.info(
            "version_created",
            version_id=str(new_version.id),
            namespace_id=str(namespace.id),
            copy_from=str(source.id) if source else None,
        )

        if source is not None:
            self._copy_languages(session, namespace, new_version, source)
        return new_version

    def update_namespace_version(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
        version: Optional[str] = None,
        description: Optional[str] = None,
    ) -> NamespaceVersion:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_version(session, workspace, version_id), "Version")
        record = chain.version

        if version is not None:
            version = validate_version(version)
            if version != record.version:
                if self.version_taken(
                    session, chain.namespace, version, exclude_id=record.id
                ):
                    raise DuplicateError(_duplicate_message(version))
                record.version = version
        if description is not None:
            record.description = description

        session.add(record)
        commit_unique(session, _duplicate_message(record.version))
        session.refresh(record)
        return record

    def delete_namespace_version(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_version(session, workspace, version_id), "Version")
        self.deleter.delete_version(session, chain.namespace, chain.version)

    def set_primary_language(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        version_id: UUID,
        language_id: UUID,
    ) -> NamespaceVersion:
        """Make `language_id` the version's primary (template) language.

        Raises:
            InvalidReferenceError: The language belongs to another version
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        version = expect(walk_version(session, workspace, version_id), "Version").version
        language = expect(walk_language(session, workspace, language_id), "Language").language
        if language.namespace_version_id != version.id:
            raise InvalidReferenceError("Language does not belong to this version")

        version.primary_language_id = language.id
        session.add(version)
        session.commit()
        session.refresh(version)
        return version

    def activate_version(self, session: Session, version: NamespaceVersion) -> None:
        """Mark `version` active and deactivate the namespace's previous one.

        Used by the public translations endpoint; the caller commits.
        """
        for current in session.exec(
            select(NamespaceVersion).where(
                NamespaceVersion.namespace_id == version.namespace_id,
                NamespaceVersion.is_active == True,  # noqa: E712
                NamespaceVersion.id != version.id,
            )
        ).all():
            current.is_active = False
            session.add(current)
        version.is_active = True
        session.add(version)

    # =========================================================================
    # Version copy
    # =========================================================================

    def _copy_languages(
        self,
        session: Session,
        namespace: Namespace,
        new_version: NamespaceVersion,
        source: NamespaceVersion,
    ) -> None:
        source_languages = session.exec(
            select(Language)
            .where(Language.namespace_version_id == source.id)
            .order_by(Language.created_at)
        ).all()

        attempted = 0
        copied_files = 0
        for source_language in source_languages:
            attempted += 1
            file_id, file_size = None, None
            if source_language.file_id:
                try:
                    file_id, file_size = self._copy_blob(source_language.file_id)
                    copied_files += 1
                except Exception as e:
                    logger.warning(
                        "language_copy_failed",
                        source_language_id=str(source_language.id),
                        language_code=source_language.language_code,
                        version_id=str(new_version.id),
                        error=str(e),
                    )

            language = Language(
                namespace_version_id=new_version.id,
                language_code=source_language.language_code,
                file_id=file_id,
                file_size=file_size,
            )
            session.add(language)
            session.flush()
            if source.primary_language_id == source_language.id:
                new_version.primary_language_id = language.id

        if source.json_schema_file_id:
            try:
                schema_id, schema_size = self._copy_blob(source.json_schema_file_id)
                new_version.json_schema_file_id = schema_id
                new_version.json_schema_size = schema_size
            except Exception as e:
                logger.warning(
                    "schema_copy_failed", version_id=str(new_version.id), error=str(e)
                )

        lock(session, namespace, new_version)
        increment(new_version, "usage_languages", attempted)
        increment(namespace, "usage_languages", attempted)
        session.add(new_version)
        session.add(namespace)
        session.commit()
        session.refresh(new_version)

        logger.info(
            "version_copied",
            version_id=str(new_version.id),
            source_version_id=str(source.id),
            languages=attempted,
            files=copied_files,
        )

    def _copy_blob(self, blob_id: str) -> tuple[str, int]:
        url = self.storage.get_url(blob_id)
        if not url:
            raise BlobStorageError(f"Source blob not found: {blob_id}")
        content = self.storage.download(url)
        return self.storage.store(content, "application/json"), len(content)

    @staticmethod
    def version_taken(
        session: Session,
        namespace: Namespace,
        version: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        statement = select(NamespaceVersion).where(
            NamespaceVersion.namespace_id == namespace.id,
            NamespaceVersion.version == version,
        )
        if exclude_id:
            statement = statement.where(NamespaceVersion.id != exclude_id)
        return session.exec(statement).first() is not None
