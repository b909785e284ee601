"""Service for releases: tagged manifests of namespace versions.

A manifest is validated against the live hierarchy when it is written and
stored as identifiers only. Deleting a referenced version later leaves the
pair in place; `resolve_release` reports such pairs as unresolved instead
of repairing the manifest.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional
from uuid import UUID

from sqlmodel import Session, select

from api.auth.identity import Identity
from api.exceptions import DuplicateError, InvalidReferenceError
from api.services.access import (
    commit_unique,
    expect,
    resolve_workspace,
    walk_project,
    walk_release,
)
from api.services.validation import validate_release_name, validate_release_tag
from unlingo.db.models import Namespace, NamespaceVersion, Project, Release
from unlingo.db.models.release import manifest_entry
from unlingo.db.pagination import PageResult, PaginationOpts, paginate
from unlingo.logging import get_logger

logger = get_logger(__name__)


def _duplicate_message(tag: str) -> str:
    return f"A release with tag '{tag}' already exists in this project"


@dataclass
class ResolvedPair:
    namespace_id: UUID
    version_id: UUID
    namespace: Optional[Namespace] = None
    version: Optional[NamespaceVersion] = None

    @property
    def resolved(self) -> bool:
        return self.namespace is not None and self.version is not None


@dataclass
class ResolvedRelease:
    release: Release
    pairs: list[ResolvedPair] = field(default_factory=list)


class ReleaseService:
    """Service for release CRUD within a project."""

    def get_releases(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        opts: Optional[PaginationOpts] = None,
    ) -> PageResult:
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        return paginate(session, Release, Release.project_id == project.id, opts=opts)

    def get_release(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        release_id: UUID,
    ) -> Optional[Release]:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = walk_release(session, workspace, release_id)
        return chain.release if chain else None

    def resolve_release(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        release_id: UUID,
    ) -> Optional[ResolvedRelease]:
        """Resolve a release's manifest against live records.

        A pair whose namespace or version no longer exists, or no longer
        sits where the manifest says, resolves to None.
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = walk_release(session, workspace, release_id)
        if chain is None:
            return None

        resolved = ResolvedRelease(release=chain.release)
        for namespace_id, version_id in chain.release.pairs():
            pair = ResolvedPair(namespace_id=namespace_id, version_id=version_id)
            namespace = session.get(Namespace, namespace_id)
            if namespace is not None and namespace.project_id == chain.project.id:
                pair.namespace = namespace
                version = session.get(NamespaceVersion, version_id)
                if version is not None and version.namespace_id == namespace.id:
                    pair.version = version
            resolved.pairs.append(pair)
        return resolved

    def create_release(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        project_id: UUID,
        name: str,
        tag: str,
        namespace_versions: Iterable[tuple[UUID, UUID]],
    ) -> Release:
        """Create a release pinning (namespace_id, version_id) pairs.

        Raises:
            ValidationError: Empty or overlong name or tag
            DuplicateError: Tag already used in this project
            InvalidReferenceError: A pair does not belong to the project
        """
        workspace = resolve_workspace(session, identity, workspace_id)
        project = expect(walk_project(session, workspace, project_id), "Project").project
        name = validate_release_name(name)
        tag = validate_release_tag(tag)

        if self._tag_taken(session, project, tag):
            raise DuplicateError(_duplicate_message(tag))
        manifest = self._validate_manifest(session, project, namespace_versions)

        release = Release(
            project_id=project.id, name=name, tag=tag, namespace_versions=manifest
        )
        session.add(release)
        commit_unique(session, _duplicate_message(tag))
        session.refresh(release)

        logger.info(
            "release_created",
            release_id=str(release.id),
            project_id=str(project.id),
            pairs=len(manifest),
        )
        return release

    def update_release(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        release_id: UUID,
        name: Optional[str] = None,
        tag: Optional[str] = None,
        namespace_versions: Optional[Iterable[tuple[UUID, UUID]]] = None,
    ) -> Release:
        workspace = resolve_workspace(session, identity, workspace_id)
        chain = expect(walk_release(session, workspace, release_id), "Release")
        release, project = chain.release, chain.project

        if name is not None:
            release.name = validate_release_name(name)
        if tag is not None:
            tag = validate_release_tag(tag)
            if tag != release.tag:
                if self._tag_taken(session, project, tag, exclude_id=release.id):
                    raise DuplicateError(_duplicate_message(tag))
                release.tag = tag
        if namespace_versions is not None:
            release.namespace_versions = self._validate_manifest(
                session, project, namespace_versions
            )

        session.add(release)
        commit_unique(session, _duplicate_message(release.tag))
        session.refresh(release)
        return release

    def delete_release(
        self,
        session: Session,
        identity: Optional[Identity],
        workspace_id: UUID,
        release_id: UUID,
    ) -> None:
        workspace = resolve_workspace(session, identity, workspace_id)
        release = expect(walk_release(session, workspace, release_id), "Release").release
        session.delete(release)
        session.commit()
        logger.info("release_deleted", release_id=str(release_id))

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _validate_manifest(
        session: Session,
        project: Project,
        namespace_versions: Iterable[tuple[UUID, UUID]],
    ) -> list[dict[str, str]]:
        """Check every pair against the project; reject the whole list on any miss."""
        manifest = []
        for namespace_id, version_id in namespace_versions:
            namespace = session.get(Namespace, namespace_id)
            if namespace is None or namespace.project_id != project.id:
                raise InvalidReferenceError("Invalid namespace selected")
            version = session.get(NamespaceVersion, version_id)
            if version is None or version.namespace_id != namespace.id:
                raise InvalidReferenceError("Invalid namespace version selected")
            manifest.append(manifest_entry(namespace_id, version_id))
        return manifest

    @staticmethod
    def _tag_taken(
        session: Session,
        project: Project,
        tag: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        statement = select(Release).where(
            Release.project_id == project.id, Release.tag == tag
        )
        if exclude_id:
            statement = statement.where(Release.id != exclude_id)
        return session.exec(statement).first() is not None
