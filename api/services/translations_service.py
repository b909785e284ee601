"""Public translations API used by end-user applications.

Requests authenticate with a project API key instead of a dashboard
session. Reads count against the workspace's monthly request limit.
Writes publish a complete new version in one call and make it the
namespace's active version.
"""

from typing import Any, Optional

from sqlmodel import Session, select

from api.exceptions import DuplicateError, NotFoundError, ValidationError
from api.services.access import commit_unique, lock
from api.services.analytics_service import AnalyticsClient
from api.services.api_key_service import APIKeyService
from api.services.json_schema import build_schema
from api.services.language_service import JSON_CONTENT_TYPE, LanguageService, encode_json
from api.services.namespace_version_service import NamespaceVersionService
from api.services.usage_service import UsageService, check_limit, increment
from api.services.validation import normalize_language_code, validate_version
from unlingo.db.models import (
    MAIN_VERSION,
    APIKey,
    Language,
    Namespace,
    NamespaceVersion,
    Project,
    Workspace,
    utcnow,
)
from unlingo.logging import bind_context, get_logger
from unlingo.scheduler import Scheduler
from unlingo.storage import BlobStorage

logger = get_logger(__name__)


class TranslationsService:
    """Reads and publishes translations on behalf of an API key."""

    def __init__(
        self,
        storage: BlobStorage,
        api_keys: APIKeyService,
        usage: UsageService,
        languages: LanguageService,
        versions: NamespaceVersionService,
        scheduler: Optional[Scheduler] = None,
        analytics: Optional[AnalyticsClient] = None,
    ):
        self.storage = storage
        self.api_keys = api_keys
        self.usage = usage
        self.languages = languages
        self.versions = versions
        self.scheduler = scheduler
        self.analytics = analytics

    def get_translations(
        self,
        session: Session,
        api_key: Optional[str],
        namespace_name: str,
        version: Optional[str] = None,
        language: Optional[str] = None,
    ) -> dict[str, Any]:
        """Fetch a namespace's translations.

        Args:
            version: Version string. Defaults to the active version, then "main"
            language: Language code. Defaults to every language of the version

        Returns:
            Dict with namespace, version, translations and metadata
        """
        key, project, workspace = self._authenticate(session, api_key)
        namespace = self._namespace(session, project, namespace_name)
        record = self._version(session, namespace, version)

        if language:
            code = normalize_language_code(language)
            row = LanguageService.find_by_code(session, record, code)
            if row is None:
                raise NotFoundError(f"Language '{code}' not found")
            rows = [row]
        else:
            rows = list(
                session.exec(
                    select(Language)
                    .where(Language.namespace_version_id == record.id)
                    .order_by(Language.language_code)
                ).all()
            )

        translations = {
            row.language_code: self.languages.read_json(row.file_id) if row.file_id else {}
            for row in rows
        }
        payload = {
            "namespace": namespace.name,
            "version": record.version,
            "translations": translations[rows[0].language_code] if language else translations,
            "metadata": {
                "project_id": str(project.id),
                "languages": [row.language_code for row in rows],
                "is_active": record.is_active,
                "fetched_at": utcnow().isoformat(),
            },
        }

        self.usage.record_request(session, workspace)
        session.commit()

        self._track(
            "translations_fetched",
            {
                "workspace_id": str(workspace.id),
                "project_id": str(project.id),
                "api_key_id": str(key.id),
                "namespace": namespace.name,
                "version": record.version,
                "language": language,
            },
        )
        return payload

    def publish_translations(
        self,
        session: Session,
        api_key: Optional[str],
        namespace_name: str,
        version: str,
        translations: dict[str, Any],
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        """Create a new version holding `translations` and activate it.

        Args:
            translations: Mapping of language code to translation object.
                The first language becomes the primary language.

        Raises:
            DuplicateError: Version already exists
            LimitReachedError: Version or language limit reached
            ValidationError: Bad version, language code or content
        """
        key, project, workspace = self._authenticate(session, api_key)
        namespace = self._namespace(session, project, namespace_name)
        lock(session, namespace)
        version = validate_version(version)

        if not isinstance(translations, dict) or not translations:
            raise ValidationError("translations must map language codes to objects")
        contents: dict[str, dict[str, Any]] = {}
        for raw_code, content in translations.items():
            code = normalize_language_code(raw_code)
            if not isinstance(content, dict):
                raise ValidationError(f"Translations for '{code}' must be a JSON object")
            if code in contents:
                raise ValidationError(f"Language '{code}' is listed more than once")
            contents[code] = content

        message = f"Version '{version}' already exists for this namespace"
        if self.versions.version_taken(session, namespace, version):
            raise DuplicateError(message)
        check_limit(
            namespace.usage_versions,
            workspace.limit_versions_per_namespace,
            "versions",
            "Version limit reached for this namespace. Please upgrade your plan.",
        )
        check_limit(
            len(contents) - 1,
            workspace.limit_languages_per_version,
            "languages",
            "Language limit reached for this version. Please upgrade your plan.",
        )

        stored: list[str] = []
        try:
            record = NamespaceVersion(
                namespace_id=namespace.id,
                version=version,
                description=description,
                usage_languages=len(contents),
            )
            session.add(record)
            session.flush()

            for code, content in contents.items():
                data = encode_json(content)
                stored.append(self.storage.store(data, JSON_CONTENT_TYPE))
                row = Language(
                    namespace_version_id=record.id,
                    language_code=code,
                    file_id=stored[-1],
                    file_size=len(data),
                )
                session.add(row)
                session.flush()
                if record.primary_language_id is None:
                    record.primary_language_id = row.id
                    schema = encode_json(build_schema(content))
                    stored.append(self.storage.store(schema, JSON_CONTENT_TYPE))
                    record.json_schema_file_id = stored[-1]
                    record.json_schema_size = len(schema)

            self.versions.activate_version(session, record)
            increment(namespace, "usage_versions")
            increment(namespace, "usage_languages", len(contents))
            session.add(namespace)
            commit_unique(session, message)
        except Exception:
            session.rollback()
            for blob_id in stored:
                self.storage.delete(blob_id)
            raise

        session.refresh(record)
        logger.info(
            "translations_published",
            version_id=str(record.id),
            namespace_id=str(namespace.id),
            api_key_id=str(key.id),
            languages=len(contents),
        )
        return {
            "namespace": namespace.name,
            "version": record.version,
            "version_id": str(record.id),
            "languages": list(contents),
            "is_active": True,
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    def _authenticate(
        self, session: Session, api_key: Optional[str]
    ) -> tuple[APIKey, Project, Workspace]:
        key = self.api_keys.authenticate_api_key(session, api_key)
        project = session.get(Project, key.project_id)
        workspace = session.get(Workspace, key.workspace_id)
        if project is None or workspace is None or project.workspace_id != workspace.id:
            raise NotFoundError("Project not found")
        bind_context(workspace_id=workspace.id)
        return key, project, workspace

    @staticmethod
    def _namespace(session: Session, project: Project, name: str) -> Namespace:
        namespace = session.exec(
            select(Namespace).where(
                Namespace.project_id == project.id, Namespace.name == name
            )
        ).first()
        if namespace is None:
            raise NotFoundError(f"Namespace '{name}' not found")
        return namespace

    @staticmethod
    def _version(
        session: Session, namespace: Namespace, version: Optional[str]
    ) -> NamespaceVersion:
        statement = select(NamespaceVersion).where(
            NamespaceVersion.namespace_id == namespace.id
        )
        if version:
            record = session.exec(
                statement.where(NamespaceVersion.version == version)
            ).first()
        else:
            record = session.exec(
                statement.where(NamespaceVersion.is_active == True)  # noqa: E712
            ).first() or session.exec(
                statement.where(NamespaceVersion.version == MAIN_VERSION)
            ).first()
        if record is None:
            raise NotFoundError(f"Version '{version or MAIN_VERSION}' not found")
        return record

    def _track(self, event: str, properties: dict[str, Any]) -> None:
        if self.scheduler and self.analytics:
            self.scheduler.run_after(0, self.analytics.track, event, properties)
