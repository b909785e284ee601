"""Initial tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

Creates the tenant, translation content, release, screenshot and API key
tables. Foreign keys carry no ON DELETE action; deletion cascades are
performed by the application.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # ==========================================================================
    # Tenant
    # ==========================================================================

    op.create_table(
        "workspaces",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("clerk_id", sa.String(), nullable=False),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=False, server_default="team"),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("limit_requests", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("limit_projects", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "limit_namespaces_per_project", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column(
            "limit_languages_per_version", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column(
            "limit_versions_per_namespace", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("usage_projects", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("usage_requests", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("usage_period_start", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workspaces_id", "workspaces", ["id"])
    op.create_index("ix_workspaces_clerk_id", "workspaces", ["clerk_id"], unique=True)
    op.create_index("ix_workspaces_created_at", "workspaces", ["created_at"])

    # ==========================================================================
    # Translation content
    # ==========================================================================

    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("workspace_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("usage_namespaces", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["workspace_id"], ["workspaces.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("workspace_id", "name", name="uq_projects_workspace_name"),
    )
    op.create_index("ix_projects_id", "projects", ["id"])
    op.create_index("ix_projects_workspace_id", "projects", ["workspace_id"])
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    op.create_table(
        "namespaces",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("usage_languages", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("usage_versions", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name="uq_namespaces_project_name"),
    )
    op.create_index("ix_namespaces_id", "namespaces", ["id"])
    op.create_index("ix_namespaces_project_id", "namespaces", ["project_id"])
    op.create_index("ix_namespaces_created_at", "namespaces", ["created_at"])

    op.create_table(
        "namespace_versions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("namespace_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("version", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("usage_languages", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("json_schema_file_id", sa.String(), nullable=True),
        sa.Column("json_schema_size", sa.Integer(), nullable=True),
        sa.Column("primary_language_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["namespace_id"], ["namespaces.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "namespace_id", "version", name="uq_namespace_versions_namespace_version"
        ),
    )
    op.create_index("ix_namespace_versions_id", "namespace_versions", ["id"])
    op.create_index(
        "ix_namespace_versions_namespace_id", "namespace_versions", ["namespace_id"]
    )
    op.create_index(
        "ix_namespace_versions_created_at", "namespace_versions", ["created_at"]
    )

    op.create_table(
        "languages",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("namespace_version_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("language_code", sa.String(length=5), nullable=False),
        sa.Column("file_id", sa.String(), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["namespace_version_id"], ["namespace_versions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "namespace_version_id", "language_code", name="uq_languages_version_code"
        ),
    )
    op.create_index("ix_languages_id", "languages", ["id"])
    op.create_index(
        "ix_languages_namespace_version_id", "languages", ["namespace_version_id"]
    )
    op.create_index("ix_languages_created_at", "languages", ["created_at"])

    # ==========================================================================
    # Releases
    # ==========================================================================

    op.create_table(
        "releases",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("tag", sa.String(length=50), nullable=False),
        sa.Column("namespace_versions", postgresql.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "tag", name="uq_releases_project_tag"),
    )
    op.create_index("ix_releases_id", "releases", ["id"])
    op.create_index("ix_releases_project_id", "releases", ["project_id"])
    op.create_index("ix_releases_created_at", "releases", ["created_at"])

    # ==========================================================================
    # Screenshots
    # ==========================================================================

    op.create_table(
        "screenshots",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("image_file_id", sa.String(), nullable=False),
        sa.Column("image_size", sa.Integer(), nullable=False),
        sa.Column("image_mime_type", sa.String(), nullable=False),
        sa.Column("width", sa.Integer(), nullable=False),
        sa.Column("height", sa.Integer(), nullable=False),
        sa.Column("uploaded_by", sa.String(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name="uq_screenshots_project_name"),
    )
    op.create_index("ix_screenshots_id", "screenshots", ["id"])
    op.create_index("ix_screenshots_project_id", "screenshots", ["project_id"])
    op.create_index("ix_screenshots_created_at", "screenshots", ["created_at"])

    op.create_table(
        "screenshot_containers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("screenshot_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("x", sa.Float(), nullable=False),
        sa.Column("y", sa.Float(), nullable=False),
        sa.Column("width", sa.Float(), nullable=False),
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column("background_color", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["screenshot_id"], ["screenshots.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_screenshot_containers_id", "screenshot_containers", ["id"])
    op.create_index(
        "ix_screenshot_containers_screenshot_id",
        "screenshot_containers",
        ["screenshot_id"],
    )
    op.create_index(
        "ix_screenshot_containers_created_at", "screenshot_containers", ["created_at"]
    )

    op.create_table(
        "screenshot_key_mappings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("container_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("namespace_version_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("language_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("translation_key", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["container_id"], ["screenshot_containers.id"]),
        sa.ForeignKeyConstraint(["namespace_version_id"], ["namespace_versions.id"]),
        sa.ForeignKeyConstraint(["language_id"], ["languages.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "container_id",
            "namespace_version_id",
            "language_id",
            "translation_key",
            name="uq_key_mappings_assignment",
        ),
    )
    op.create_index("ix_screenshot_key_mappings_id", "screenshot_key_mappings", ["id"])
    for column in ("container_id", "namespace_version_id", "language_id", "created_at"):
        op.create_index(
            f"ix_screenshot_key_mappings_{column}", "screenshot_key_mappings", [column]
        )

    # ==========================================================================
    # API keys
    # ==========================================================================

    op.create_table(
        "api_keys",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("workspace_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("key_hash", sa.String(), nullable=False),
        sa.Column("key_prefix", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_requests", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["workspace_id"], ["workspaces.id"]),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_api_keys_id", "api_keys", ["id"])
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)
    op.create_index("ix_api_keys_workspace_id", "api_keys", ["workspace_id"])
    op.create_index("ix_api_keys_project_id", "api_keys", ["project_id"])
    op.create_index("ix_api_keys_created_at", "api_keys", ["created_at"])


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table("api_keys")
    op.drop_table("screenshot_key_mappings")
    op.drop_table("screenshot_containers")
    op.drop_table("screenshots")
    op.drop_table("releases")
    op.drop_table("languages")
    op.drop_table("namespace_versions")
    op.drop_table("namespaces")
    op.drop_table("projects")
    op.drop_table("workspaces")
