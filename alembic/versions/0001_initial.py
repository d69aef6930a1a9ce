"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

PROJECT_STATUS = sa.Enum("active", "archived", "draft", name="projectstatus")
ACCESS_TYPE = sa.Enum("public", "pin", "google_only", name="accesstype")
AUDIT_ACTION = sa.Enum(
    "PROJECT_CREATE", "PROJECT_UPDATE", "PROJECT_DELETE", "PROJECT_RESTORE", "PROJECT_PURGE",
    "FOLDER_CREATE", "FOLDER_DELETE", "FOLDER_RESTORE", "FOLDER_PURGE",
    "FILE_UPLOAD", "FILE_DELETE", "FILE_RESTORE", "FILE_PURGE",
    "TRASH_EMPTY", "SHARE_LINK_CREATE", "SHARE_LINK_UPDATE", "SHARE_LINK_ACCESS", "DRIVE_DRIFT",
    name="auditaction",
)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _soft_delete():
    return [
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def upgrade():
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255)),
        sa.Column("avatar_url", sa.String(1000)),
        sa.Column("region", sa.String(255)),
        sa.Column("city", sa.String(255)),
        sa.Column("school_name", sa.String(255)),
        sa.Column("specialization", sa.String(255)),
        sa.Column("job_title", sa.String(255)),
        *_timestamps(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])

    op.create_table(
        "drive_connections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("provider_user_id", sa.String(255), nullable=False),
        sa.Column("tokens_encrypted", sa.Text(), nullable=False),
        sa.Column("token_expires_at", sa.DateTime()),
        sa.Column("last_synced_at", sa.DateTime()),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "provider", name="uix_drive_connection_user_provider"),
    )
    op.create_index("ix_drive_connections_user_id", "drive_connections", ["user_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", PROJECT_STATUS, nullable=False),
        sa.Column("root_drive_id", sa.String(255)),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("ix_projects_user_id", "projects", ["user_id"])
    op.create_index("ix_projects_is_deleted", "projects", ["is_deleted"])

    op.create_table(
        "folders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("parent_id", sa.String(36), sa.ForeignKey("folders.id", ondelete="SET NULL")),
        sa.Column("drive_folder_id", sa.String(255), nullable=False),
        sa.Column("folder_name", sa.String(100), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("ix_folders_project_id", "folders", ["project_id"])
    op.create_index("ix_folders_parent_id", "folders", ["parent_id"])
    op.create_index("ix_folders_is_deleted", "folders", ["is_deleted"])

    op.create_table(
        "files_metadata",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("folder_id", sa.String(36), sa.ForeignKey("folders.id", ondelete="SET NULL")),
        sa.Column("drive_file_id", sa.String(255), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(255), nullable=False),
        sa.Column("size_bytes", sa.BigInteger()),
        sa.Column("checksum", sa.String(128)),
        sa.Column("web_view_link", sa.String(1000)),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("ix_files_metadata_project_id", "files_metadata", ["project_id"])
    op.create_index("ix_files_metadata_folder_id", "files_metadata", ["folder_id"])
    op.create_index("ix_files_metadata_is_deleted", "files_metadata", ["is_deleted"])

    op.create_table(
        "share_links",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True
        ),
        sa.Column("slug", sa.String(50), nullable=False),
        sa.Column("access_type", ACCESS_TYPE, nullable=False),
        sa.Column("pin_hash", sa.String(255)),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime()),
        *_timestamps(),
    )
    op.create_index("ix_share_links_slug", "share_links", ["slug"], unique=True)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(36)),
        sa.Column("project_id", sa.String(36)),
        sa.Column("action", AUDIT_ACTION, nullable=False),
        sa.Column("payload", sa.JSON()),
        sa.Column("ip", sa.String(64)),
        sa.Column("user_agent", sa.String(500)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_project_id", "audit_logs", ["project_id"])


def downgrade():
    op.drop_table("audit_logs")
    op.drop_table("share_links")
    op.drop_table("files_metadata")
    op.drop_table("folders")
    op.drop_table("projects")
    op.drop_table("drive_connections")
    op.drop_table("profiles")
    for enum in (AUDIT_ACTION, ACCESS_TYPE, PROJECT_STATUS):
        enum.drop(op.get_bind(), checkfirst=True)
