"""Create user_profile and imported_content tables

Revision ID: 3f9a1c2b7d40
Revises:
Create Date: 2025-07-13 05:26:43.000000

"""

from typing import Sequence, Union

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f9a1c2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

import_status = postgresql.ENUM(
    "PROCESSING", "COMPLETED", "FAILED", name="imported_content_status"
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "user_profile",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("auth_id", sa.UUID(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("is_pro", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("ai_imports_used", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "modified_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_profile_auth_id"), "user_profile", ["auth_id"], unique=True)
    op.create_index(op.f("ix_user_profile_email"), "user_profile", ["email"], unique=False)

    import_status.create(op.get_bind(), checkfirst=True)

    # user_id has no foreign key so rows survive account deletion with user_id = NULL
    op.create_table(
        "imported_content",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("source_url", sa.String(), nullable=False),
        sa.Column("content", postgresql.JSONB(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("video_duration", sa.Integer(), nullable=True),
        sa.Column("is_recipe_content", sa.Boolean(), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="imported_content_status", create_type=False),
            nullable=True,
        ),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_imported_content_user_id"), "imported_content", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_imported_content_source_url"),
        "imported_content",
        ["source_url"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_imported_content_source_url"), table_name="imported_content")
    op.drop_index(op.f("ix_imported_content_user_id"), table_name="imported_content")
    op.drop_table("imported_content")
    import_status.drop(op.get_bind(), checkfirst=True)
    op.drop_index(op.f("ix_user_profile_email"), table_name="user_profile")
    op.drop_index(op.f("ix_user_profile_auth_id"), table_name="user_profile")
    op.drop_table("user_profile")
