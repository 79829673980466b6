"""add retry_count to imported_content

Revision ID: 8c4e2d915ab3
Revises: 3f9a1c2b7d40
Create Date: 2025-12-07 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8c4e2d915ab3"
down_revision: Union[str, Sequence[str], None] = "3f9a1c2b7d40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column(
        "imported_content",
        sa.Column("retry_count", sa.Integer(), server_default="0", nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column("imported_content", "retry_count")
