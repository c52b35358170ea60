"""Key-value table holding the aggregate document, version tag and backup.

Revision ID: 20261018_kv_entry_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_kv_entry_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "kv_entry",
        sa.Column("key", sa.String(length=191), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table("kv_entry")
