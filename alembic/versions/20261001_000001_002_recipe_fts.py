"""Add recipes_fts full-text index and its sync triggers.

Revision ID: 002
Revises: 001
Create Date: 2026-10-01 00:00:01.000000
"""

from alembic import op

from recipebox.fts import create_fts_index, drop_fts_index, rebuild_fts_index


# revision identifiers
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    create_fts_index(conn)
    # Index any recipes that predate the triggers
    rebuild_fts_index(conn)


def downgrade():
    drop_fts_index(op.get_bind())
