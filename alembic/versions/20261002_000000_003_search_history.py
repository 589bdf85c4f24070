"""Add user_search_history.

Revision ID: 003
Revises: 002
Create Date: 2026-10-02 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers
revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user_search_history",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("query", sa.Text(), nullable=False),
        sa.Column("results_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("run_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_searched_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "query"),
    )
    op.create_index(
        "user_search_history_last_searched_idx",
        "user_search_history",
        ["last_searched_at"],
    )


def downgrade():
    op.drop_index("user_search_history_last_searched_idx", table_name="user_search_history")
    op.drop_table("user_search_history")
