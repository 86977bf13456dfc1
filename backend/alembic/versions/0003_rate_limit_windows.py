"""fixed-window rate limit counters

Revision ID: 0003_rate_limit_windows
Revises: 0002_one_active_subscription
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa


revision = "0003_rate_limit_windows"
down_revision = "0002_one_active_subscription"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "rate_limit_windows",
        sa.Column("bucket", sa.Text(), nullable=False),
        sa.Column("subject", sa.Text(), nullable=False),
        sa.Column("window_start", sa.BigInteger(), nullable=False),
        sa.Column("hits", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("bucket", "subject", "window_start", name="pk_rate_limit_windows"),
    )
    op.create_index("ix_rate_limit_windows_start", "rate_limit_windows", ["window_start"])


def downgrade():
    op.drop_index("ix_rate_limit_windows_start", table_name="rate_limit_windows")
    op.drop_table("rate_limit_windows")
