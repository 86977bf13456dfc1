"""at most one active subscription per user

Revision ID: 0002_one_active_subscription
Revises: 0001_pluxo_core
Create Date: 2026-10-05
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_one_active_subscription"
down_revision = "0001_pluxo_core"
branch_labels = None
depends_on = None


def upgrade():
    # Keep only the latest-ending active row per user before adding the constraint
    op.execute(
        """
        UPDATE vip_subscriptions vs
        SET active=false
        FROM (
            SELECT id,
                   row_number() OVER (PARTITION BY user_id ORDER BY ends_at DESC, created_at DESC) AS rn
            FROM vip_subscriptions
            WHERE active = true
        ) ranked
        WHERE vs.id = ranked.id
          AND ranked.rn > 1
        """
    )
    op.create_index(
        "uq_vip_subscriptions_one_active",
        "vip_subscriptions",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("active"),
    )


def downgrade():
    op.drop_index("uq_vip_subscriptions_one_active", table_name="vip_subscriptions")
