"""profiles, vip subscriptions, payments, audit log

Revision ID: 0001_pluxo_core
Revises:
Create Date: 2026-09-28
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_pluxo_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("role IN ('user','admin')", name="ck_profiles_role"),
    )
    op.create_index("ix_profiles_created", "profiles", [sa.text("created_at DESC")])

    op.create_table(
        "vip_subscriptions",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("plan_type", sa.Text(), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("granted_by", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("plan_type IN ('vup','vip')", name="ck_vip_subscriptions_plan_type"),
        sa.CheckConstraint("ends_at > starts_at", name="ck_vip_subscriptions_window"),
    )
    op.create_index(
        "ix_vip_subscriptions_user_active_ends",
        "vip_subscriptions",
        ["user_id", "active", sa.text("ends_at DESC")],
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("plan_type", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.Text(), nullable=False, server_default="USD"),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("provider", sa.Text(), nullable=False),
        sa.Column("promo_code", sa.Text(), nullable=True),
        sa.Column(
            "subscription_id",
            sa.Uuid(),
            sa.ForeignKey("vip_subscriptions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("plan_type IN ('vup','vip')", name="ck_payments_plan_type"),
        sa.CheckConstraint("status IN ('pending','completed','cancelled')", name="ck_payments_status"),
        sa.CheckConstraint("amount >= 0", name="ck_payments_amount"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_payments_duration"),
    )
    op.create_index("ix_payments_user_created", "payments", ["user_id", sa.text("created_at DESC")])
    op.create_index("ix_payments_status_created", "payments", ["status", sa.text("created_at DESC")])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("actor_user_id", sa.Uuid(), nullable=True),
        sa.Column("entity_type", sa.Text(), nullable=False),
        sa.Column("entity_id", sa.Text(), nullable=False),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False, server_default=sa.text("'{}'::json")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("entity_type IN ('payment','vip_subscription')", name="ck_audit_log_entity_type"),
    )
    op.create_index("ix_audit_log_entity_created", "audit_log", ["entity_type", "entity_id", sa.text("created_at DESC")])
    op.create_index("ix_audit_log_type_action_created", "audit_log", ["entity_type", "action", sa.text("created_at DESC")])
    op.create_index(
        "ix_audit_log_actor_created",
        "audit_log",
        ["actor_user_id", sa.text("created_at DESC")],
        postgresql_where=sa.text("actor_user_id IS NOT NULL"),
    )


def downgrade():
    op.drop_index("ix_audit_log_actor_created", table_name="audit_log")
    op.drop_index("ix_audit_log_type_action_created", table_name="audit_log")
    op.drop_index("ix_audit_log_entity_created", table_name="audit_log")
    op.drop_table("audit_log")

    op.drop_index("ix_payments_status_created", table_name="payments")
    op.drop_index("ix_payments_user_created", table_name="payments")
    op.drop_table("payments")

    op.drop_index("ix_vip_subscriptions_user_active_ends", table_name="vip_subscriptions")
    op.drop_table("vip_subscriptions")

    op.drop_index("ix_profiles_created", table_name="profiles")
    op.drop_table("profiles")
