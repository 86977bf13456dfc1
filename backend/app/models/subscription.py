import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class VipSubscription(Base):
    __tablename__ = "vip_subscriptions"

    id: Mapped[sa.Uuid] = mapped_column(sa.Uuid, primary_key=True, server_default=sa.text("gen_random_uuid()"))
    user_id: Mapped[sa.Uuid] = mapped_column(sa.Uuid, nullable=False)
    plan_type: Mapped[str] = mapped_column(sa.Text, nullable=False)
    starts_at: Mapped[sa.DateTime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))
    ends_at: Mapped[sa.DateTime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.text("true"))
    granted_by: Mapped[sa.Uuid | None] = mapped_column(sa.Uuid, nullable=True)
    created_at: Mapped[sa.DateTime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))

    __table_args__ = (
        sa.CheckConstraint("plan_type IN ('vup','vip')", name="ck_vip_subscriptions_plan_type"),
        sa.CheckConstraint("ends_at > starts_at", name="ck_vip_subscriptions_window"),
        sa.Index("ix_vip_subscriptions_user_active_ends", "user_id", "active", sa.text("ends_at DESC")),
        # At most one active row per user
        sa.Index(
            "uq_vip_subscriptions_one_active",
            "user_id",
            unique=True,
            postgresql_where=sa.text("active"),
        ),
    )
