import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[sa.Uuid] = mapped_column(sa.Uuid, primary_key=True, server_default=sa.text("gen_random_uuid()"))
    user_id: Mapped[sa.Uuid] = mapped_column(sa.Uuid, nullable=False)
    plan_type: Mapped[str] = mapped_column(sa.Text, nullable=False)
    amount: Mapped[sa.Numeric] = mapped_column(sa.Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(sa.Text, nullable=False, server_default="USD")
    status: Mapped[str] = mapped_column(sa.Text, nullable=False, server_default="pending")
    duration_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    provider: Mapped[str] = mapped_column(sa.Text, nullable=False)
    promo_code: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    subscription_id: Mapped[sa.Uuid | None] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("vip_subscriptions.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[sa.DateTime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))
    completed_at: Mapped[sa.DateTime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        sa.CheckConstraint("plan_type IN ('vup','vip')", name="ck_payments_plan_type"),
        sa.CheckConstraint("status IN ('pending','completed','cancelled')", name="ck_payments_status"),
        sa.CheckConstraint("amount >= 0", name="ck_payments_amount"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_payments_duration"),
        sa.Index("ix_payments_user_created", "user_id", sa.text("created_at DESC")),
        sa.Index("ix_payments_status_created", "status", sa.text("created_at DESC")),
    )
