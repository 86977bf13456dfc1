import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base


class AuditLog(Base):
    """Append-only trail of checkout, payment and subscription-grant events."""

    __tablename__ = "audit_log"

    id: Mapped[sa.Uuid] = mapped_column(sa.Uuid, primary_key=True, server_default=sa.text("gen_random_uuid()"))
    # Null for service-initiated events (payment confirmation)
    actor_user_id: Mapped[sa.Uuid | None] = mapped_column(sa.Uuid, nullable=True)

    entity_type: Mapped[str] = mapped_column(sa.Text, nullable=False)
    entity_id: Mapped[str] = mapped_column(sa.Text, nullable=False)
    action: Mapped[str] = mapped_column(sa.Text, nullable=False)
    data: Mapped[dict] = mapped_column(sa.JSON, nullable=False, server_default=sa.text("'{}'::json"))

    created_at: Mapped[sa.DateTime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))

    __table_args__ = (
        sa.CheckConstraint("entity_type IN ('payment','vip_subscription')", name="ck_audit_log_entity_type"),
        sa.Index("ix_audit_log_entity_created", "entity_type", "entity_id", sa.text("created_at DESC")),
        sa.Index("ix_audit_log_type_action_created", "entity_type", "action", sa.text("created_at DESC")),
        sa.Index(
            "ix_audit_log_actor_created",
            "actor_user_id",
            sa.text("created_at DESC"),
            postgresql_where=sa.text("actor_user_id IS NOT NULL"),
        ),
    )
