import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base

class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the identity provider's user; no FK since auth.users lives in another schema
    id: Mapped[sa.Uuid] = mapped_column(sa.Uuid, primary_key=True)
    email: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    role: Mapped[str] = mapped_column(sa.Text, nullable=False, server_default="user")
    created_at: Mapped[sa.DateTime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))

    __table_args__ = (
        sa.CheckConstraint("role IN ('user','admin')", name="ck_profiles_role"),
        sa.Index("ix_profiles_created", sa.text("created_at DESC")),
    )
