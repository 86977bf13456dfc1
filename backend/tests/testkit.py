from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from app.schemas.entitlements import Entitlement
from app.services.entitlements import build_entitlement
from app.services.pricing import PricingCatalog, load_catalog
from app.core.config import DEFAULT_PRICING_CATALOG

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeResult:
    """Stands in for a SQLAlchemy Result in the calls the services make."""

    def __init__(self, rows=None, scalar=None, rowcount: int = 0):
        self._rows = list(rows or [])
        self._scalar = scalar
        self.rowcount = rowcount

    def mappings(self):
        return self

    def first(self):
        return self._rows[0] if self._rows else None

    def all(self):
        return list(self._rows)

    def one(self):
        if len(self._rows) != 1:
            raise AssertionError(f"expected one row, got {len(self._rows)}")
        return self._rows[0]

    def scalar_one(self):
        return self._scalar

    def scalar_one_or_none(self):
        return self._scalar


def new_user_id() -> str:
    return str(uuid4())


def subscription_row(user_id: str, plan_type: str = "vup", *, ends_in: timedelta = timedelta(hours=1), active: bool = True) -> dict:
    return {
        "id": uuid4(),
        "user_id": user_id,
        "plan_type": plan_type,
        "starts_at": NOW - timedelta(minutes=5),
        "ends_at": NOW + ends_in,
        "active": active,
    }


def make_entitlement(role: str = "user", plan: str | None = None, user_id: str | None = None) -> Entitlement:
    uid = user_id or new_user_id()
    profile = {"id": uid, "role": role}
    sub = subscription_row(uid, plan) if plan else None
    return build_entitlement(uid, profile, sub)


def load_default_catalog() -> PricingCatalog:
    return load_catalog(DEFAULT_PRICING_CATALOG)


def auth_headers(user_id: str, email: str | None = "player@pluxo.test") -> dict[str, str]:
    from app.core.security import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user_id, email=email)}"}
