from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
import sqlalchemy as sa

from app.core.security import now_utc
from app.services.entitlements import resolve_entitlement
from app.services.subscriptions import deactivate_expired, grant_subscription

pytestmark = pytest.mark.integration


def _create_profile(db, role: str = "user") -> str:
    uid = str(uuid4())
    db.execute(
        sa.text("INSERT INTO profiles (id, email, role) VALUES (:id, :email, :role)"),
        {"id": uid, "email": f"{uid[:8]}@pluxo.test", "role": role},
    )
    return uid


def _active_count(db, uid: str) -> int:
    return int(
        db.execute(
            sa.text("SELECT count(*) FROM vip_subscriptions WHERE user_id=:u AND active=true"),
            {"u": uid},
        ).scalar_one()
    )


def test_grant_then_resolve(pg_db):
    uid = _create_profile(pg_db)
    at = now_utc()

    grant_subscription(pg_db, user_id=uid, plan_type="vip", amount=2, unit="hours", now=at)

    ent = resolve_entitlement(pg_db, uid, now=at)
    assert ent.active_plan == "vip"
    assert ent.has_unlimited_access is True
    assert ent.subscription.ends_at == at + timedelta(hours=2)


def test_regrant_replaces_active_subscription(pg_db):
    uid = _create_profile(pg_db)
    at = now_utc()

    grant_subscription(pg_db, user_id=uid, plan_type="vip", amount=1, unit="days", now=at)
    grant_subscription(pg_db, user_id=uid, plan_type="vup", amount=30, unit="minutes", now=at)

    assert _active_count(pg_db, uid) == 1
    assert resolve_entitlement(pg_db, uid, now=at).active_plan == "vup"


def test_expired_subscription_is_not_entitled(pg_db):
    uid = _create_profile(pg_db)
    granted_at = now_utc() - timedelta(hours=2)

    grant_subscription(pg_db, user_id=uid, plan_type="vup", amount=1, unit="hours", now=granted_at)

    assert resolve_entitlement(pg_db, uid).active_plan == "none"
    assert deactivate_expired(pg_db) >= 1
    assert _active_count(pg_db, uid) == 0


def test_one_active_index_rejects_second_active_row(pg_db):
    uid = _create_profile(pg_db)
    at = now_utc()
    grant_subscription(pg_db, user_id=uid, plan_type="vip", amount=1, unit="days", now=at)

    with pytest.raises(sa.exc.IntegrityError):
        pg_db.execute(
            sa.text(
                """
                INSERT INTO vip_subscriptions (user_id, plan_type, starts_at, ends_at, active)
                VALUES (:u, 'vup', :s, :e, true)
                """
            ),
            {"u": uid, "s": at, "e": at + timedelta(days=1)},
        )
