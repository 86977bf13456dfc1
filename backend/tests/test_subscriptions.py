from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import DependencyUnavailable, GrantConflict, NotFound, ValidationFailed
from app.services.subscriptions import compute_ends_at, ensure_profile_exists, grant_subscription
from tests.testkit import NOW, FakeResult, new_user_id


@pytest.mark.parametrize(
    "amount,unit,delta",
    [
        (30, "minutes", timedelta(minutes=30)),
        (2, "hours", timedelta(hours=2)),
        (7, "days", timedelta(days=7)),
    ],
)
def test_compute_ends_at(amount, unit, delta):
    assert compute_ends_at(NOW, amount, unit) == NOW + delta


@pytest.mark.parametrize("amount,unit", [(0, "days"), (-1, "hours"), (1, "weeks"), (True, "days"), (1.5, "hours")])
def test_compute_ends_at_rejects_bad_input(amount, unit):
    with pytest.raises(ValidationFailed):
        compute_ends_at(NOW, amount, unit)


def _sql(call) -> str:
    return " ".join(str(call.args[0]).split())


def test_grant_deactivates_then_inserts_in_one_transaction(fake_db):
    uid = new_user_id()
    new_id = uuid4()
    fake_db.execute.side_effect = [
        FakeResult(),
        FakeResult(rowcount=1),
        FakeResult(scalar=new_id),
    ]

    result = grant_subscription(fake_db, user_id=uid, plan_type="VIP", amount=3, unit="hours", actor_user_id=new_user_id(), now=NOW)

    statements = [_sql(c) for c in fake_db.execute.call_args_list]
    assert "pg_advisory_xact_lock" in statements[0]
    assert statements[1].startswith("UPDATE vip_subscriptions SET active=false")
    assert statements[2].startswith("INSERT INTO vip_subscriptions")

    insert_params = fake_db.execute.call_args_list[2].args[1]
    assert insert_params["plan"] == "vip"
    assert insert_params["starts_at"] == NOW
    assert insert_params["ends_at"] == NOW + timedelta(hours=3)

    assert result.subscription_id == str(new_id)
    assert result.plan_type == "vip"
    fake_db.add.assert_called_once()
    # The caller owns the commit
    fake_db.commit.assert_not_called()
    fake_db.rollback.assert_not_called()


def test_grant_insert_failure_rolls_back_and_is_retryable(fake_db):
    fake_db.execute.side_effect = [
        FakeResult(),
        FakeResult(rowcount=1),
        IntegrityError("INSERT", {}, Exception("uq_vip_subscriptions_one_active")),
    ]
    with pytest.raises(GrantConflict) as exc_info:
        grant_subscription(fake_db, user_id=new_user_id(), plan_type="vup", amount=1, unit="days", now=NOW)
    assert exc_info.value.status_code == 409
    fake_db.rollback.assert_called_once()
    fake_db.add.assert_not_called()


def test_grant_store_outage_rolls_back(fake_db):
    fake_db.execute.side_effect = OperationalError("SELECT", {}, Exception("timeout"))
    with pytest.raises(DependencyUnavailable):
        grant_subscription(fake_db, user_id=new_user_id(), plan_type="vup", amount=1, unit="days", now=NOW)
    fake_db.rollback.assert_called_once()


def test_grant_rejects_unknown_plan_before_touching_store(fake_db):
    with pytest.raises(ValidationFailed):
        grant_subscription(fake_db, user_id=new_user_id(), plan_type="gold", amount=1, unit="days", now=NOW)
    fake_db.execute.assert_not_called()


def test_ensure_profile_exists(fake_db):
    fake_db.execute.return_value = FakeResult(scalar=1)
    ensure_profile_exists(fake_db, new_user_id())

    fake_db.execute.return_value = FakeResult(scalar=None)
    with pytest.raises(NotFound):
        ensure_profile_exists(fake_db, new_user_id())
