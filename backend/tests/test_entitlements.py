from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import DependencyUnavailable
from app.services.entitlements import (
    Allow,
    Deny,
    DenyReason,
    authorize,
    build_entitlement,
    is_effectively_active,
    resolve_entitlement,
)
from tests.testkit import NOW, FakeResult, make_entitlement, new_user_id, subscription_row


@pytest.mark.parametrize("required_role", [None, "user", "admin"])
@pytest.mark.parametrize("required_plan", [None, "vup", "vip"])
@pytest.mark.parametrize("plan", [None, "vup", "vip"])
def test_admin_passes_every_gate(required_role, required_plan, plan):
    ent = make_entitlement(role="admin", plan=plan)
    decision = authorize(ent, required_role=required_role, required_plan=required_plan)
    assert isinstance(decision, Allow)
    assert decision.entitlement is ent


def test_vip_satisfies_vup_requirement():
    ent = make_entitlement(plan="vip")
    assert isinstance(authorize(ent, required_plan="vup"), Allow)


def test_vup_does_not_satisfy_vip_requirement():
    ent = make_entitlement(plan="vup")
    decision = authorize(ent, required_plan="vip")
    assert decision == Deny(DenyReason.ELITE_LICENSE_REQUIRED)


def test_no_plan_is_denied_for_any_plan_gate():
    ent = make_entitlement()
    assert authorize(ent, required_plan="vup") == Deny(DenyReason.ACTIVE_LICENSE_REQUIRED)
    assert authorize(ent, required_plan="vip") == Deny(DenyReason.ACTIVE_LICENSE_REQUIRED)


def test_role_gate_checked_before_plan_gate():
    ent = make_entitlement(plan="vip")
    decision = authorize(ent, required_role="admin", required_plan="vip")
    assert decision == Deny(DenyReason.ADMIN_CLEARANCE_REQUIRED)
    assert decision.message.startswith("RESTRICTED")


def test_ungated_call_is_allowed_without_subscription():
    assert isinstance(authorize(make_entitlement()), Allow)


def test_effective_activity_boundary_is_exclusive():
    assert is_effectively_active(True, NOW + timedelta(microseconds=1), NOW)
    assert not is_effectively_active(True, NOW, NOW)
    assert not is_effectively_active(True, NOW - timedelta(seconds=1), NOW)
    assert not is_effectively_active(False, NOW + timedelta(days=1), NOW)
    assert not is_effectively_active(True, None, NOW)


def test_build_entitlement_without_profile_defaults_to_user():
    uid = new_user_id()
    ent = build_entitlement(uid, None, None)
    assert ent.role == "user"
    assert ent.is_admin is False
    assert ent.active_plan == "none"
    assert ent.has_unlimited_access is False
    assert ent.subscription is None


def test_build_entitlement_paid_plans_grant_unlimited_access():
    uid = new_user_id()
    for plan in ("vup", "vip"):
        ent = build_entitlement(uid, {"role": "user"}, subscription_row(uid, plan))
        assert ent.active_plan == plan
        assert ent.has_unlimited_access is True
        assert ent.subscription.plan_type == plan


def test_build_entitlement_admin_without_plan_has_unlimited_access():
    ent = make_entitlement(role="admin")
    assert ent.is_admin is True
    assert ent.active_plan == "none"
    assert ent.has_unlimited_access is True


def test_build_entitlement_unknown_role_is_least_privilege():
    ent = build_entitlement(new_user_id(), {"role": "superuser"}, None)
    assert ent.role == "user"
    assert ent.is_admin is False


def test_resolve_entitlement_reads_profile_then_active_subscription(fake_db):
    uid = new_user_id()
    sub = subscription_row(uid, "vip")
    fake_db.execute.side_effect = [
        FakeResult(rows=[{"id": uid, "email": "a@pluxo.test", "role": "user", "created_at": NOW}]),
        FakeResult(rows=[sub]),
    ]

    ent = resolve_entitlement(fake_db, uid, now=NOW)

    assert ent.active_plan == "vip"
    assert ent.subscription.id == str(sub["id"])
    sub_params = fake_db.execute.call_args_list[1].args[1]
    assert sub_params == {"u": uid, "now": NOW}


def test_resolve_entitlement_missing_rows_is_not_an_error(fake_db):
    fake_db.execute.side_effect = [FakeResult(), FakeResult()]
    ent = resolve_entitlement(fake_db, new_user_id(), now=NOW)
    assert ent.role == "user"
    assert ent.active_plan == "none"


def test_resolve_entitlement_store_failure_fails_closed(fake_db):
    fake_db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    with pytest.raises(DependencyUnavailable):
        resolve_entitlement(fake_db, new_user_id(), now=NOW)
