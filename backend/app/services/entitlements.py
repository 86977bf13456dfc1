from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DependencyUnavailable
from app.core.security import now_utc
from app.schemas.entitlements import Entitlement, SubscriptionOut

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ADMIN = "admin"
_VALID_ROLES = {ROLE_USER, ROLE_ADMIN}

PLAN_NONE = "none"
PLAN_VUP = "vup"
PLAN_VIP = "vip"
PAID_PLANS = {PLAN_VUP, PLAN_VIP}


class DenyReason(str, Enum):
    ADMIN_CLEARANCE_REQUIRED = "AdminClearanceRequired"
    ACTIVE_LICENSE_REQUIRED = "ActiveLicenseRequired"
    ELITE_LICENSE_REQUIRED = "EliteLicenseRequired"


DENY_MESSAGES = {
    DenyReason.ADMIN_CLEARANCE_REQUIRED: "RESTRICTED: Admin clearance required",
    DenyReason.ACTIVE_LICENSE_REQUIRED: "RESTRICTED: Active VIP license required",
    DenyReason.ELITE_LICENSE_REQUIRED: "RESTRICTED: Elite license required",
}


@dataclass(frozen=True)
class Allow:
    entitlement: Entitlement


@dataclass(frozen=True)
class Deny:
    reason: DenyReason

    @property
    def message(self) -> str:
        return DENY_MESSAGES[self.reason]


AccessDecision = Allow | Deny


def is_effectively_active(active: bool, ends_at: datetime | None, now: datetime) -> bool:
    # ends_at == now already counts as expired
    return bool(active) and ends_at is not None and ends_at > now


def _normalize_role(raw: object | None) -> str:
    value = str(raw or "").strip().lower()
    return value if value in _VALID_ROLES else ROLE_USER


def subscription_out(row: dict[str, object]) -> SubscriptionOut:
    return SubscriptionOut(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        plan_type=row["plan_type"],
        starts_at=row["starts_at"],
        ends_at=row["ends_at"],
        active=bool(row["active"]),
    )


def build_entitlement(
    user_id: str,
    profile: dict[str, object] | None,
    subscription: dict[str, object] | None,
) -> Entitlement:
    """Derive the entitlement from an optional profile row and an optional effectively active subscription row."""
    role = _normalize_role(profile.get("role") if profile else None)
    is_admin = role == ROLE_ADMIN

    active_plan = PLAN_NONE
    sub_out = None
    if subscription is not None:
        plan_type = str(subscription.get("plan_type") or "").strip().lower()
        if plan_type in PAID_PLANS:
            active_plan = plan_type
            sub_out = subscription_out(subscription)

    return Entitlement(
        user_id=user_id,
        role=role,
        is_admin=is_admin,
        active_plan=active_plan,
        has_unlimited_access=is_admin or active_plan in PAID_PLANS,
        subscription=sub_out,
    )


def fetch_profile(db: Session, user_id: str) -> dict[str, object] | None:
    row = db.execute(
        sa.text(
            """
            SELECT id, email, role, created_at
            FROM profiles
            WHERE id=:u
            """
        ),
        {"u": user_id},
    ).mappings().first()
    return dict(row) if row else None


def fetch_active_subscription(db: Session, user_id: str, now: datetime) -> dict[str, object] | None:
    row = db.execute(
        sa.text(
            """
            SELECT id, user_id, plan_type, starts_at, ends_at, active
            FROM vip_subscriptions
            WHERE user_id=:u
              AND active = true
              AND ends_at > :now
            ORDER BY ends_at DESC
            LIMIT 1
            """
        ),
        {"u": user_id, "now": now},
    ).mappings().first()
    return dict(row) if row else None


def resolve_entitlement(db: Session, user_id: str, now: datetime | None = None) -> Entitlement:
    at = now or now_utc()
    try:
        profile = fetch_profile(db, user_id)
        subscription = fetch_active_subscription(db, user_id, at)
    except SQLAlchemyError as exc:
        logger.exception("entitlement lookup failed for user %s", user_id)
        raise DependencyUnavailable("Access validation failed") from exc
    if profile is None:
        logger.debug("no profile row for %s, resolving as %s", user_id, ROLE_USER)
    return build_entitlement(user_id, profile, subscription)


def authorize(
    entitlement: Entitlement,
    required_role: str | None = None,
    required_plan: str | None = None,
) -> AccessDecision:
    """
    Decide whether ``entitlement`` satisfies a role and/or plan gate.

    Admins pass every gate. A ``vip`` plan satisfies a ``vup`` requirement,
    a ``vup`` plan never satisfies ``vip``.
    """
    if entitlement.is_admin:
        return Allow(entitlement)

    if required_role is not None and entitlement.role != required_role:
        return Deny(DenyReason.ADMIN_CLEARANCE_REQUIRED)

    if required_plan is not None:
        if entitlement.active_plan == PLAN_NONE:
            return Deny(DenyReason.ACTIVE_LICENSE_REQUIRED)
        if required_plan == PLAN_VIP and entitlement.active_plan != PLAN_VIP:
            return Deny(DenyReason.ELITE_LICENSE_REQUIRED)

    return Allow(entitlement)
