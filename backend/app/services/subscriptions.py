from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DependencyUnavailable, GrantConflict, NotFound, ValidationFailed
from app.core.security import now_utc
from app.services.audit import ENTITY_SUBSCRIPTION, audit
from app.services.entitlements import PAID_PLANS, is_effectively_active

logger = logging.getLogger(__name__)

UNIT_DELTAS = {
    "minutes": lambda n: timedelta(minutes=n),
    "hours": lambda n: timedelta(hours=n),
    "days": lambda n: timedelta(days=n),
}


@dataclass(frozen=True)
class GrantResult:
    subscription_id: str
    user_id: str
    plan_type: str
    starts_at: datetime
    ends_at: datetime


def compute_ends_at(starts_at: datetime, amount: int, unit: str) -> datetime:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationFailed("amount must be a positive integer")
    delta = UNIT_DELTAS.get(unit)
    if delta is None:
        raise ValidationFailed("unit must be one of minutes, hours, days")
    return starts_at + delta(amount)


def _normalize_plan_type(plan_type: str | None) -> str:
    value = (plan_type or "").strip().lower()
    if value not in PAID_PLANS:
        raise ValidationFailed("plan_type must be vup or vip")
    return value


def ensure_profile_exists(db: Session, user_id: str) -> None:
    try:
        found = db.execute(
            sa.text("SELECT 1 FROM profiles WHERE id=:u"),
            {"u": user_id},
        ).scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise DependencyUnavailable() from exc
    if found is None:
        raise NotFound("User profile not found")


def grant_subscription(
    db: Session,
    *,
    user_id: str,
    plan_type: str,
    amount: int,
    unit: str,
    actor_user_id: str | None = None,
    now: datetime | None = None,
) -> GrantResult:
    """
    Replace the user's active subscription with a new one of ``amount`` ``unit``.

    Deactivation and insert run in the caller's transaction behind a per-user
    advisory lock; the caller commits. On failure the transaction is rolled
    back so the previous subscription stays active.
    """
    plan = _normalize_plan_type(plan_type)
    starts_at = now or now_utc()
    ends_at = compute_ends_at(starts_at, amount, unit)

    try:
        db.execute(
            sa.text("SELECT pg_advisory_xact_lock(hashtextextended(:lock_key, 0))"),
            {"lock_key": f"vip_subscriptions:{user_id}"},
        )
        deactivated = db.execute(
            sa.text(
                """
                UPDATE vip_subscriptions
                SET active=false
                WHERE user_id=:u
                  AND active = true
                """
            ),
            {"u": user_id},
        ).rowcount
        subscription_id = db.execute(
            sa.text(
                """
                INSERT INTO vip_subscriptions (user_id, plan_type, starts_at, ends_at, active, granted_by)
                VALUES (:u, :plan, :starts_at, :ends_at, true, :actor)
                RETURNING id
                """
            ),
            {
                "u": user_id,
                "plan": plan,
                "starts_at": starts_at,
                "ends_at": ends_at,
                "actor": actor_user_id,
            },
        ).scalar_one()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("subscription grant for %s conflicted, rolled back", user_id)
        raise GrantConflict() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("subscription grant for %s failed, rolled back", user_id)
        raise DependencyUnavailable("Subscription grant failed, retry") from exc

    audit(
        db,
        actor_user_id,
        ENTITY_SUBSCRIPTION,
        str(subscription_id),
        "granted",
        {
            "user_id": user_id,
            "plan_type": plan,
            "amount": amount,
            "unit": unit,
            "ends_at": ends_at.isoformat(),
            "deactivated": int(deactivated or 0),
        },
    )
    logger.info(
        "granted %s to %s until %s (deactivated=%s)",
        plan,
        user_id,
        ends_at.isoformat(),
        deactivated,
    )
    return GrantResult(
        subscription_id=str(subscription_id),
        user_id=user_id,
        plan_type=plan,
        starts_at=starts_at,
        ends_at=ends_at,
    )


def list_users_with_subscriptions(
    db: Session,
    *,
    limit: int,
    offset: int,
    q: str | None = None,
    now: datetime | None = None,
) -> list[dict[str, object]]:
    at = now or now_utc()
    pattern = f"%{q.strip().lower()}%" if q and q.strip() else None
    rows = db.execute(
        sa.text(
            """
            SELECT
                p.id,
                p.email,
                p.role,
                p.created_at,
                s.plan_type,
                s.ends_at,
                s.active
            FROM profiles p
            LEFT JOIN LATERAL (
                SELECT plan_type, ends_at, active
                FROM vip_subscriptions vs
                WHERE vs.user_id = p.id
                  AND vs.active = true
                  AND vs.ends_at > :now
                ORDER BY vs.ends_at DESC
                LIMIT 1
            ) s ON true
            WHERE (
                CAST(:pat AS text) IS NULL
                OR lower(coalesce(p.email, '')) LIKE :pat
                OR CAST(p.id AS text) LIKE :pat
            )
            ORDER BY p.created_at DESC, p.id DESC
            LIMIT :limit OFFSET :offset
            """
        ),
        {"now": at, "pat": pattern, "limit": limit, "offset": offset},
    ).mappings().all()

    out = []
    for r in rows:
        is_vip = is_effectively_active(bool(r["active"]), r["ends_at"], at)
        out.append(
            {
                "id": str(r["id"]),
                "email": r["email"],
                "role": r["role"],
                "created_at": r["created_at"],
                "is_vip": is_vip,
                "plan_type": r["plan_type"] if is_vip else None,
                "vip_ends_at": r["ends_at"] if is_vip else None,
            }
        )
    return out


def deactivate_expired(db: Session, now: datetime | None = None) -> int:
    at = now or now_utc()
    result = db.execute(
        sa.text(
            """
            UPDATE vip_subscriptions
            SET active=false
            WHERE active = true
              AND ends_at <= :now
            """
        ),
        {"now": at},
    )
    return int(result.rowcount or 0)
