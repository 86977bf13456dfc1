from __future__ import annotations

import logging
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import DependencyUnavailable, GrantConflict, NotFound
from app.core.security import now_utc
from app.services.audit import ENTITY_PAYMENT, audit
from app.services.pricing import PricingCatalog, Quote, price_for
from app.services.subscriptions import grant_subscription

logger = logging.getLogger(__name__)


def build_checkout_url(order_id: str) -> str:
    return settings.CHECKOUT_URL_TEMPLATE.format(order_id=order_id)


def initiate_checkout(
    db: Session,
    catalog: PricingCatalog,
    *,
    user_id: str,
    plan_id: str,
    time_option: str,
    promo_code: str | None = None,
    actor_user_id: str | None = None,
) -> dict[str, object]:
    quote: Quote = price_for(catalog, plan_id, time_option, promo_code)
    applied_code = (promo_code or "").strip().upper() if quote.discount_percent else None

    try:
        order_id = db.execute(
            sa.text(
                """
                INSERT INTO payments (
                    user_id,
                    plan_type,
                    amount,
                    currency,
                    status,
                    duration_minutes,
                    provider,
                    promo_code
                )
                VALUES (:u, :plan, :amount, :currency, 'pending', :duration, :provider, :promo)
                RETURNING id
                """
            ),
            {
                "u": user_id,
                "plan": quote.plan_type,
                "amount": quote.amount,
                "currency": settings.CHECKOUT_CURRENCY,
                "duration": quote.duration_minutes,
                "provider": settings.CHECKOUT_PROVIDER,
                "promo": applied_code,
            },
        ).scalar_one()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("checkout initiation failed for %s", user_id)
        raise DependencyUnavailable("Failed to initiate checkout") from exc

    order_id = str(order_id)
    audit(
        db,
        actor_user_id or user_id,
        ENTITY_PAYMENT,
        order_id,
        "checkout_initiated",
        {
            "plan_id": plan_id,
            "time_option": time_option,
            "amount": str(quote.amount),
            "discount_percent": quote.discount_percent,
        },
    )
    logger.info("checkout %s created for %s (%s, %s)", order_id, user_id, plan_id, time_option)
    return {
        "success": True,
        "order_id": order_id,
        "amount": float(quote.amount),
        "currency": settings.CHECKOUT_CURRENCY,
        "duration_minutes": quote.duration_minutes,
        "checkout_url": build_checkout_url(order_id),
    }


def confirm_payment(db: Session, *, payment_id: str, now: datetime | None = None) -> dict[str, object]:
    """
    Mark a pending payment completed and grant the subscription it paid for.

    Completed payments are returned as-is so that repeated confirmations do
    not stack subscriptions.
    """
    at = now or now_utc()
    try:
        row = db.execute(
            sa.text(
                """
                SELECT id, user_id, plan_type, duration_minutes, status, subscription_id
                FROM payments
                WHERE id=:id
                FOR UPDATE
                """
            ),
            {"id": payment_id},
        ).mappings().first()
    except SQLAlchemyError as exc:
        db.rollback()
        raise DependencyUnavailable() from exc

    if not row:
        raise NotFound("Payment not found")

    if row["status"] == "completed":
        return {
            "order_id": str(row["id"]),
            "status": "completed",
            "subscription_id": str(row["subscription_id"]) if row["subscription_id"] else None,
            "duplicate": True,
        }
    if row["status"] != "pending":
        raise GrantConflict(f"Payment is {row['status']}")

    grant = grant_subscription(
        db,
        user_id=str(row["user_id"]),
        plan_type=row["plan_type"],
        amount=int(row["duration_minutes"]),
        unit="minutes",
        now=at,
    )
    try:
        db.execute(
            sa.text(
                """
                UPDATE payments
                SET status='completed',
                    subscription_id=:sub,
                    completed_at=:now
                WHERE id=:id
                """
            ),
            {"id": payment_id, "sub": grant.subscription_id, "now": at},
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise DependencyUnavailable() from exc

    audit(db, None, ENTITY_PAYMENT, str(row["id"]), "completed", {"subscription_id": grant.subscription_id})
    logger.info("payment %s confirmed, subscription %s", row["id"], grant.subscription_id)
    return {
        "order_id": str(row["id"]),
        "status": "completed",
        "subscription_id": grant.subscription_id,
        "duplicate": False,
    }
