from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DependencyUnavailable, RateLimited
from app.core.security import now_utc

logger = logging.getLogger(__name__)

PREDICTIONS_BUCKET = "predictions.generate"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    hits: int
    limit: int
    window_start: int
    reset_in_seconds: int


def window_start_for(now: datetime, window_seconds: int) -> int:
    epoch = int(now.timestamp())
    return epoch - (epoch % window_seconds)


def hit_fixed_window(
    db: Session,
    *,
    bucket: str,
    subject: str,
    limit: int,
    window_seconds: int,
    now: datetime | None = None,
) -> RateLimitDecision:
    """Count one call for ``subject`` in the current window and report whether it fits under ``limit``."""
    at = now or now_utc()
    start = window_start_for(at, window_seconds)
    try:
        hits = db.execute(
            sa.text(
                """
                INSERT INTO rate_limit_windows (bucket, subject, window_start, hits)
                VALUES (:bucket, :subject, :window_start, 1)
                ON CONFLICT (bucket, subject, window_start)
                DO UPDATE SET hits = rate_limit_windows.hits + 1
                RETURNING hits
                """
            ),
            {"bucket": bucket, "subject": subject, "window_start": start},
        ).scalar_one()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("rate limit counter unavailable for %s", bucket)
        raise DependencyUnavailable() from exc

    reset_in = max(1, start + window_seconds - int(at.timestamp()))
    return RateLimitDecision(
        allowed=int(hits) <= limit,
        hits=int(hits),
        limit=limit,
        window_start=start,
        reset_in_seconds=reset_in,
    )


def enforce_fixed_window(
    db: Session,
    *,
    bucket: str,
    subject: str,
    limit: int,
    window_seconds: int,
    now: datetime | None = None,
) -> RateLimitDecision:
    decision = hit_fixed_window(
        db,
        bucket=bucket,
        subject=subject,
        limit=limit,
        window_seconds=window_seconds,
        now=now,
    )
    # The counter is committed even when the call is denied
    db.commit()
    if not decision.allowed:
        logger.warning("rate limit exceeded bucket=%s subject=%s hits=%s", bucket, subject, decision.hits)
        raise RateLimited(decision.reset_in_seconds, "Rate limit exceeded, try again later")
    return decision


def purge_windows(db: Session, *, older_than: datetime) -> int:
    result = db.execute(
        sa.text("DELETE FROM rate_limit_windows WHERE window_start < :cutoff"),
        {"cutoff": int(older_than.timestamp())},
    )
    return int(result.rowcount or 0)
