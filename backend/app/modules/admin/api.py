from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_access
from app.db.session import get_db
from app.schemas.admin import AdminUserListOut, AdminUserRowOut, GrantSubscriptionIn, GrantSubscriptionOut
from app.schemas.entitlements import Entitlement
from app.services.entitlements import ROLE_ADMIN
from app.services.subscriptions import ensure_profile_exists, grant_subscription, list_users_with_subscriptions

router = APIRouter()

require_admin = require_access(role=ROLE_ADMIN)


@router.get("/users", response_model=AdminUserListOut)
def list_users(
    q: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    _admin: Entitlement = Depends(require_admin),
    db: Session = Depends(get_db),
):
    rows = list_users_with_subscriptions(db, limit=limit, offset=offset, q=q)
    out_rows = [AdminUserRowOut(**r) for r in rows]
    next_offset = offset + limit if len(out_rows) == limit else None
    return AdminUserListOut(rows=out_rows, limit=limit, offset=offset, next_offset=next_offset)


@router.post("/users/{user_id}/subscriptions", response_model=GrantSubscriptionOut)
def grant(
    user_id: UUID,
    payload: GrantSubscriptionIn,
    admin: Entitlement = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target = str(user_id)
    ensure_profile_exists(db, target)
    result = grant_subscription(
        db,
        user_id=target,
        plan_type=payload.plan_type,
        amount=payload.amount,
        unit=payload.unit,
        actor_user_id=admin.user_id,
    )
    db.commit()
    return GrantSubscriptionOut(
        subscription_id=result.subscription_id,
        user_id=result.user_id,
        plan_type=result.plan_type,
        starts_at=result.starts_at,
        ends_at=result.ends_at,
    )
