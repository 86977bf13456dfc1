from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity
from app.core.security import Identity
from app.db.session import get_db
from app.schemas.user import MeOut, UserOut
from app.services.entitlements import fetch_profile, resolve_entitlement

router = APIRouter()


@router.get("/me", response_model=MeOut)
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    entitlement = resolve_entitlement(db, identity.id)
    # resolve_entitlement already surfaced store failures; a second read only adds created_at/email
    profile = fetch_profile(db, identity.id) or {}
    sub = entitlement.subscription
    return MeOut(
        user=UserOut(
            id=identity.id,
            email=identity.email or profile.get("email"),
            role=entitlement.role,
            created_at=profile.get("created_at"),
            is_vip=sub is not None,
            plan_type=sub.plan_type if sub else None,
            vip_subscription=sub,
            has_unlimited_access=entitlement.has_unlimited_access,
        )
    )
