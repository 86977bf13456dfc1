from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import enforce, get_entitlement
from app.db.session import get_db
from app.schemas.checkout import CheckoutInitiateIn, CheckoutInitiateOut
from app.schemas.entitlements import Entitlement
from app.services.checkout import initiate_checkout
from app.services.entitlements import ROLE_ADMIN
from app.services.pricing import PricingCatalog, get_pricing_catalog

router = APIRouter()


@router.post("/initiate", response_model=CheckoutInitiateOut)
def initiate(
    payload: CheckoutInitiateIn,
    entitlement: Entitlement = Depends(get_entitlement),
    catalog: PricingCatalog = Depends(get_pricing_catalog),
    db: Session = Depends(get_db),
):
    target_user_id = str(payload.user_id)
    if target_user_id != entitlement.user_id:
        # Only admins may open an order on someone else's behalf
        enforce(entitlement, required_role=ROLE_ADMIN)

    out = initiate_checkout(
        db,
        catalog,
        user_id=target_user_id,
        plan_id=payload.plan_id,
        time_option=payload.time_option,
        promo_code=payload.promo_code,
        actor_user_id=entitlement.user_id,
    )
    db.commit()
    return CheckoutInitiateOut(**out)
