from fastapi import APIRouter, Depends

from app.api.deps import get_current_identity
from app.schemas.checkout import PromoValidateIn, PromoValidateOut
from app.services.pricing import PricingCatalog, get_pricing_catalog, validate_promo

router = APIRouter()


@router.post("/validate", response_model=PromoValidateOut)
def validate(
    payload: PromoValidateIn,
    _identity=Depends(get_current_identity),
    catalog: PricingCatalog = Depends(get_pricing_catalog),
):
    promo = validate_promo(catalog, payload.code)
    return PromoValidateOut(valid=True, discount=promo.discount_percent, code=promo.code)
