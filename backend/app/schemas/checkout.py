from uuid import UUID

from pydantic import Field

from app.schemas.common import ApiModel


class PromoValidateIn(ApiModel):
    code: str = Field(..., min_length=1, max_length=64)


class PromoValidateOut(ApiModel):
    valid: bool = True
    discount: int
    code: str


class CheckoutInitiateIn(ApiModel):
    user_id: UUID
    plan_id: str = Field(..., min_length=1, max_length=64)
    time_option: str = Field(..., min_length=1, max_length=64)
    promo_code: str | None = Field(default=None, max_length=64)


class CheckoutInitiateOut(ApiModel):
    success: bool = True
    order_id: str
    amount: float
    currency: str
    duration_minutes: int
    checkout_url: str
