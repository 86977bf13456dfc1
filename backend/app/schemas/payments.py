from typing import Literal

from app.schemas.common import ApiModel


class PaymentConfirmOut(ApiModel):
    order_id: str
    status: Literal["completed"]
    subscription_id: str | None = None
    duplicate: bool = False
