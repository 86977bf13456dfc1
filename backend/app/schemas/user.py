from datetime import datetime

from app.schemas.common import ApiModel
from app.schemas.entitlements import PlanType, Role, SubscriptionOut


class UserOut(ApiModel):
    id: str
    email: str | None = None
    role: Role
    created_at: datetime | None = None
    is_vip: bool
    plan_type: PlanType | None = None
    vip_subscription: SubscriptionOut | None = None
    has_unlimited_access: bool


class MeOut(ApiModel):
    user: UserOut
