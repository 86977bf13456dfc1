from datetime import datetime
from typing import Literal

from app.schemas.common import ApiModel


Role = Literal["user", "admin"]
PlanType = Literal["vup", "vip"]
ActivePlan = Literal["none", "vup", "vip"]


class SubscriptionOut(ApiModel):
    id: str
    user_id: str
    plan_type: PlanType
    starts_at: datetime
    ends_at: datetime
    active: bool


class Entitlement(ApiModel):
    user_id: str
    role: Role = "user"
    is_admin: bool = False
    active_plan: ActivePlan = "none"
    has_unlimited_access: bool = False
    subscription: SubscriptionOut | None = None
