from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.common import ApiModel
from app.schemas.entitlements import PlanType, Role


DurationUnit = Literal["minutes", "hours", "days"]


class AdminUserRowOut(ApiModel):
    id: str
    email: str | None = None
    role: Role
    created_at: datetime
    is_vip: bool
    plan_type: PlanType | None = None
    vip_ends_at: datetime | None = None


class AdminUserListOut(ApiModel):
    rows: list[AdminUserRowOut] = Field(default_factory=list)
    limit: int
    offset: int
    next_offset: int | None = None


class GrantSubscriptionIn(ApiModel):
    plan_type: PlanType = "vip"
    amount: int = Field(..., ge=1, le=100_000)
    unit: DurationUnit = "days"


class GrantSubscriptionOut(ApiModel):
    subscription_id: str
    user_id: str
    plan_type: PlanType
    starts_at: datetime
    ends_at: datetime
