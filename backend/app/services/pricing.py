from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from app.core.config import settings
from app.core.errors import InvalidPlanOption, NotFound

CENT = Decimal("0.01")


class PlanPricing(BaseModel):
    plan_type: str = Field(pattern="^(vup|vip)$")
    options: dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("options")
    @classmethod
    def _positive_prices(cls, value: dict[str, Decimal]) -> dict[str, Decimal]:
        for option, price in value.items():
            if price <= 0:
                raise ValueError(f"price for '{option}' must be positive")
        return value


class PricingCatalog(BaseModel):
    plans: dict[str, PlanPricing] = Field(default_factory=dict)
    promos: dict[str, int] = Field(default_factory=dict)

    @field_validator("promos")
    @classmethod
    def _normalize_promos(cls, value: dict[str, int]) -> dict[str, int]:
        out: dict[str, int] = {}
        for code, percent in value.items():
            if not 0 <= percent <= 100:
                raise ValueError(f"discount for '{code}' must be between 0 and 100")
            out[code.strip().upper()] = percent
        return out


@dataclass(frozen=True)
class Promo:
    code: str
    discount_percent: int


@dataclass(frozen=True)
class Quote:
    plan_id: str
    plan_type: str
    time_option: str
    base_price: Decimal
    discount_percent: int
    amount: Decimal
    duration_minutes: int


def load_catalog(path: str | Path) -> PricingCatalog:
    raw = Path(path).read_text(encoding="utf-8")
    return PricingCatalog.model_validate(json.loads(raw))


@lru_cache(maxsize=1)
def get_pricing_catalog() -> PricingCatalog:
    return load_catalog(settings.PRICING_CATALOG_PATH)


def parse_duration_minutes(time_option: str) -> int:
    parts = (time_option or "").split()
    if len(parts) != 2:
        raise InvalidPlanOption(f"Unrecognized duration '{time_option}'")
    value, unit = parts
    try:
        amount = int(value)
    except ValueError:
        raise InvalidPlanOption(f"Unrecognized duration '{time_option}'")
    if amount <= 0:
        raise InvalidPlanOption(f"Unrecognized duration '{time_option}'")
    if "hour" in unit.lower():
        return amount * 60
    return amount


def find_promo(catalog: PricingCatalog, code: str | None) -> Promo | None:
    key = (code or "").strip().upper()
    if not key or key not in catalog.promos:
        return None
    return Promo(code=key, discount_percent=catalog.promos[key])


def validate_promo(catalog: PricingCatalog, code: str) -> Promo:
    promo = find_promo(catalog, code)
    if promo is None:
        raise NotFound("Invalid or expired promo code")
    return promo


def apply_discount(base_price: Decimal, discount_percent: int) -> Decimal:
    try:
        factor = Decimal(1) - (Decimal(discount_percent) / Decimal(100))
        return (base_price * factor).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidPlanOption("Invalid price") from exc


def price_for(
    catalog: PricingCatalog,
    plan_id: str,
    time_option: str,
    promo_code: str | None = None,
) -> Quote:
    plan = catalog.plans.get(plan_id)
    if plan is None:
        raise InvalidPlanOption(f"Unknown plan '{plan_id}'")
    base_price = plan.options.get(time_option)
    if base_price is None:
        raise InvalidPlanOption(f"Option '{time_option}' is not available for '{plan_id}'")

    duration_minutes = parse_duration_minutes(time_option)

    # Unknown codes are not an error here; /promo/validate decides acceptance
    promo = find_promo(catalog, promo_code)
    discount = promo.discount_percent if promo else 0

    return Quote(
        plan_id=plan_id,
        plan_type=plan.plan_type,
        time_option=time_option,
        base_price=base_price,
        discount_percent=discount,
        amount=apply_discount(base_price, discount),
        duration_minutes=duration_minutes,
    )
