"""Fabricated prediction series in the shape the web client renders."""

from __future__ import annotations

import math
import random

from app.core.security import now_utc

ELITE_POINTS = 20
STANDARD_POINTS = 40
PROTOCOL_LABEL = "AES-256-GCM"

# risk_setting -> (base, volatility)
_ELITE_PROFILES = {
    "low": (1.5, 0.5),
    "medium": (1.0, 1.0),
    "high": (2.5, 3.0),
}


def risk_for_value(value: float) -> str:
    if value > 5:
        return "high"
    if value > 2:
        return "medium"
    return "low"


def elite_series(risk_setting: str, rng: random.Random) -> list[dict]:
    base, volatility = _ELITE_PROFILES.get(risk_setting, _ELITE_PROFILES["medium"])
    points = []
    for i in range(ELITE_POINTS):
        value = max(1.0, base + (rng.random() - 0.4) * volatility * 2)
        points.append({"time": i, "value": round(value, 2), "risk": risk_for_value(value)})
    return points


def standard_series(rng: random.Random) -> list[dict]:
    points = []
    for i in range(STANDARD_POINTS):
        value = max(1.0, 1.2 + rng.random() * 3 + math.sin(i / 4) * 0.8)
        points.append({"time": i, "value": round(value, 2), "risk": "low"})
    return points


def generate_prediction(kind: str, risk_setting: str = "medium", rng: random.Random | None = None) -> dict:
    r = rng or random.Random()
    if kind == "elite":
        series = elite_series(risk_setting, r)
    else:
        series = standard_series(r)
    return {
        "prediction": series,
        "metadata": {
            "timestamp": now_utc(),
            "protocol": PROTOCOL_LABEL,
            "node": f"NODE_{r.randint(1000, 9999)}",
            "tier": "elite" if kind == "elite" else "standard",
        },
    }
