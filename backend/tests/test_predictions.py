from __future__ import annotations

import random

import pytest

from app.services.predictions import ELITE_POINTS, STANDARD_POINTS, generate_prediction, risk_for_value


@pytest.mark.parametrize("value,risk", [(1.0, "low"), (2.0, "low"), (2.01, "medium"), (5.0, "medium"), (5.01, "high")])
def test_risk_thresholds(value, risk):
    assert risk_for_value(value) == risk


@pytest.mark.parametrize("risk_setting", ["low", "medium", "high"])
def test_elite_series_shape(risk_setting):
    out = generate_prediction("elite", risk_setting, rng=random.Random(7))
    points = out["prediction"]
    assert len(points) == ELITE_POINTS == 20
    assert [p["time"] for p in points] == list(range(20))
    for p in points:
        assert p["value"] >= 1.0
        assert p["value"] == round(p["value"], 2)
        assert p["risk"] in {"low", "medium", "high"}
    assert out["metadata"]["tier"] == "elite"


def test_standard_series_is_low_risk_and_longer():
    out = generate_prediction("standard", rng=random.Random(3))
    points = out["prediction"]
    assert len(points) == STANDARD_POINTS == 40
    assert {p["risk"] for p in points} == {"low"}
    assert all(1.0 <= p["value"] <= 5.0 for p in points)


def test_metadata_labels():
    meta = generate_prediction("standard", rng=random.Random(1))["metadata"]
    assert meta["protocol"] == "AES-256-GCM"
    assert meta["node"].startswith("NODE_")
    assert 1000 <= int(meta["node"][5:]) <= 9999


def test_same_seed_same_series():
    a = generate_prediction("elite", "high", rng=random.Random(42))["prediction"]
    b = generate_prediction("elite", "high", rng=random.Random(42))["prediction"]
    assert a == b
