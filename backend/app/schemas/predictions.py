from datetime import datetime
from typing import Literal

from app.schemas.common import ApiModel


PredictionKind = Literal["standard", "elite"]
RiskLevel = Literal["low", "medium", "high"]


class PredictionRequestIn(ApiModel):
    type: PredictionKind = "standard"
    risk_setting: RiskLevel = "medium"


class DataPointOut(ApiModel):
    time: int
    value: float
    risk: RiskLevel


class PredictionMetadataOut(ApiModel):
    timestamp: datetime
    protocol: str
    node: str
    tier: PredictionKind


class PredictionOut(ApiModel):
    prediction: list[DataPointOut]
    metadata: PredictionMetadataOut
