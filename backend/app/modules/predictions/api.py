from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import enforce, get_current_identity
from app.core.config import settings
from app.core.security import Identity
from app.db.session import get_db
from app.schemas.predictions import PredictionOut, PredictionRequestIn
from app.services.entitlements import PLAN_VIP, resolve_entitlement
from app.services.predictions import generate_prediction
from app.services.rate_limit import PREDICTIONS_BUCKET, enforce_fixed_window

router = APIRouter()


@router.post("/generate", response_model=PredictionOut)
def generate(
    payload: PredictionRequestIn,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    enforce_fixed_window(
        db,
        bucket=PREDICTIONS_BUCKET,
        subject=identity.id,
        limit=settings.PREDICTION_RATE_LIMIT,
        window_seconds=settings.PREDICTION_RATE_WINDOW_SECONDS,
    )
    if payload.type == "elite":
        enforce(resolve_entitlement(db, identity.id), required_plan=PLAN_VIP)
    return PredictionOut(**generate_prediction(payload.type, payload.risk_setting))
