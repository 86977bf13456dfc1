from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_service
from app.db.session import get_db
from app.schemas.payments import PaymentConfirmOut
from app.services.checkout import confirm_payment

router = APIRouter()


@router.post("/{payment_id}/confirm", response_model=PaymentConfirmOut, dependencies=[Depends(require_service)])
def confirm(payment_id: UUID, db: Session = Depends(get_db)):
    out = confirm_payment(db, payment_id=str(payment_id))
    db.commit()
    return PaymentConfirmOut(**out)
