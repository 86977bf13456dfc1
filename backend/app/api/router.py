from fastapi import APIRouter
from app.modules.admin import api as admin
from app.modules.checkout import api as checkout
from app.modules.payments import api as payments
from app.modules.predictions import api as predictions
from app.modules.promo import api as promo
from app.modules.user import api as user

router = APIRouter()
router.include_router(user.router, prefix="/user", tags=["user"])
router.include_router(predictions.router, prefix="/predictions", tags=["predictions"])
router.include_router(promo.router, prefix="/promo", tags=["promo"])
router.include_router(checkout.router, prefix="/checkout", tags=["checkout"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(payments.router, prefix="/payments", tags=["payments"])
