from fastapi import APIRouter

from .bookings import router as bookings_router
from .calendar import router as calendar_router
from .client_payments import router as client_payments_router
from .clients import router as clients_router
from .dashboard import router as dashboard_router
from .expenses import router as expenses_router
from .staff import router as staff_router
from .staff_payments import router as staff_payments_router
from .tracking import router as tracking_router

router = APIRouter()
router.include_router(dashboard_router)
router.include_router(clients_router)
router.include_router(bookings_router)
router.include_router(tracking_router)
router.include_router(calendar_router)
router.include_router(client_payments_router)
router.include_router(staff_payments_router)
router.include_router(expenses_router)
router.include_router(staff_router)


@router.get("/status")
def status():
    return {"status": "ok"}
