from fastapi import APIRouter, Depends

from services import dashboard_service
from services.access_control import CurrentUser, can_manage_payments
from services.snapshot import Snapshot
from services.staff_service import data_not_received

from ..db import get_session, get_snapshot, route_guard

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(get_session)])

guard = route_guard("/dashboard")


@router.get("")
def dashboard(user: CurrentUser = Depends(guard), snapshot: Snapshot = Depends(get_snapshot)):
    report = dashboard_service.dashboard_conflicts(snapshot)
    result = {
        "stats": dashboard_service.quick_stats(snapshot),
        "todays_events": dashboard_service.todays_events(snapshot),
        "upcoming_events": dashboard_service.upcoming_week_events(snapshot),
        "conflicts": report.conflicts,
        "shortages": report.shortages,
    }
    if can_manage_payments(user):
        result["financial_overview"] = dashboard_service.financial_overview(snapshot)
    return result


@router.get("/data-not-received")
def pending_data(user: CurrentUser = Depends(guard), snapshot: Snapshot = Depends(get_snapshot)):
    return data_not_received(snapshot)


@router.get("/overdue-payments")
def overdue_payments(
    user: CurrentUser = Depends(guard), snapshot: Snapshot = Depends(get_snapshot)
):
    return dashboard_service.overdue_payments(snapshot)


@router.get("/staff-performance")
def staff_performance(
    user: CurrentUser = Depends(guard), snapshot: Snapshot = Depends(get_snapshot)
):
    return dashboard_service.staff_performance(snapshot)


@router.get("/recent-activity")
def recent_activity(
    limit: int = 10,
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    return dashboard_service.recent_activity(
        snapshot, limit=limit, include_payments=can_manage_payments(user)
    )
