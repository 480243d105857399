from datetime import date

from fastapi import APIRouter, Depends

from services.access_control import CurrentUser, accessible_events
from services.conflict_service import detect_conflicts, staff_availability
from services.event_service import events_between, events_on
from services.snapshot import Snapshot
from utils.display import event_display_info
from utils.time_utils import month_bounds

from ..db import get_session, get_snapshot, route_guard

router = APIRouter(prefix="/calendar", tags=["calendar"], dependencies=[Depends(get_session)])

guard = route_guard("/calendar")


def _describe(snapshot: Snapshot, event):
    booking = snapshot.booking(event.booking_id)
    client = snapshot.client(booking.client_id) if booking else None
    return {
        "event": event,
        "display": event_display_info(event, booking, client),
        "staff_ids": [a.staff_id for a in snapshot.assignments_for_event(event.id)],
    }


@router.get("")
def month_view(
    year: int | None = None,
    month: int | None = None,
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    """Мероприятия месяца с конфликтами и нехваткой сотрудников."""
    today = date.today()
    start, end = month_bounds(date(year or today.year, month or today.month, 1))
    visible = accessible_events(user, snapshot.events, snapshot.staff_assignments)
    report = detect_conflicts(visible, snapshot.staff_assignments, snapshot.staff)
    return {
        "start": start,
        "end": end,
        "events": [_describe(snapshot, e) for e in events_between(visible, start, end)],
        "conflicts": report.conflicts,
        "shortages": report.shortages,
    }


@router.get("/day/{day}")
def day_view(
    day: date,
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    visible = accessible_events(user, snapshot.events, snapshot.staff_assignments)
    return [_describe(snapshot, e) for e in events_on(visible, day)]


@router.get("/availability")
def availability(
    staff_id: int,
    event_date: date,
    time_slot: str,
    exclude_event_id: int | None = None,
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    busy = staff_availability(
        staff_id,
        event_date,
        time_slot,
        snapshot.events,
        snapshot.staff_assignments,
        exclude_event_id=exclude_event_id,
    )
    return {"available": not busy, "busy_event_ids": busy}
