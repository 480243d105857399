from fastapi import APIRouter, Depends

from services import booking_service, deletion_service
from services.access_control import (
    CurrentUser,
    accessible_bookings,
    can_delete_bookings,
    can_manage_bookings,
    require,
)
from services.booking_service import BookingForm, EventForm
from services.deletion_service import DeletionOptions
from services.snapshot import Snapshot, SnapshotStore

from ..db import get_session, get_snapshot, get_store, route_guard
from ..schemas import BookingIn, BookingRead, DeletionOptionsIn

router = APIRouter(tags=["bookings"], dependencies=[Depends(get_session)])

# таблицы, которые задевает сохранение формы брони
BOOKING_TABLES = (
    "clients",
    "bookings",
    "events",
    "staff_assignments",
    "workflows",
    "payments",
    "staff_payment_records",
)


def _to_form(booking_in: BookingIn) -> BookingForm:
    data = booking_in.model_dump(exclude={"events", "allow_duplicate"})
    return BookingForm(
        **data,
        events=[EventForm(**event.model_dump()) for event in booking_in.events],
    )


def _overviews(snapshot: Snapshot, bookings):
    return [booking_service.booking_overview(snapshot, b) for b in bookings]


@router.get("/bookings")
def list_bookings(
    filter: str = "active",
    search: str = "",
    user: CurrentUser = Depends(route_guard("/bookings")),
    snapshot: Snapshot = Depends(get_snapshot),
):
    return _overviews(snapshot, booking_service.list_bookings(snapshot, filter, search))


@router.get("/my-bookings")
def list_my_bookings(
    filter: str = "active",
    search: str = "",
    user: CurrentUser = Depends(route_guard("/my-bookings")),
    snapshot: Snapshot = Depends(get_snapshot),
):
    visible = accessible_bookings(
        user, snapshot.bookings, snapshot.events, snapshot.staff_assignments
    )
    return _overviews(
        snapshot, booking_service.list_bookings(snapshot, filter, search, bookings=visible)
    )


@router.get("/bookings/reference")
def next_reference(year: int | None = None, user: CurrentUser = Depends(route_guard("/bookings"))):
    return {"reference": booking_service.generate_booking_reference(year)}


@router.post("/bookings", response_model=BookingRead)
def create_booking(
    booking_in: BookingIn,
    user: CurrentUser = Depends(route_guard("/bookings")),
    store: SnapshotStore = Depends(get_store),
):
    require(can_manage_bookings(user), "создание брони")
    booking = booking_service.save_booking(
        _to_form(booking_in), allow_duplicate=booking_in.allow_duplicate
    )
    store.invalidate(*BOOKING_TABLES)
    return booking


@router.put("/bookings/{booking_id}", response_model=BookingRead)
def edit_booking(
    booking_id: int,
    booking_in: BookingIn,
    user: CurrentUser = Depends(route_guard("/bookings")),
    store: SnapshotStore = Depends(get_store),
):
    require(can_manage_bookings(user), "изменение брони")
    booking = booking_service.save_booking(
        _to_form(booking_in), booking_id, allow_duplicate=booking_in.allow_duplicate
    )
    store.invalidate(*BOOKING_TABLES)
    return booking


@router.post("/bookings/{booking_id}/deletion-plan")
def deletion_plan(
    booking_id: int,
    options: DeletionOptionsIn | None = None,
    user: CurrentUser = Depends(route_guard("/bookings")),
    snapshot: Snapshot = Depends(get_snapshot),
):
    require(can_delete_bookings(user), "удаление брони")
    chosen = DeletionOptions(**options.model_dump()) if options else None
    return deletion_service.plan_deletion(snapshot, booking_id, chosen)


@router.post("/bookings/{booking_id}/delete")
def delete_booking_selective(
    booking_id: int,
    options: DeletionOptionsIn | None = None,
    user: CurrentUser = Depends(route_guard("/bookings")),
    store: SnapshotStore = Depends(get_store),
):
    require(can_delete_bookings(user), "удаление брони")
    chosen = DeletionOptions(**options.model_dump()) if options else None
    counts = deletion_service.execute_deletion(booking_id, chosen)
    store.refresh()
    return {"status": "deleted", "counts": counts}


@router.delete("/bookings/{booking_id}")
def delete_booking(
    booking_id: int,
    user: CurrentUser = Depends(route_guard("/bookings")),
    store: SnapshotStore = Depends(get_store),
):
    require(can_delete_bookings(user), "удаление брони")
    deletion_service.delete_booking(booking_id)
    store.refresh()
    return {"status": "deleted"}
