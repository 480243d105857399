from datetime import date

from fastapi import APIRouter, Depends

from services import staff_service
from services.access_control import (
    CurrentUser,
    can_manage_bookings,
    can_manage_users,
    require,
)
from services.snapshot import Snapshot, SnapshotStore

from ..db import get_current_user, get_session, get_snapshot, get_store, route_guard
from ..schemas import AssignmentIn, LoginIn, StaffBase, StaffCreate, StaffRead, UserRead

router = APIRouter(tags=["staff"], dependencies=[Depends(get_session)])

guard = route_guard("/staff")


@router.get("/staff", response_model=list[StaffRead])
def list_staff(
    search: str = "",
    role: str = "all",
    status: str = "all",
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    return staff_service.filter_staff(snapshot.staff, search, role, status)


@router.get("/staff/active", response_model=list[StaffRead])
def list_active_staff(user: CurrentUser = Depends(guard)):
    """Действующие сотрудники для выбора в форме брони."""
    return list(staff_service.get_active_staff())


@router.post("/staff", response_model=StaffRead)
def add_staff(
    staff_in: StaffCreate,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    member = staff_service.add_staff(**staff_in.model_dump())
    store.invalidate("staff")
    return member


@router.put("/staff/{staff_id}", response_model=StaffRead)
def edit_staff(
    staff_id: int,
    staff_in: StaffBase,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    member = staff_service.get_staff_by_id(staff_id)
    if member is None:
        raise staff_service.StaffNotFoundError(f"Сотрудник id={staff_id} не найден")
    member = staff_service.update_staff(member, **staff_in.model_dump(exclude_none=True))
    store.invalidate("staff")
    return member


@router.delete("/staff/{staff_id}")
def remove_staff(
    staff_id: int,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    staff_service.delete_staff(staff_id)
    store.invalidate("staff")
    return {"status": "deleted"}


@router.get("/staff/{staff_id}/assignments")
def staff_assignments(
    staff_id: int,
    period: str = "all",
    start: date | None = None,
    end: date | None = None,
    user: CurrentUser = Depends(get_current_user),
    snapshot: Snapshot = Depends(get_snapshot),
):
    if user.staff_id != staff_id:
        require(can_manage_bookings(user), "просмотр назначений другого сотрудника")
    return staff_service.staff_assignments_for(snapshot, staff_id, period, start=start, end=end)


@router.post("/staff/{staff_id}/login", response_model=UserRead)
def create_login(
    staff_id: int,
    body: LoginIn,
    user: CurrentUser = Depends(guard),
):
    require(can_manage_users(user), "создание учётной записи")
    return staff_service.create_login(staff_id, body.email, body.role)


# ──────────────────────────── Назначения ─────────────────────────────


@router.post("/events/{event_id}/staff")
def assign(
    event_id: int,
    body: AssignmentIn,
    user: CurrentUser = Depends(get_current_user),
    store: SnapshotStore = Depends(get_store),
):
    require(can_manage_bookings(user), "назначение сотрудников")
    assignment = staff_service.assign_staff(event_id, body.staff_id, body.role)
    store.invalidate("staff_assignments", "payments")
    return {"id": assignment.id, "event_id": event_id, "staff_id": body.staff_id, "role": assignment.role}


@router.delete("/events/{event_id}/staff/{staff_id}")
def unassign(
    event_id: int,
    staff_id: int,
    user: CurrentUser = Depends(get_current_user),
    store: SnapshotStore = Depends(get_store),
):
    require(can_manage_bookings(user), "снятие сотрудников")
    if not staff_service.unassign_staff(event_id, staff_id):
        raise staff_service.AssignmentNotFoundError(
            f"Сотрудник id={staff_id} не назначен на мероприятие id={event_id}"
        )
    store.invalidate("staff_assignments", "payments")
    return {"status": "deleted"}
