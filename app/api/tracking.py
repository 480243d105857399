from fastapi import APIRouter, Depends

from services import booking_service, data_collection_service, staff_service, workflow_service
from services.access_control import (
    AccessDeniedError,
    CurrentUser,
    accessible_bookings,
    can_manage_bookings,
    can_update_event_tracking,
    require,
)
from services.snapshot import Snapshot, SnapshotStore

from ..db import get_current_user, get_session, get_snapshot, get_store, route_guard
from ..schemas import ChecklistItemIn, DataReceivedIn, StepUpdate, WorkflowRead

router = APIRouter(tags=["tracking"], dependencies=[Depends(get_session)])


@router.get("/tracking")
def tracking_list(
    filter: str = "active",
    search: str = "",
    user: CurrentUser = Depends(route_guard("/tracking")),
    snapshot: Snapshot = Depends(get_snapshot),
):
    bookings = booking_service.list_bookings(snapshot, filter, search)
    return [booking_service.booking_overview(snapshot, b) for b in bookings]


@router.get("/my-events")
def my_events(
    filter: str = "active",
    search: str = "",
    user: CurrentUser = Depends(route_guard("/my-events")),
    snapshot: Snapshot = Depends(get_snapshot),
):
    visible = accessible_bookings(
        user, snapshot.bookings, snapshot.events, snapshot.staff_assignments
    )
    bookings = booking_service.list_bookings(snapshot, filter, search, bookings=visible)
    return [booking_service.booking_overview(snapshot, b) for b in bookings]


@router.get("/tracking/{booking_id}")
def tracking_detail(
    booking_id: int,
    user: CurrentUser = Depends(route_guard("/tracking/{booking_id}")),
    snapshot: Snapshot = Depends(get_snapshot),
):
    visible = accessible_bookings(
        user, snapshot.bookings, snapshot.events, snapshot.staff_assignments
    )
    if booking_id not in {b.id for b in visible} and snapshot.booking(booking_id) is not None:
        raise AccessDeniedError(f"Нет доступа к брони id={booking_id}")
    tracking = booking_service.booking_tracking(snapshot, booking_id)
    checklists = {
        item.event.id: data_collection_service.collection_progress(item.event.id)
        for item in tracking.events
    }
    return {"tracking": tracking, "data_collection": checklists}


@router.post("/workflows/{workflow_id}/steps", response_model=WorkflowRead)
def update_step(
    workflow_id: int,
    step: StepUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: SnapshotStore = Depends(get_store),
):
    workflow = workflow_service.get_workflow_by_id(workflow_id)
    if workflow is None:
        raise workflow_service.WorkflowNotFoundError(f"Workflow id={workflow_id} не найден")
    if workflow.event_id is None:
        require(can_manage_bookings(user), "изменение workflow брони")
    else:
        require(
            can_update_event_tracking(
                user, workflow.event_id, store.ensure_loaded().staff_assignments
            ),
            "изменение трекинга мероприятия",
        )

    updated_by = step.updated_by or user.name
    if step.action == "toggle":
        workflow = workflow_service.toggle_step(
            workflow_id, step.category, step.step_key, updated_by
        )
    elif step.action == "not_applicable":
        workflow = workflow_service.set_step_not_applicable(
            workflow_id, step.category, step.step_key, step.value, updated_by
        )
    elif step.action == "notes":
        workflow = workflow_service.set_step_notes(
            workflow_id, step.category, step.step_key, step.notes, updated_by
        )
    else:
        raise ValueError(f"Неизвестное действие: {step.action}")
    store.invalidate("workflows")
    return workflow


@router.put("/assignments/{assignment_id}/data-received")
def set_data_received(
    assignment_id: int,
    body: DataReceivedIn,
    user: CurrentUser = Depends(get_current_user),
    store: SnapshotStore = Depends(get_store),
):
    # права проверяются по свежим назначениям, а не по кэшу
    snapshot = store.invalidate("staff_assignments")
    assignment = next((a for a in snapshot.staff_assignments if a.id == assignment_id), None)
    if assignment is None:
        raise staff_service.AssignmentNotFoundError(f"Назначение id={assignment_id} не найдено")
    require(
        can_update_event_tracking(user, assignment.event_id, snapshot.staff_assignments),
        "отметка получения данных",
    )
    updated = staff_service.mark_data_received(
        assignment_id, body.received, body.received_by or user.name
    )
    store.invalidate("staff_assignments")
    return {
        "id": updated.id,
        "data_received": updated.data_received,
        "data_received_at": updated.data_received_at,
        "data_received_by": updated.data_received_by,
    }


@router.get("/events/{event_id}/checklist")
def read_checklist(event_id: int, user: CurrentUser = Depends(get_current_user)):
    items = data_collection_service.get_items(event_id)
    return {
        "items": [
            {
                "id": i.id,
                "item": i.item,
                "staff_id": i.staff_id,
                "received": i.received,
                "received_at": i.received_at,
                "received_by": i.received_by,
                "notes": i.notes,
            }
            for i in items
        ],
        "progress": data_collection_service.collection_progress(event_id),
    }


@router.post("/events/{event_id}/checklist")
def add_checklist_item(
    event_id: int,
    body: ChecklistItemIn,
    user: CurrentUser = Depends(get_current_user),
    store: SnapshotStore = Depends(get_store),
):
    require(
        can_update_event_tracking(user, event_id, store.ensure_loaded().staff_assignments),
        "изменение чек-листа",
    )
    row = data_collection_service.add_item(event_id, body.item, body.staff_id, body.notes)
    return {"id": row.id, "item": row.item, "received": row.received}


@router.post("/checklist/{item_id}/toggle")
def toggle_checklist_item(
    item_id: int,
    user: CurrentUser = Depends(get_current_user),
    store: SnapshotStore = Depends(get_store),
):
    item = data_collection_service.get_item(item_id)
    require(
        can_update_event_tracking(user, item.event_id, store.ensure_loaded().staff_assignments),
        "изменение чек-листа",
    )
    row = data_collection_service.toggle_item(item_id, user.name)
    return {"id": row.id, "received": row.received, "received_by": row.received_by}
