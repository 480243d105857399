from fastapi import APIRouter, Depends

from services import payment_service, staff_finance, staff_payment_service
from services.access_control import CurrentUser, accessible_staff_payments
from services.records import TransactionRecord
from services.snapshot import Snapshot, SnapshotStore
from services.staff_service import StaffNotFoundError

from ..db import get_session, get_snapshot, get_store, route_guard
from ..schemas import (
    AgreedAmountIn,
    PaymentRead,
    StaffPaymentIn,
    StaffPaymentRead,
    TransactionIn,
)

router = APIRouter(tags=["staff-payments"], dependencies=[Depends(get_session)])

guard = route_guard("/staff-payments")


def _client_names(snapshot: Snapshot) -> dict:
    names = {}
    for event in snapshot.events:
        client = snapshot.client_for_booking(event.booking_id)
        if client is not None:
            names[event.id] = client.name
    return names


def _staff_detail(snapshot: Snapshot, staff_id: int, records) -> dict:
    member = snapshot.staff_member(staff_id)
    if member is None:
        raise StaffNotFoundError(f"Сотрудник id={staff_id} не найден")
    return {
        "summary": staff_finance.staff_summary(member.id, member.name, records),
        "events": staff_finance.staff_events(
            member.id,
            snapshot.events,
            snapshot.staff_assignments,
            records,
            _client_names(snapshot),
        ),
        "payments": staff_finance.staff_payments(member.id, records),
    }


# ─────────────────────── Учёт agreed / made ───────────────────────


@router.get("/staff-payments")
def overview(user: CurrentUser = Depends(guard), snapshot: Snapshot = Depends(get_snapshot)):
    records = snapshot.staff_payment_records
    return {
        "top_staff": staff_finance.top_staff(snapshot.staff, records),
        "pending_total": staff_finance.staff_pending_total(records),
        "paid_this_month": staff_finance.paid_this_month(records),
        "records": records,
    }


@router.get("/staff-payments/staff/{staff_id}")
def staff_detail(
    staff_id: int,
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    return _staff_detail(snapshot, staff_id, snapshot.staff_payment_records)


@router.get("/my-payments")
def my_payments(
    user: CurrentUser = Depends(route_guard("/my-payments")),
    snapshot: Snapshot = Depends(get_snapshot),
):
    records = accessible_staff_payments(user, snapshot.staff_payment_records)
    if user.staff_id is None:
        return {"payments": records}
    return _staff_detail(snapshot, user.staff_id, records)


@router.post("/staff-payments", response_model=StaffPaymentRead)
def add_staff_payment(
    payment_in: StaffPaymentIn,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    data = payment_in.model_dump()
    record = staff_payment_service.add_staff_payment(
        data.pop("staff_id"),
        data.pop("type"),
        data.pop("amount"),
        data.pop("payment_date"),
        **data,
    )
    store.invalidate("staff_payment_records")
    return record


@router.delete("/staff-payments/{record_id}")
def delete_staff_payment(
    record_id: int,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    if not staff_payment_service.delete_staff_payment(record_id):
        raise LookupError(f"Запись выплаты сотруднику id={record_id} не найдена")
    store.invalidate("staff_payment_records")
    return {"status": "deleted"}


# ─────────────────── Реестр выплат по мероприятиям ───────────────────


@router.get("/payments")
def payment_groups(user: CurrentUser = Depends(guard), snapshot: Snapshot = Depends(get_snapshot)):
    """Строки реестра, сгруппированные по сотрудникам."""
    return payment_service.group_payments_by_staff(
        snapshot.payments,
        [TransactionRecord.from_model(tx) for tx in payment_service.get_transactions()],
        snapshot.events,
        snapshot.staff,
    )


@router.put("/payments/{payment_id}/agreed", response_model=PaymentRead)
def set_agreed(
    payment_id: int,
    body: AgreedAmountIn,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    payment = payment_service.set_agreed_amount(payment_id, body.agreed_amount)
    store.invalidate("payments")
    return payment


@router.get("/payments/{payment_id}/transactions")
def transactions(payment_id: int, user: CurrentUser = Depends(guard)):
    return [
        TransactionRecord.from_model(tx) for tx in payment_service.get_transactions(payment_id)
    ]


@router.post("/payments/{payment_id}/transactions", response_model=PaymentRead)
def add_transaction(
    payment_id: int,
    body: TransactionIn,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    payment_service.record_transaction(payment_id, **body.model_dump())
    store.invalidate("payments")
    return payment_service.get_payment_by_id(payment_id)
