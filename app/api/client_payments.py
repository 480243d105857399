from datetime import date

from fastapi import APIRouter, Depends

from config import get_settings
from services import client_finance, client_payment_service, client_service
from services.access_control import CurrentUser
from services.snapshot import Snapshot, SnapshotStore

from ..db import get_session, get_snapshot, get_store, route_guard
from ..schemas import ClientPaymentIn, ClientPaymentRead

router = APIRouter(
    prefix="/client-payments", tags=["client-payments"], dependencies=[Depends(get_session)]
)

guard = route_guard("/client-payments")


@router.get("")
def overview(
    tab: str = "all",
    time_range: str = "all-time",
    outstanding_filter: str = "past",
    overdue_period: str = "all",
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    """Финансовая сводка, топ должников и просроченные брони."""
    records = snapshot.client_payment_records
    return {
        "summary": client_finance.finance_summary(
            snapshot.bookings,
            snapshot.events,
            records,
            snapshot.expenses,
            tab=tab,
            time_range=time_range,
        ),
        "top_clients": client_finance.top_clients(
            snapshot.clients,
            snapshot.bookings,
            records,
            snapshot.events,
            outstanding_filter,
        ),
        "overdue": client_finance.overdue_bookings(
            snapshot.bookings,
            snapshot.events,
            records,
            snapshot.clients,
            period=overdue_period,
        ),
        "received_this_month": client_finance.received_this_month(records),
        "records": records,
    }


@router.get("/clients/{client_id}")
def client_detail(
    client_id: int,
    user: CurrentUser = Depends(guard),
    snapshot: Snapshot = Depends(get_snapshot),
):
    client = snapshot.client(client_id)
    if client is None:
        raise client_service.ClientNotFoundError(f"Клиент id={client_id} не найден")
    records = snapshot.client_payment_records
    today = date.today()
    summary = client_finance.client_summary(
        client.id, client.name, snapshot.bookings, records, snapshot.events, today=today
    )
    return {
        "summary": summary,
        "level": client_finance.outstanding_level(
            summary.outstanding, get_settings().outstanding_warn_amount
        ),
        "bookings": client_finance.client_bookings(
            client.id, snapshot.bookings, snapshot.events, records, today
        ),
        "payments": client_finance.client_payments(client.id, records),
    }


@router.post("", response_model=ClientPaymentRead)
def add_payment(
    payment_in: ClientPaymentIn,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    data = payment_in.model_dump()
    record = client_payment_service.add_client_payment(
        data.pop("client_id"),
        data.pop("booking_id"),
        data.pop("amount"),
        data.pop("payment_date"),
        **data,
    )
    store.invalidate("client_payment_records")
    return record


@router.delete("/{record_id}")
def delete_payment(
    record_id: int,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    if not client_payment_service.delete_client_payment(record_id):
        raise LookupError(f"Запись платежа клиента id={record_id} не найдена")
    store.invalidate("client_payment_records")
    return {"status": "deleted"}
