"""Удаление брони вместе со связанными данными.

Планировщик (:func:`plan_deletion`) ничего не меняет: по снимку он считает,
какие записи и на какую сумму будут затронуты, и формирует предупреждения.
Исполнитель (:func:`execute_deletion`) удаляет записи в порядке зависимостей
внутри одной транзакции.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from database.db import db
from database.models import (
    Booking,
    ClientPaymentRecord,
    Event,
    EventDataCollection,
    Expense,
    Payment,
    PaymentTransaction,
    StaffAssignment,
    StaffPaymentRecord,
    Workflow,
)
from services.booking_service import BookingNotFoundError
from services.snapshot import Snapshot
from services.workflow_service import has_workflow_progress
from utils.money import to_decimal

logger = logging.getLogger(__name__)

WARN_EVENTS_FORCED = (
    "Cannot keep events while deleting booking. Events will be automatically deleted."
)
WARN_MADE_WITHOUT_AGREED = (
    "Deleting made payments but keeping agreed payments will show full outstanding balances."
)
WARN_WORKFLOW_PROGRESS = (
    "Events have workflow progress. Deleting will remove all tracking data."
)


class BookingHasPaymentsError(ValueError):
    """Простое удаление невозможно: по мероприятиям брони есть платежи."""


@dataclass
class DeletionOptions:
    client_payments: bool = True
    staff_agreed_payments: bool = True
    staff_made_payments: bool = True
    events: bool = True
    booking: bool = True

    def normalize(self) -> "DeletionOptions":
        """Бронь удаляется всегда, а вместе с ней и мероприятия."""
        return replace(self, booking=True, events=True)


@dataclass
class LedgerSlice:
    count: int = 0
    amount: Decimal = Decimal("0")


@dataclass
class EventsSlice:
    count: int = 0
    has_workflow_progress: bool = False


@dataclass
class PaymentSummary:
    client_payments: LedgerSlice = field(default_factory=LedgerSlice)
    staff_agreed_payments: LedgerSlice = field(default_factory=LedgerSlice)
    staff_made_payments: LedgerSlice = field(default_factory=LedgerSlice)
    events: EventsSlice = field(default_factory=EventsSlice)


@dataclass
class DeletionPlan:
    booking_id: Any
    options: DeletionOptions
    summary: PaymentSummary
    package_amount: Decimal
    outstanding: Decimal
    financial_impact: Decimal
    warnings: list[str]
    requires_selective_dialog: bool
    # таблица → id записей, которые будут удалены
    targets: dict[str, list[Any]] = field(default_factory=dict)


def _slice(records: list[Any]) -> LedgerSlice:
    return LedgerSlice(
        count=len(records),
        amount=sum((to_decimal(r.amount) for r in records), Decimal("0")),
    )


def plan_deletion(
    snapshot: Snapshot, booking_id: Any, options: DeletionOptions | None = None
) -> DeletionPlan:
    """Рассчитать последствия удаления брони без изменения данных."""
    requested = options or DeletionOptions()
    effective = requested.normalize()

    booking = snapshot.booking(booking_id)
    if booking is None:
        raise BookingNotFoundError(f"Бронь id={booking_id} не найдена")
    events = snapshot.events_for_booking(booking_id)
    event_ids = {e.id for e in events}

    client_records = [r for r in snapshot.client_payment_records if r.booking_id == booking_id]
    staff_records = [r for r in snapshot.staff_payment_records if r.event_id in event_ids]
    agreed_records = [r for r in staff_records if r.type == "agreed"]
    made_records = [r for r in staff_records if r.type == "made"]
    event_workflows = snapshot.event_workflows_for_booking(booking_id)

    summary = PaymentSummary(
        client_payments=_slice(client_records),
        staff_agreed_payments=_slice(agreed_records),
        staff_made_payments=_slice(made_records),
        events=EventsSlice(
            count=len(events),
            has_workflow_progress=any(has_workflow_progress(w) for w in event_workflows),
        ),
    )

    package_amount = to_decimal(booking.package_amount)

    impact = Decimal("0")
    if requested.client_payments:
        impact += summary.client_payments.amount
    if requested.staff_made_payments:
        impact += summary.staff_made_payments.amount

    warnings: list[str] = []
    if not requested.events and requested.booking:
        warnings.append(WARN_EVENTS_FORCED)
    if (
        requested.staff_made_payments
        and not requested.staff_agreed_payments
        and summary.staff_agreed_payments.count > 0
    ):
        warnings.append(WARN_MADE_WITHOUT_AGREED)
    if summary.events.has_workflow_progress and effective.events:
        warnings.append(WARN_WORKFLOW_PROGRESS)

    targets: dict[str, list[Any]] = {
        "staff_assignments": [
            a.id for a in snapshot.staff_assignments if a.event_id in event_ids
        ],
        "payments": [p.id for p in snapshot.payments if p.event_id in event_ids],
        "workflows": [w.id for w in snapshot.workflows_for_booking(booking_id)],
        "events": [e.id for e in events],
        "client_payment_records": [r.id for r in client_records]
        if effective.client_payments
        else [],
        "staff_payment_records": [r.id for r in agreed_records if effective.staff_agreed_payments]
        + [r.id for r in made_records if effective.staff_made_payments],
        "bookings": [booking_id],
    }

    return DeletionPlan(
        booking_id=booking_id,
        options=effective,
        summary=summary,
        package_amount=package_amount,
        outstanding=package_amount - summary.client_payments.amount,
        financial_impact=impact,
        warnings=warnings,
        requires_selective_dialog=(
            summary.client_payments.count > 0
            or summary.staff_agreed_payments.count > 0
            or summary.staff_made_payments.count > 0
        ),
        targets=targets,
    )


# ─────────────────────────── Исполнение ────────────────────────────


def _delete_events(event_ids: list[int]) -> dict[str, int]:
    """Удалить мероприятия и всё, что на них ссылается."""
    counts = dict.fromkeys(
        (
            "staff_assignments",
            "payment_transactions",
            "payments",
            "workflows",
            "event_data_collection",
            "events",
        ),
        0,
    )
    if not event_ids:
        return counts
    payment_ids = Payment.select(Payment.id).where(Payment.event.in_(event_ids))
    counts["staff_assignments"] = (
        StaffAssignment.delete().where(StaffAssignment.event.in_(event_ids)).execute()
    )
    counts["payment_transactions"] = (
        PaymentTransaction.delete()
        .where(PaymentTransaction.payment.in_(payment_ids))
        .execute()
    )
    counts["payments"] = Payment.delete().where(Payment.event.in_(event_ids)).execute()
    counts["workflows"] = Workflow.delete().where(Workflow.event.in_(event_ids)).execute()
    counts["event_data_collection"] = (
        EventDataCollection.delete()
        .where(EventDataCollection.event.in_(event_ids))
        .execute()
    )
    # оставшиеся записи выплат сотрудникам отвязываются от мероприятия
    StaffPaymentRecord.update(event=None).where(
        StaffPaymentRecord.event.in_(event_ids)
    ).execute()
    counts["events"] = Event.delete().where(Event.id.in_(event_ids)).execute()
    return counts


def delete_event_cascade(event_id: int) -> dict[str, int]:
    """Удалить одно мероприятие вместе с назначениями, платежами и workflow."""
    with db.atomic():
        counts = _delete_events([event_id])
    logger.info("🗑️ Мероприятие id=%s удалено: %s", event_id, counts)
    return counts


def execute_deletion(booking_id: int, options: DeletionOptions | None = None) -> dict[str, int]:
    """Удалить бронь с выбранными записями; вернуть число удалённых строк по таблицам."""
    effective = (options or DeletionOptions()).normalize()
    booking = Booking.get_or_none(Booking.id == booking_id)
    if booking is None:
        logger.warning("❗ Бронь id=%s не найдена для удаления", booking_id)
        raise BookingNotFoundError(f"Бронь id={booking_id} не найдена")

    event_ids = [e.id for e in Event.select(Event.id).where(Event.booking == booking_id)]
    staff_types: list[str] = []
    if effective.staff_agreed_payments:
        staff_types.append("agreed")
    if effective.staff_made_payments:
        staff_types.append("made")

    try:
        with db.atomic():
            # записи выбираются до удаления мероприятий, которые их отвяжут
            staff_record_ids: list[int] = []
            if staff_types and event_ids:
                staff_record_ids = [
                    r.id
                    for r in StaffPaymentRecord.select(StaffPaymentRecord.id).where(
                        StaffPaymentRecord.event.in_(event_ids)
                        & StaffPaymentRecord.type.in_(staff_types)
                    )
                ]

            counts = _delete_events(event_ids)
            # workflow уровня брони
            counts["workflows"] = counts.get("workflows", 0) + (
                Workflow.delete().where(Workflow.booking == booking_id).execute()
            )

            if effective.client_payments:
                counts["client_payment_records"] = (
                    ClientPaymentRecord.delete()
                    .where(ClientPaymentRecord.booking == booking_id)
                    .execute()
                )
            else:
                counts["client_payment_records"] = 0
                ClientPaymentRecord.update(booking=None).where(
                    ClientPaymentRecord.booking == booking_id
                ).execute()

            counts["staff_payment_records"] = (
                StaffPaymentRecord.delete()
                .where(StaffPaymentRecord.id.in_(staff_record_ids))
                .execute()
                if staff_record_ids
                else 0
            )
            Expense.update(booking=None).where(Expense.booking == booking_id).execute()
            counts["bookings"] = Booking.delete().where(Booking.id == booking_id).execute()
    except Exception:
        logger.exception("❌ Ошибка при удалении брони id=%s", booking_id)
        raise

    logger.info("🗑️ Бронь id=%s удалена: %s", booking_id, counts)
    return counts


def delete_booking(booking_id: int) -> None:
    """Простое удаление брони без учётных записей о платежах."""
    has_payments = (
        Payment.select()
        .join(Event)
        .where(Event.booking == booking_id)
        .exists()
    )
    if has_payments:
        raise BookingHasPaymentsError("Cannot delete booking with existing payments")
    execute_deletion(booking_id)
