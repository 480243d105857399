"""Учёт договорённостей и поступлений от клиентов (agreed / received)."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from peewee import ModelSelect

from database.models import (
    Booking,
    ClientPaymentRecord,
    ClientPaymentStatus,
    ExpenseMethod,
)
from services.validators import FormValidationError, check_payment_date
from utils.money import format_inr, to_decimal

logger = logging.getLogger(__name__)

STATUSES = {s.value for s in ClientPaymentStatus}
METHODS = {m.value for m in ExpenseMethod}


def get_client_payment_records(
    client_id: int | None = None, booking_id: int | None = None
) -> ModelSelect:
    query = ClientPaymentRecord.select().order_by(ClientPaymentRecord.payment_date.desc())
    if client_id is not None:
        query = query.where(ClientPaymentRecord.client == client_id)
    if booking_id is not None:
        query = query.where(ClientPaymentRecord.booking == booking_id)
    return query


def get_client_payment_record(record_id: int) -> ClientPaymentRecord | None:
    return ClientPaymentRecord.get_or_none(ClientPaymentRecord.id == record_id)


def booking_received_balance(booking: Booking) -> Decimal:
    """Остаток по пакету брони с учётом полученных платежей."""
    received = sum(
        (
            to_decimal(r.amount)
            for r in booking.client_payment_records
            if r.payment_status == ClientPaymentStatus.RECEIVED.value
        ),
        Decimal("0"),
    )
    return to_decimal(booking.package_amount) - received


def add_client_payment(
    client_id: int,
    booking_id: int,
    amount: Any,
    payment_date: date | None,
    *,
    payment_status: str = ClientPaymentStatus.RECEIVED.value,
    payment_method: str | None = ExpenseMethod.CASH.value,
    transaction_ref: str | None = None,
    remarks: str | None = None,
    today: date | None = None,
) -> ClientPaymentRecord:
    """Добавить запись клиента; поступление не может превышать остаток по брони."""
    errors: dict[str, str] = {}
    booking = Booking.get_or_none(Booking.id == booking_id) if booking_id else None
    if not client_id:
        errors["client_id"] = "Please select a client"
    if booking is None:
        errors["booking_id"] = "Please select a booking"
    elif booking.client_id != client_id:
        errors["booking_id"] = "Booking does not belong to the selected client"
    if payment_status not in STATUSES:
        errors["payment_status"] = "Status must be agreed or received"

    value = to_decimal(amount) if amount not in (None, "") else Decimal("0")
    if value <= 0:
        errors["amount"] = "Amount must be greater than 0"
    check_payment_date(payment_date, errors, today)

    received = payment_status == ClientPaymentStatus.RECEIVED.value
    if received:
        if not payment_method:
            errors["payment_method"] = "Payment method is required"
        elif payment_method not in METHODS:
            errors["payment_method"] = f"Unknown payment method: {payment_method}"
        if booking is not None and "amount" not in errors:
            balance = booking_received_balance(booking)
            if balance > 0 and value > balance:
                errors["amount"] = (
                    f"Amount exceeds remaining balance ({format_inr(balance)})"
                )

    if errors:
        logger.warning("⚠️ Запись платежа клиента отклонена: %s", sorted(errors))
        raise FormValidationError(errors)

    record = ClientPaymentRecord.create(
        client=client_id,
        booking=booking_id,
        amount=value,
        payment_date=payment_date,
        payment_status=payment_status,
        payment_method=(payment_method if received else None) or ExpenseMethod.CASH.value,
        transaction_ref=transaction_ref or None,
        remarks=remarks or None,
    )
    logger.info(
        "✅ Клиент id=%s, бронь id=%s: запись %s на %s (id=%s)",
        client_id,
        booking_id,
        payment_status,
        format_inr(value),
        record.id,
    )
    return record


def update_client_payment(record: ClientPaymentRecord, **kwargs) -> ClientPaymentRecord:
    allowed = {"amount", "payment_date", "payment_method", "transaction_ref", "remarks"}
    updates = {k: v for k, v in kwargs.items() if k in allowed}
    if not updates:
        return record
    errors: dict[str, str] = {}
    if "amount" in updates:
        updates["amount"] = to_decimal(updates["amount"])
        if updates["amount"] <= 0:
            errors["amount"] = "Amount must be greater than 0"
    if "payment_date" in updates:
        check_payment_date(updates["payment_date"], errors)
    if errors:
        raise FormValidationError(errors)
    for k, v in updates.items():
        setattr(record, k, v)
    record.updated_at = datetime.now()
    record.save()
    logger.info("✏️ Запись платежа клиента id=%s обновлена", record.id)
    return record


def delete_client_payment(record_id: int) -> bool:
    record = get_client_payment_record(record_id)
    if record is None:
        logger.warning("❗ Запись платежа клиента id=%s не найдена", record_id)
        return False
    record.delete_instance()
    logger.info("🗑️ Удалена запись платежа клиента id=%s", record_id)
    return True
