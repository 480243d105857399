"""Учёт договорённостей и выплат сотрудникам (agreed / made)."""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from peewee import ModelSelect

from database.models import Event, Staff, StaffPaymentRecord, StaffPaymentType
from services.validators import FormValidationError, check_payment_date
from utils.money import format_inr, to_decimal

logger = logging.getLogger(__name__)

MAX_STAFF_PAYMENT = Decimal("999999")

TYPES = {t.value for t in StaffPaymentType}


def get_staff_payment_records(staff_id: int | None = None) -> ModelSelect:
    """Записи учёта, новые первыми."""
    query = StaffPaymentRecord.select().order_by(StaffPaymentRecord.payment_date.desc())
    if staff_id is not None:
        query = query.where(StaffPaymentRecord.staff == staff_id)
    return query


def get_staff_payment_record(record_id: int) -> StaffPaymentRecord | None:
    return StaffPaymentRecord.get_or_none(StaffPaymentRecord.id == record_id)


def validate_staff_payment(
    staff_id: Any,
    type: str,
    amount: Any,
    payment_date: date | None,
    payment_method: str | None = None,
    today: date | None = None,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not staff_id or not Staff.get_or_none(Staff.id == staff_id):
        errors["staff_id"] = "Please select a staff member"
    if type not in TYPES:
        errors["type"] = "Type must be agreed or made"
    try:
        value = to_decimal(amount) if amount not in (None, "") else Decimal("0")
    except InvalidOperation:
        value = Decimal("0")
    if value <= 0 or value > MAX_STAFF_PAYMENT:
        errors["amount"] = "Amount must be between ₹1 and ₹9,99,999"
    check_payment_date(payment_date, errors, today)
    if type == StaffPaymentType.MADE.value and not payment_method:
        errors["payment_method"] = "Payment method is required"
    return errors


def add_staff_payment(
    staff_id: int,
    type: str,
    amount: Any,
    payment_date: date | None,
    *,
    event_id: int | None = None,
    payment_method: str | None = None,
    remarks: str | None = None,
    today: date | None = None,
) -> StaffPaymentRecord:
    """Добавить запись о договорённости или выплате сотруднику."""
    errors = validate_staff_payment(staff_id, type, amount, payment_date, payment_method, today)
    if event_id is not None and not Event.get_or_none(Event.id == event_id):
        errors["event_id"] = "Event not found"
    if errors:
        logger.warning("⚠️ Запись выплаты сотруднику отклонена: %s", sorted(errors))
        raise FormValidationError(errors)

    record = StaffPaymentRecord.create(
        staff=staff_id,
        type=type,
        amount=to_decimal(amount),
        payment_date=payment_date,
        event=event_id,
        payment_method=payment_method or None,
        remarks=remarks or None,
    )
    logger.info(
        "✅ Сотрудник id=%s: запись %s на %s (id=%s)",
        staff_id,
        type,
        format_inr(record.amount),
        record.id,
    )
    return record


def update_staff_payment(record: StaffPaymentRecord, **kwargs) -> StaffPaymentRecord:
    allowed = {"amount", "payment_date", "payment_method", "remarks", "event_id", "type"}
    updates = {k: v for k, v in kwargs.items() if k in allowed}
    if not updates:
        return record
    merged = {
        "type": updates.get("type", record.type),
        "amount": updates.get("amount", record.amount),
        "payment_date": updates.get("payment_date", record.payment_date),
        "payment_method": updates.get("payment_method", record.payment_method),
    }
    errors = validate_staff_payment(record.staff_id, **merged)
    if errors:
        raise FormValidationError(errors)
    if "event_id" in updates:
        updates["event"] = updates.pop("event_id")
    if "amount" in updates:
        updates["amount"] = to_decimal(updates["amount"])
    for k, v in updates.items():
        setattr(record, k, v)
    record.updated_at = datetime.now()
    record.save()
    logger.info("✏️ Запись выплаты сотруднику id=%s обновлена", record.id)
    return record


def delete_staff_payment(record_id: int) -> bool:
    record = get_staff_payment_record(record_id)
    if record is None:
        logger.warning("❗ Запись выплаты сотруднику id=%s не найдена", record_id)
        return False
    record.delete_instance()
    logger.info("🗑️ Удалена запись выплаты сотруднику id=%s", record_id)
    return True
