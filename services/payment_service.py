"""Сервис управления платежами сотрудникам по мероприятиям."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Sequence

from peewee import ModelSelect

from config import get_settings
from database.db import db
from database.models import Payment, PaymentStatus, PaymentTransaction
from utils.money import format_inr, to_decimal

logger = logging.getLogger(__name__)

MAX_AGREED_AMOUNT = Decimal("9999999.99")

# порядок статусов в сводке по сотрудникам
_STATUS_RANK = {
    PaymentStatus.OVERDUE.value: 0,
    PaymentStatus.PENDING.value: 1,
    PaymentStatus.PARTIAL.value: 2,
    PaymentStatus.PAID.value: 3,
}


class PaymentValidationError(ValueError):
    """Недопустимая сумма платежа."""


class PaymentNotFoundError(LookupError):
    """Платёж не найден."""


# ─────────────────────────── Расчёты ───────────────────────────


def derive_payment_status(agreed_amount: Any, amount_paid: Any) -> str:
    """pending → ничего не выплачено, paid → выплачено полностью, иначе partial."""
    agreed = to_decimal(agreed_amount)
    paid = to_decimal(amount_paid)
    if paid <= 0:
        return PaymentStatus.PENDING.value
    if paid >= agreed:
        return PaymentStatus.PAID.value
    return PaymentStatus.PARTIAL.value


def remaining_balance(agreed_amount: Any, amount_paid: Any) -> Decimal:
    return max(Decimal("0"), to_decimal(agreed_amount) - to_decimal(amount_paid))


def is_payment_overdue(
    payment: Any,
    event: Any | None,
    today: date | None = None,
    grace_days: int | None = None,
) -> bool:
    """Не выплачено полностью и прошло больше ``grace_days`` дней с мероприятия."""
    if event is None:
        return False
    if to_decimal(payment.amount_paid) >= to_decimal(payment.agreed_amount):
        return False
    if grace_days is None:
        grace_days = get_settings().staff_overdue_days
    today = today or date.today()
    return today > event.event_date + timedelta(days=grace_days)


def staff_overall_status(
    payments: Sequence[Any],
    events: Sequence[Any],
    today: date | None = None,
    grace_days: int | None = None,
) -> str:
    events_by_id = {e.id: e for e in events}
    if any(
        is_payment_overdue(p, events_by_id.get(p.event_id), today, grace_days)
        for p in payments
    ):
        return PaymentStatus.OVERDUE.value
    if any(
        0 < to_decimal(p.amount_paid) < to_decimal(p.agreed_amount) for p in payments
    ):
        return PaymentStatus.PARTIAL.value
    if any(
        to_decimal(p.amount_paid) == 0 and to_decimal(p.agreed_amount) > 0
        for p in payments
    ):
        return PaymentStatus.PENDING.value
    return PaymentStatus.PAID.value


@dataclass
class StaffPaymentGroup:
    staff_id: Any
    staff_name: str
    total_agreed: Decimal
    total_paid: Decimal
    total_balance: Decimal
    overall_status: str
    event_count: int
    payments: list[Any] = field(default_factory=list)
    transactions: dict[Any, list[Any]] = field(default_factory=dict)


def group_payments_by_staff(
    payments: Sequence[Any],
    transactions: Iterable[Any],
    events: Sequence[Any],
    staff_members: Sequence[Any],
    today: date | None = None,
) -> list[StaffPaymentGroup]:
    """Сгруппировать платежи по сотрудникам.

    Сортировка: просроченные, ожидающие, частичные, оплаченные; внутри
    статуса по имени. Платежи сотрудников вне справочника пропускаются.
    """
    roster = {s.id: s for s in staff_members}
    by_payment: dict[Any, list[Any]] = defaultdict(list)
    for tx in transactions:
        by_payment[tx.payment_id].append(tx)

    by_staff: dict[Any, list[Any]] = {}
    for payment in payments:
        by_staff.setdefault(payment.staff_id, []).append(payment)

    groups: list[StaffPaymentGroup] = []
    for staff_id, records in by_staff.items():
        member = roster.get(staff_id)
        if member is None:
            continue
        agreed = sum((to_decimal(p.agreed_amount) for p in records), Decimal("0"))
        paid = sum((to_decimal(p.amount_paid) for p in records), Decimal("0"))
        groups.append(
            StaffPaymentGroup(
                staff_id=staff_id,
                staff_name=member.name,
                total_agreed=agreed,
                total_paid=paid,
                total_balance=agreed - paid,
                overall_status=staff_overall_status(records, events, today),
                event_count=sum(1 for p in records if p.event_id is not None),
                payments=records,
                transactions={p.id: by_payment.get(p.id, []) for p in records},
            )
        )
    groups.sort(key=lambda g: (_STATUS_RANK.get(g.overall_status, 3), g.staff_name))
    return groups


def validate_payment_amount(amount: Any, agreed_amount: Any, amount_paid: Any) -> Decimal:
    """Проверить сумму выплаты; вернуть её как ``Decimal``."""
    value = to_decimal(amount)
    if value <= 0:
        raise PaymentValidationError("Amount must be greater than 0")
    remaining = to_decimal(agreed_amount) - to_decimal(amount_paid)
    if value > remaining:
        raise PaymentValidationError(
            f"Amount cannot exceed remaining balance of {format_inr(remaining, decimals=True)}"
        )
    return value


def validate_agreed_amount(amount: Any) -> Decimal:
    value = to_decimal(amount)
    if value <= 0:
        raise PaymentValidationError("Agreed amount must be greater than 0")
    if value > MAX_AGREED_AMOUNT:
        raise PaymentValidationError("Agreed amount cannot exceed ₹99,99,999.99")
    return value


# ───────────────────────── базовые CRUD ─────────────────────────


def get_payment_by_id(payment_id: int) -> Payment | None:
    return Payment.get_or_none(Payment.id == payment_id)


def get_transactions(payment_id: int | None = None) -> ModelSelect:
    query = PaymentTransaction.select().order_by(PaymentTransaction.transaction_date.desc())
    if payment_id is not None:
        query = query.where(PaymentTransaction.payment == payment_id)
    return query


def _require_payment(payment_id: int) -> Payment:
    payment = get_payment_by_id(payment_id)
    if payment is None:
        logger.warning("❗ Платёж id=%s не найден", payment_id)
        raise PaymentNotFoundError(f"Платёж id={payment_id} не найден")
    return payment


def create_payment(
    event_id: int, staff_id: int, role: str, agreed_amount: Any = 0
) -> Payment:
    """Создать строку учёта выплат за назначение на мероприятие."""
    payment = Payment.create(
        event=event_id,
        staff=staff_id,
        role=role,
        agreed_amount=to_decimal(agreed_amount),
        amount_paid=Decimal("0"),
        status=PaymentStatus.PENDING.value,
    )
    logger.info(
        "✅ Добавлен платёж id=%s: сотрудник id=%s, мероприятие id=%s",
        payment.id,
        staff_id,
        event_id,
    )
    return payment


def update_payment(payment: Payment, **kwargs) -> Payment:
    """Обновить поля платежа и пересчитать статус."""
    allowed_fields = {
        "agreed_amount",
        "amount_paid",
        "payment_date",
        "payment_mode",
        "transaction_ref",
        "notes",
        "role",
    }
    updates: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key not in allowed_fields:
            continue
        if key == "agreed_amount":
            value = validate_agreed_amount(value)
        elif key == "amount_paid":
            value = to_decimal(value)
        updates[key] = value

    if not updates:
        return payment

    with db.atomic():
        for key, value in updates.items():
            setattr(payment, key, value)
        payment.status = derive_payment_status(payment.agreed_amount, payment.amount_paid)
        payment.updated_at = datetime.now()
        payment.save()
    logger.info(
        "✏️ Платёж id=%s обновлён: %s",
        payment.id,
        {k: str(v) if isinstance(v, Decimal) else v for k, v in updates.items()},
    )
    return payment


def set_agreed_amount(payment_id: int, amount: Any) -> Payment:
    return update_payment(_require_payment(payment_id), agreed_amount=amount)


def record_transaction(
    payment_id: int,
    amount: Any,
    transaction_date: date | None = None,
    payment_mode: str | None = None,
    transaction_ref: str | None = None,
    notes: str | None = None,
) -> PaymentTransaction:
    """Записать выплату по платежу и увеличить выплаченную сумму."""
    payment = _require_payment(payment_id)
    value = validate_payment_amount(amount, payment.agreed_amount, payment.amount_paid)
    transaction_date = transaction_date or date.today()
    try:
        with db.atomic():
            tx = PaymentTransaction.create(
                payment=payment,
                amount=value,
                transaction_date=transaction_date,
                payment_mode=payment_mode,
                transaction_ref=transaction_ref,
                notes=notes,
            )
            payment.amount_paid = to_decimal(payment.amount_paid) + value
            payment.status = derive_payment_status(payment.agreed_amount, payment.amount_paid)
            payment.payment_date = transaction_date
            payment.payment_mode = payment_mode or payment.payment_mode
            payment.transaction_ref = transaction_ref or payment.transaction_ref
            payment.updated_at = datetime.now()
            payment.save()
    except Exception:
        logger.exception("❌ Ошибка при записи выплаты по платежу id=%s", payment_id)
        raise
    logger.info(
        "💸 Выплата %s по платежу id=%s, статус %s",
        format_inr(value, decimals=True),
        payment.id,
        payment.status,
    )
    return tx


def delete_payment(payment_id: int) -> None:
    payment = get_payment_by_id(payment_id)
    if not payment:
        logger.warning("❗ Платёж с id=%s не найден для удаления", payment_id)
        return
    with db.atomic():
        tx_deleted = (
            PaymentTransaction.delete()
            .where(PaymentTransaction.payment == payment)
            .execute()
        )
        payment.delete_instance()
    logger.info("🗑️ Удалён платёж id=%s; выплат=%s", payment_id, tx_deleted)
