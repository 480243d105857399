"""Сервис работы с расходами студии."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable

from peewee import ModelSelect

from database.db import db
from database.models import Booking, Expense, ExpenseMethod, ExpenseType
from services.validators import FormValidationError, is_blank
from utils.money import format_inr, to_decimal

logger = logging.getLogger(__name__)

EXPENSE_TYPES = {t.value for t in ExpenseType}
EXPENSE_METHODS = {m.value for m in ExpenseMethod}
TIME_FILTERS = ("all", "this_month", "last_month", "this_year")

ALLOWED_FIELDS = {"type", "amount", "description", "date", "payment_method", "booking_id"}


class ExpenseNotFoundError(LookupError):
    """Расход не найден."""


# ─────────────────────────── CRUD ────────────────────────────


def get_all_expenses() -> ModelSelect:
    """Все расходы, новые первыми."""
    return Expense.select().order_by(Expense.date.desc(), Expense.id.desc())


def get_expense_by_id(expense_id: int) -> Expense | None:
    return Expense.get_or_none(Expense.id == expense_id)


def get_expenses_by_booking(booking_id: int) -> ModelSelect:
    return get_all_expenses().where(Expense.booking == booking_id)


def validate_expense(data: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    expense_type = data.get("type") or ExpenseType.GENERAL.value
    if expense_type not in EXPENSE_TYPES:
        errors["type"] = "Type must be general or booking"

    amount = data.get("amount")
    if amount in (None, ""):
        errors["amount"] = "Amount is required"
    elif to_decimal(amount) <= 0:
        errors["amount"] = "Amount must be greater than 0"

    if is_blank(data.get("description")):
        errors["description"] = "Description is required"
    if data.get("date") is None:
        errors["date"] = "Date is required"

    method = data.get("payment_method") or ExpenseMethod.CASH.value
    if method not in EXPENSE_METHODS:
        errors["payment_method"] = f"Unknown payment method: {method}"

    booking_id = data.get("booking_id")
    if expense_type == ExpenseType.BOOKING.value:
        if not booking_id:
            errors["booking_id"] = "Please select a booking"
        elif not Booking.get_or_none(Booking.id == booking_id):
            errors["booking_id"] = "Booking not found"
    return errors


def _clean(data: dict[str, Any]) -> dict[str, Any]:
    clean = {k: v for k, v in data.items() if k in ALLOWED_FIELDS}
    if "amount" in clean:
        clean["amount"] = to_decimal(clean["amount"])
    if "description" in clean and clean["description"]:
        clean["description"] = clean["description"].strip()
    if "booking_id" in clean:
        clean["booking"] = clean.pop("booking_id")
    # общий расход не привязан к брони
    if clean.get("type") == ExpenseType.GENERAL.value:
        clean["booking"] = None
    return clean


# ─────────────────────────── Добавление ───────────────────────────


def add_expense(**kwargs) -> Expense:
    """Создать запись расхода.

    Args:
        **kwargs: ``type`` (general/booking), ``amount``, ``description``,
            ``date``, ``payment_method`` и ``booking_id`` для расходов брони.

    Returns:
        Expense: Созданная запись расхода.
    """
    data = {"type": ExpenseType.GENERAL.value, "payment_method": ExpenseMethod.CASH.value}
    data.update({k: v for k, v in kwargs.items() if v not in ("",)})
    errors = validate_expense(data)
    if errors:
        logger.warning("⚠️ Расход отклонён: %s", sorted(errors))
        raise FormValidationError(errors)

    try:
        with db.atomic():
            expense = Expense.create(**_clean(data))
    except Exception as e:
        logger.error("❌ Ошибка при создании расхода: %s", e)
        raise
    logger.info("✅ Расход id=%s создан: %s", expense.id, format_inr(expense.amount))
    return expense


# ─────────────────────────── Обновление ───────────────────────────


def update_expense(expense: Expense, **kwargs) -> Expense:
    """Обновить расход, сохраняя правила валидации формы."""
    updates = {k: v for k, v in kwargs.items() if k in ALLOWED_FIELDS}
    if not updates:
        return expense

    merged = {
        "type": expense.type,
        "amount": expense.amount,
        "description": expense.description,
        "date": expense.date,
        "payment_method": expense.payment_method,
        "booking_id": expense.booking_id,
    }
    merged.update(updates)
    errors = validate_expense(merged)
    if errors:
        raise FormValidationError(errors)

    clean = _clean(merged)
    for key, value in clean.items():
        setattr(expense, key, value)
    expense.updated_at = datetime.now()
    expense.save()
    logger.info("✏️ Расход id=%s обновлён: %s", expense.id, sorted(updates))
    return expense


def delete_expense(expense_id: int) -> None:
    expense = get_expense_by_id(expense_id)
    if expense is None:
        logger.warning("❗ Расход с id=%s не найден для удаления", expense_id)
        raise ExpenseNotFoundError(f"Расход id={expense_id} не найден")
    expense.delete_instance()
    logger.info("🗑️ Расход id=%s удалён", expense_id)


# ──────────────────────── Фильтры и итоги ───────────────────────


def _time_window(time_filter: str, today: date) -> tuple[date | None, date | None]:
    first_of_month = today.replace(day=1)
    if time_filter == "this_month":
        return first_of_month, None
    if time_filter == "last_month":
        last_day = first_of_month - timedelta(days=1)
        return last_day.replace(day=1), last_day
    if time_filter == "this_year":
        return date(today.year, 1, 1), None
    return None, None


def filter_expenses(
    expenses: Iterable[Any],
    *,
    type_filter: str = "all",
    time_filter: str = "all",
    booking_id: Any = None,
    today: date | None = None,
) -> list[Any]:
    """Отфильтровать расходы по типу, периоду и брони, новые первыми."""
    if time_filter not in TIME_FILTERS:
        raise ValueError(f"Неизвестный период: {time_filter}")
    today = today or date.today()
    start, end = _time_window(time_filter, today)

    result = []
    for expense in expenses:
        if type_filter != "all" and expense.type != type_filter:
            continue
        if start is not None and expense.date < start:
            continue
        if end is not None and expense.date > end:
            continue
        if booking_id is not None and expense.booking_id != booking_id:
            continue
        result.append(expense)
    result.sort(key=lambda e: e.date, reverse=True)
    return result


@dataclass
class ExpenseTotals:
    total: Decimal = Decimal("0")
    general: Decimal = Decimal("0")
    booking: Decimal = Decimal("0")
    by_method: dict[str, Decimal] = field(default_factory=dict)
    count: int = 0


def summarize_expenses(expenses: Iterable[Any]) -> ExpenseTotals:
    totals = ExpenseTotals()
    for expense in expenses:
        amount = to_decimal(expense.amount)
        totals.total += amount
        totals.count += 1
        if expense.type == ExpenseType.BOOKING.value:
            totals.booking += amount
        else:
            totals.general += amount
        method = expense.payment_method or ExpenseMethod.CASH.value
        totals.by_method[method] = totals.by_method.get(method, Decimal("0")) + amount
    return totals


def expense_totals(start: date | None = None, end: date | None = None) -> ExpenseTotals:
    """Итоги расходов за период (границы включительно) по типу и способу оплаты."""
    query = Expense.select()
    if start is not None:
        query = query.where(Expense.date >= start)
    if end is not None:
        query = query.where(Expense.date <= end)
    return summarize_expenses(query)
