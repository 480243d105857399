"""Финансовые сводки по клиентам на основе снимка данных."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Sequence

from dateutil.relativedelta import relativedelta

from services.booking_status import booking_phase
from utils.money import to_decimal
from utils.time_utils import format_date_range, month_bounds, quarter_bounds, year_bounds

AGREED = "agreed"
RECEIVED = "received"

OUTSTANDING_FILTERS = ("past", "future", "all")

# период → сдвиг назад от сегодняшней даты
OVERDUE_PERIODS: dict[str, relativedelta | None] = {
    "3months": relativedelta(months=3),
    "6months": relativedelta(months=6),
    "1year": relativedelta(years=1),
    "all": None,
}

ZERO = Decimal("0")


def _sum(values: Iterable[Any]) -> Decimal:
    return sum((to_decimal(v) for v in values), ZERO)


def _sum_payments(payments: Iterable[Any], status: str | None = None) -> Decimal:
    return _sum(p.amount for p in payments if status is None or p.payment_status == status)


# ─────────────────────────── Остатки ────────────────────────────


def total_package_amount(bookings: Iterable[Any]) -> Decimal:
    return _sum(b.package_amount for b in bookings)


def total_outstanding(bookings: Iterable[Any], payments: Iterable[Any]) -> Decimal:
    """Σ сумм пакетов − Σ полученных оплат по всей студии."""
    return total_package_amount(bookings) - _sum_payments(payments, RECEIVED)


def client_total_owed(client_id: Any, bookings: Iterable[Any]) -> Decimal:
    return total_package_amount(b for b in bookings if b.client_id == client_id)


def client_total_received(client_id: Any, payments: Iterable[Any]) -> Decimal:
    return _sum_payments((p for p in payments if p.client_id == client_id), RECEIVED)


def client_total_agreed(client_id: Any, payments: Iterable[Any]) -> Decimal:
    return _sum_payments((p for p in payments if p.client_id == client_id), AGREED)


def client_outstanding(
    client_id: Any, bookings: Iterable[Any], payments: Iterable[Any]
) -> Decimal:
    return client_total_owed(client_id, bookings) - client_total_received(client_id, payments)


def booking_balance(booking: Any, payments: Iterable[Any]) -> Decimal:
    received = _sum_payments((p for p in payments if p.booking_id == booking.id), RECEIVED)
    return to_decimal(booking.package_amount) - received


def outstanding_level(amount: Any, threshold: Any = Decimal("50000")) -> str:
    """Уровень задолженности: ``settled``, ``moderate`` или ``high``."""
    amount = to_decimal(amount)
    if amount <= 0:
        return "settled"
    if amount <= to_decimal(threshold):
        return "moderate"
    return "high"


def received_this_month(payments: Iterable[Any], today: date | None = None) -> Decimal:
    start, end = month_bounds(today or date.today())
    return _sum_payments(
        (p for p in payments if start <= p.payment_date <= end), RECEIVED
    )


# ─────────────────────────── По броням ────────────────────────────


@dataclass
class BookingAmount:
    booking_id: Any
    booking_name: str
    event_count: int
    first_event_date: date | None
    last_event_date: date | None
    date_range: str | None
    last_event_passed: bool
    agreed: Decimal
    received: Decimal
    due: Decimal


def client_bookings(
    client_id: Any,
    bookings: Sequence[Any],
    events: Sequence[Any],
    payments: Sequence[Any],
    today: date | None = None,
) -> list[BookingAmount]:
    """Согласовано, получено и к оплате по броням клиента, ранние съёмки первыми."""
    today = today or date.today()
    rows: list[BookingAmount] = []
    for booking in (b for b in bookings if b.client_id == client_id):
        booking_events = sorted(
            (e for e in events if e.booking_id == booking.id), key=lambda e: e.event_date
        )
        first = booking_events[0].event_date if booking_events else None
        last = booking_events[-1].event_date if booking_events else None
        booking_payments = [p for p in payments if p.booking_id == booking.id]
        agreed = _sum_payments(booking_payments, AGREED)
        received = _sum_payments(booking_payments, RECEIVED)
        rows.append(
            BookingAmount(
                booking_id=booking.id,
                booking_name=booking.booking_name or f"Booking {booking.id}",
                event_count=len(booking_events),
                first_event_date=first or getattr(booking, "booking_date", None),
                last_event_date=last,
                date_range=format_date_range(first, last),
                last_event_passed=last is not None and last < today,
                agreed=agreed,
                received=received,
                due=agreed - received,
            )
        )
    rows.sort(key=lambda r: r.first_event_date or date.max)
    return rows


@dataclass
class ClientSummary:
    client_id: Any
    client_name: str
    package_amount: Decimal
    total_agreed: Decimal
    total_received: Decimal
    outstanding: Decimal
    first_event_date: date | None
    last_event_date: date | None
    date_range: str | None
    last_event_passed: bool


def client_summary(
    client_id: Any,
    client_name: str,
    bookings: Sequence[Any],
    payments: Sequence[Any],
    events: Sequence[Any] = (),
    *,
    filter_by_event_date: bool = True,
    today: date | None = None,
) -> ClientSummary:
    """Итоги по клиенту.

    С ``filter_by_event_date`` задолженность считается только по броням,
    последняя съёмка которых уже прошла.
    """
    today = today or date.today()
    agreed = client_total_agreed(client_id, payments)
    received = client_total_received(client_id, payments)
    if filter_by_event_date:
        outstanding = _sum(
            row.due
            for row in client_bookings(client_id, bookings, events, payments, today)
            if row.last_event_passed
        )
    else:
        outstanding = agreed - received

    booking_ids = {b.id for b in bookings if b.client_id == client_id}
    dates = [e.event_date for e in events if e.booking_id in booking_ids]
    first = min(dates) if dates else None
    last = max(dates) if dates else None
    return ClientSummary(
        client_id=client_id,
        client_name=client_name,
        package_amount=client_total_owed(client_id, bookings),
        total_agreed=agreed,
        total_received=received,
        outstanding=outstanding,
        first_event_date=first,
        last_event_date=last,
        date_range=format_date_range(first, last),
        last_event_passed=last is not None and last < today,
    )


def top_clients(
    clients: Sequence[Any],
    bookings: Sequence[Any],
    payments: Sequence[Any],
    events: Sequence[Any] = (),
    outstanding_filter: str = "past",
    *,
    limit: int = 10,
    today: date | None = None,
) -> list[ClientSummary]:
    """Клиенты с наибольшей задолженностью."""
    if outstanding_filter not in OUTSTANDING_FILTERS:
        raise ValueError(f"Неизвестный фильтр: {outstanding_filter}")
    client_ids_with_bookings = {b.client_id for b in bookings}
    summaries = [
        client_summary(c.id, c.name, bookings, payments, events, today=today)
        for c in clients
        if c.id in client_ids_with_bookings
    ]
    summaries = [
        s
        for s in summaries
        if (s.total_agreed > 0 or s.total_received > 0) and s.outstanding > 0
    ]
    if outstanding_filter == "past":
        summaries = [s for s in summaries if s.last_event_passed]
    elif outstanding_filter == "future":
        summaries = [s for s in summaries if not s.last_event_passed]
    summaries.sort(key=lambda s: (-s.outstanding, -s.total_agreed, s.client_name))
    return summaries[:limit]


def client_payments(client_id: Any, payments: Iterable[Any]) -> list[Any]:
    """Записи об оплатах клиента, новые первыми."""
    return sorted(
        (p for p in payments if p.client_id == client_id),
        key=lambda p: p.payment_date,
        reverse=True,
    )


# ─────────────────────────── Просрочка ────────────────────────────


@dataclass
class OverdueBooking:
    booking_id: Any
    booking_name: str
    client_name: str
    agreed: Decimal
    received: Decimal
    due: Decimal
    latest_event_date: date
    days_overdue: int


def overdue_bookings(
    bookings: Sequence[Any],
    events: Sequence[Any],
    payments: Sequence[Any],
    clients: Sequence[Any] = (),
    *,
    period: str = "all",
    today: date | None = None,
) -> list[OverdueBooking]:
    """Брони, последняя съёмка которых прошла, а согласованная сумма не оплачена.

    Льготного срока нет: бронь с мероприятием вчера просрочена на один день.
    Без записи ``agreed`` согласованной считается сумма пакета.
    """
    if period not in OVERDUE_PERIODS:
        raise ValueError(f"Неизвестный период: {period}")
    today = today or date.today()
    shift = OVERDUE_PERIODS[period]
    start = today - shift if shift is not None else None
    client_names = {c.id: c.name for c in clients}

    result: list[OverdueBooking] = []
    for booking in bookings:
        dates = [e.event_date for e in events if e.booking_id == booking.id]
        if not dates:
            continue
        latest = max(dates)
        if latest >= today:
            continue
        if start is not None and latest < start:
            continue
        booking_payments = [p for p in payments if p.booking_id == booking.id]
        agreed_entries = [p for p in booking_payments if p.payment_status == AGREED]
        if agreed_entries:
            agreed = _sum(p.amount for p in agreed_entries)
        else:
            agreed = to_decimal(booking.package_amount)
        received = _sum_payments(booking_payments, RECEIVED)
        due = agreed - received
        if due <= 0:
            continue
        client_name = client_names.get(booking.client_id, "Unknown Client")
        result.append(
            OverdueBooking(
                booking_id=booking.id,
                booking_name=booking.booking_name or "Unnamed Booking",
                client_name=client_name,
                agreed=agreed,
                received=received,
                due=due,
                latest_event_date=latest,
                days_overdue=(today - latest).days,
            )
        )
    result.sort(key=lambda o: o.due, reverse=True)
    return result


# ─────────────────────────── Сводка ────────────────────────────

FINANCE_TABS = ("active", "past", "all")

# диапазон → функция границ периода
TIME_RANGES = {
    "this-month": month_bounds,
    "this-quarter": quarter_bounds,
    "this-year": year_bounds,
    "all-time": None,
}


@dataclass
class FinanceSummary:
    agreed: Decimal
    received: Decimal
    expenses: Decimal
    outstanding: Decimal
    profit: Decimal


def finance_summary(
    bookings: Sequence[Any],
    events: Sequence[Any],
    payments: Sequence[Any],
    expenses: Sequence[Any],
    tab: str = "all",
    time_range: str = "all-time",
    today: date | None = None,
) -> FinanceSummary:
    """Согласовано, получено, расходы и прибыль по броням вкладки за период.

    Бронь попадает в период, если туда попадает любое её мероприятие; брони
    без мероприятий не учитываются. Расходы отбираются по собственной дате.
    """
    if tab not in FINANCE_TABS:
        raise ValueError(f"Неизвестная вкладка: {tab}")
    if time_range not in TIME_RANGES:
        raise ValueError(f"Неизвестный период: {time_range}")
    today = today or date.today()
    bounds_fn = TIME_RANGES[time_range]
    bounds = bounds_fn(today) if bounds_fn else None

    selected: set[Any] = set()
    for booking in bookings:
        booking_events = [e for e in events if e.booking_id == booking.id]
        if not booking_events:
            continue
        if tab != "all" and booking_phase(booking_events, today) != tab:
            continue
        if bounds and not any(bounds[0] <= e.event_date <= bounds[1] for e in booking_events):
            continue
        selected.add(booking.id)

    selected_payments = [p for p in payments if p.booking_id in selected]
    agreed = _sum_payments(selected_payments, AGREED)
    received = _sum_payments(selected_payments, RECEIVED)
    spent = _sum(
        e.amount for e in expenses if bounds is None or bounds[0] <= e.date <= bounds[1]
    )
    return FinanceSummary(
        agreed=agreed,
        received=received,
        expenses=spent,
        outstanding=agreed - received,
        profit=received - spent,
    )
