"""Сводки по выплатам сотрудникам: согласованные и выплаченные записи."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Sequence

from utils.money import to_decimal
from utils.time_utils import month_bounds

AGREED = "agreed"
MADE = "made"

ZERO = Decimal("0")


def _sum_records(records: Iterable[Any]) -> Decimal:
    return sum((to_decimal(r.amount) for r in records), ZERO)


def _of_staff(staff_id: Any, records: Iterable[Any], kind: str) -> list[Any]:
    return [r for r in records if r.staff_id == staff_id and r.type == kind]


def staff_total_agreed(staff_id: Any, records: Iterable[Any]) -> Decimal:
    return _sum_records(_of_staff(staff_id, records, AGREED))


def staff_total_paid(staff_id: Any, records: Iterable[Any]) -> Decimal:
    return _sum_records(_of_staff(staff_id, records, MADE))


def staff_due(staff_id: Any, records: Iterable[Any]) -> Decimal:
    records = list(records)
    return staff_total_agreed(staff_id, records) - staff_total_paid(staff_id, records)


def staff_event_amount(staff_id: Any, event_id: Any, records: Iterable[Any]) -> Decimal:
    """Согласованная сумма сотрудника за одно мероприятие."""
    return _sum_records(
        r for r in _of_staff(staff_id, records, AGREED) if r.event_id == event_id
    )


def staff_pending_total(records: Sequence[Any]) -> Decimal:
    """Сколько студия должна сотрудникам.

    Каждая согласованная запись уменьшается на выплаты того же сотрудника за
    то же мероприятие; складываются только положительные остатки, переплата
    за одно мероприятие не покрывает другое.
    """
    total = ZERO
    for agreed in (r for r in records if r.type == AGREED):
        made = _sum_records(
            r
            for r in records
            if r.type == MADE
            and r.staff_id == agreed.staff_id
            and r.event_id == agreed.event_id
        )
        remainder = to_decimal(agreed.amount) - made
        if remainder > 0:
            total += remainder
    return total


def paid_this_month(records: Iterable[Any], today: date | None = None) -> Decimal:
    start, end = month_bounds(today or date.today())
    return _sum_records(
        r for r in records if r.type == MADE and start <= r.payment_date <= end
    )


@dataclass
class StaffSummary:
    staff_id: Any
    staff_name: str
    total_agreed: Decimal
    total_paid: Decimal
    total_due: Decimal


def staff_summary(staff_id: Any, staff_name: str, records: Sequence[Any]) -> StaffSummary:
    agreed = staff_total_agreed(staff_id, records)
    paid = staff_total_paid(staff_id, records)
    return StaffSummary(
        staff_id=staff_id,
        staff_name=staff_name,
        total_agreed=agreed,
        total_paid=paid,
        total_due=agreed - paid,
    )


def top_staff(
    staff_members: Sequence[Any], records: Sequence[Any], *, limit: int = 10
) -> list[StaffSummary]:
    """Сотрудники с записями о выплатах, по убыванию суммы к выплате."""
    summaries = [staff_summary(s.id, s.name, records) for s in staff_members]
    summaries = [s for s in summaries if s.total_agreed > 0 or s.total_paid > 0]
    summaries.sort(key=lambda s: (-s.total_due, -s.total_agreed, s.staff_name))
    return summaries[:limit]


@dataclass
class StaffEventAmount:
    event_id: Any
    event_name: str
    client_name: str
    event_date: date
    amount: Decimal


def staff_events(
    staff_id: Any,
    events: Sequence[Any],
    staff_assignments: Iterable[Any],
    records: Sequence[Any],
    client_names: dict[Any, str] | None = None,
) -> list[StaffEventAmount]:
    """Мероприятия сотрудника с согласованной суммой по каждому.

    ``client_names``: id мероприятия → имя клиента.
    """
    client_names = client_names or {}
    events_by_id = {e.id: e for e in events}
    seen: list[Any] = []
    for assignment in staff_assignments:
        if assignment.staff_id == staff_id and assignment.event_id not in seen:
            seen.append(assignment.event_id)

    rows = [
        StaffEventAmount(
            event_id=event.id,
            event_name=event.event_name,
            client_name=client_names.get(event.id, "Unknown Client"),
            event_date=event.event_date,
            amount=staff_event_amount(staff_id, event.id, records),
        )
        for event in (events_by_id.get(event_id) for event_id in seen)
        if event is not None
    ]
    rows.sort(key=lambda r: r.event_date)
    return rows


def staff_payments(staff_id: Any, records: Iterable[Any]) -> list[Any]:
    """Записи о выплатах сотрудника, новые первыми."""
    return sorted(
        (r for r in records if r.staff_id == staff_id),
        key=lambda r: r.payment_date,
        reverse=True,
    )
