"""Функции для получения сводной информации на дашборд."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from dateutil.relativedelta import relativedelta

from database.models import ClientPaymentStatus
from services import client_finance, staff_finance
from services.booking_status import is_active_booking
from services.conflict_service import ConflictReport, detect_conflicts
from services.event_service import events_on, upcoming_events
from services.payment_service import is_payment_overdue
from services.snapshot import Snapshot
from services.staff_service import data_not_received
from services.workflow_service import pending_step_count
from utils.display import format_time_slot
from utils.money import format_inr, to_decimal
from utils.time_utils import month_bounds


@dataclass
class QuickStats:
    active_bookings: int
    events_this_month: int
    pending_tasks: int
    overdue_payments: int
    overdue_amount: Decimal
    data_not_received: int


def overdue_payments(snapshot: Snapshot, today: date | None = None) -> list[Any]:
    """Строки реестра выплат, недоплаченные дольше льготного срока после мероприятия."""
    today = today or date.today()
    return [
        payment
        for payment in snapshot.payments
        if is_payment_overdue(payment, snapshot.event(payment.event_id), today)
    ]


def quick_stats(snapshot: Snapshot, today: date | None = None) -> QuickStats:
    """Счётчики верхней панели дашборда."""
    today = today or date.today()
    active = sum(
        1
        for b in snapshot.bookings
        if is_active_booking(
            snapshot.events_for_booking(b.id),
            snapshot.event_workflows_for_booking(b.id),
            today,
        )
    )
    start, end = month_bounds(today)
    overdue = overdue_payments(snapshot, today)
    return QuickStats(
        active_bookings=active,
        events_this_month=sum(1 for e in snapshot.events if start <= e.event_date <= end),
        pending_tasks=pending_step_count(snapshot.workflows),
        overdue_payments=len(overdue),
        overdue_amount=sum(
            (to_decimal(p.agreed_amount) - to_decimal(p.amount_paid) for p in overdue),
            Decimal("0"),
        ),
        data_not_received=len(data_not_received(snapshot, today)),
    )


@dataclass
class DashboardEvent:
    event_id: Any
    booking_id: Any
    event_name: str
    event_date: date
    time_slot: str
    venue: str
    client_name: str | None
    staff_names: list[str] = field(default_factory=list)


def _dashboard_event(snapshot: Snapshot, event: Any) -> DashboardEvent:
    client = snapshot.client_for_booking(event.booking_id)
    names = []
    for assignment in snapshot.assignments_for_event(event.id):
        member = snapshot.staff_member(assignment.staff_id)
        if member is not None:
            names.append(member.name)
    return DashboardEvent(
        event_id=event.id,
        booking_id=event.booking_id,
        event_name=event.event_name,
        event_date=event.event_date,
        time_slot=format_time_slot(event.time_slot),
        venue=event.venue,
        client_name=client.name if client else None,
        staff_names=names,
    )


def todays_events(snapshot: Snapshot, today: date | None = None) -> list[DashboardEvent]:
    today = today or date.today()
    return [_dashboard_event(snapshot, e) for e in events_on(snapshot.events, today)]


def upcoming_week_events(
    snapshot: Snapshot, today: date | None = None, limit: int = 5
) -> list[DashboardEvent]:
    """Ближайшие мероприятия на неделю вперёд, включая сегодня."""
    return [
        _dashboard_event(snapshot, e)
        for e in upcoming_events(snapshot.events, today, days=7, limit=limit)
    ]


@dataclass
class FinancialOverview:
    client_outstanding: Decimal
    received_this_month: Decimal
    staff_pending: Decimal
    staff_paid_this_month: Decimal


def financial_overview(snapshot: Snapshot, today: date | None = None) -> FinancialOverview:
    today = today or date.today()
    return FinancialOverview(
        client_outstanding=client_finance.total_outstanding(
            snapshot.bookings, snapshot.client_payment_records
        ),
        received_this_month=client_finance.received_this_month(
            snapshot.client_payment_records, today
        ),
        staff_pending=staff_finance.staff_pending_total(snapshot.staff_payment_records),
        staff_paid_this_month=staff_finance.paid_this_month(
            snapshot.staff_payment_records, today
        ),
    )


def dashboard_conflicts(snapshot: Snapshot) -> ConflictReport:
    return detect_conflicts(snapshot.events, snapshot.staff_assignments, snapshot.staff)


# ──────────────────────────── Сотрудники ─────────────────────────────


@dataclass
class StaffMetrics:
    staff_id: Any
    name: str
    events_total: int
    recent_events: int
    previous_events: int
    growth_rate: float


@dataclass
class StaffPerformance:
    staff: list[StaffMetrics]
    top_performer: StaffMetrics | None = None
    rising_star: StaffMetrics | None = None


def staff_performance(snapshot: Snapshot, today: date | None = None) -> StaffPerformance:
    """Активность сотрудников: прошлый месяц по сегодняшний день против месяца до него.

    Лидер определяется по общему числу мероприятий, «восходящая звезда» по
    темпу роста. Лидера нет, пока ни у кого нет мероприятий, звезды нет без
    мероприятий за последний период.
    """
    today = today or date.today()
    last_month = today.replace(day=1) - relativedelta(months=1)
    two_months_ago = today.replace(day=1) - relativedelta(months=2)

    metrics: list[StaffMetrics] = []
    for member in snapshot.staff:
        event_ids = {a.event_id for a in snapshot.staff_assignments if a.staff_id == member.id}
        dates = [e.event_date for e in snapshot.events if e.id in event_ids]
        recent = sum(1 for d in dates if last_month <= d < today)
        previous = sum(1 for d in dates if two_months_ago <= d < last_month)
        if previous:
            growth = (recent - previous) / previous * 100
        else:
            growth = float(recent * 100)
        metrics.append(
            StaffMetrics(
                staff_id=member.id,
                name=member.name,
                events_total=len(dates),
                recent_events=recent,
                previous_events=previous,
                growth_rate=growth,
            )
        )

    metrics.sort(key=lambda m: m.events_total, reverse=True)
    top = metrics[0] if metrics and metrics[0].events_total else None
    by_growth = sorted(metrics, key=lambda m: m.growth_rate, reverse=True)
    rising = by_growth[0] if by_growth and by_growth[0].recent_events else None
    return StaffPerformance(staff=metrics, top_performer=top, rising_star=rising)


# ──────────────────────────── Лента событий ─────────────────────────────


@dataclass
class Activity:
    key: str
    icon: str
    message: str
    timestamp: datetime
    link: str


def _as_datetime(value: date | datetime | None) -> datetime:
    if value is None:
        return datetime.min
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def recent_activity(
    snapshot: Snapshot,
    today: date | None = None,
    limit: int = 10,
    include_payments: bool = True,
) -> list[Activity]:
    """Новые брони, полученные оплаты и прошедшие мероприятия, новые первыми."""
    today = today or date.today()
    items: list[Activity] = []
    for booking in snapshot.bookings:
        client = snapshot.client(booking.client_id)
        items.append(
            Activity(
                key=f"booking-{booking.id}",
                icon="📸",
                message=(
                    f"New booking: {client.name if client else 'Unknown'}"
                    f" - {booking.booking_name or 'Unnamed'}"
                ),
                timestamp=_as_datetime(booking.created_at),
                link="/bookings",
            )
        )
    payments = snapshot.client_payment_records if include_payments else []
    for record in payments:
        if record.payment_status != ClientPaymentStatus.RECEIVED.value:
            continue
        client = snapshot.client(record.client_id)
        items.append(
            Activity(
                key=f"payment-{record.id}",
                icon="✅",
                message=(
                    f"Payment received: {client.name if client else 'Unknown'}"
                    f" - {format_inr(record.amount)}"
                ),
                timestamp=_as_datetime(record.payment_date),
                link="/client-payments",
            )
        )
    # не больше пяти прошедших мероприятий в порядке хранения
    past_events = [e for e in snapshot.events if e.event_date < today][:5]
    for event in past_events:
        client = snapshot.client_for_booking(event.booking_id)
        items.append(
            Activity(
                key=f"event-{event.id}",
                icon="📋",
                message=(
                    f"Event completed: {client.name if client else 'Unknown'}"
                    f" - {event.event_name}"
                ),
                timestamp=_as_datetime(event.event_date),
                link="/tracking",
            )
        )
    items.sort(key=lambda a: a.timestamp, reverse=True)
    return items[:limit]
