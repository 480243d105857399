from datetime import date, datetime, timedelta
from decimal import Decimal

from database.models import ClientPaymentRecord, Payment, StaffPaymentRecord, Workflow
from services import dashboard_service as dash
from services.records import (
    AssignmentRecord,
    BookingRecord,
    ClientPaymentEntry,
    ClientRecord,
    EventRecord,
    StaffRecord,
)
from services.snapshot import Snapshot, load_snapshot
from services.staff_service import assign_staff


def test_overdue_payments_use_grace_period(make_event, make_staff):
    today = date.today()
    member = make_staff()
    old = make_event(event_date=today - timedelta(days=31))
    recent = make_event(event_date=today - timedelta(days=10))
    Payment.create(event=old, staff=member, role="photographer", agreed_amount=5000, amount_paid=1000, status="partial")
    Payment.create(event=recent, staff=member, role="photographer", agreed_amount=5000)
    Payment.create(event=old, staff=member, role="photographer", agreed_amount=5000, amount_paid=5000, status="paid")

    snapshot = load_snapshot()
    overdue = dash.overdue_payments(snapshot, today)

    assert [p.event_id for p in overdue] == [old.id]
    stats = dash.quick_stats(snapshot, today)
    assert stats.overdue_payments == 1
    assert stats.overdue_amount == Decimal("4000")


def test_quick_stats_counts(make_event, make_staff, make_assignment):
    today = date.today()
    past = make_event(event_date=today - timedelta(days=1))
    make_event(event_date=today)
    make_assignment(past, make_staff())
    Workflow.create(booking=past.booking, event=past, reel_workflow={"reelDelivered": {"completed": False}})

    stats = dash.quick_stats(load_snapshot(), today)

    assert stats.active_bookings == 2
    assert stats.pending_tasks == 1
    assert stats.data_not_received == 1


def test_todays_and_upcoming_events(make_event, make_staff, make_assignment):
    today = date.today()
    event = make_event(event_date=today, time_slot="fullDay")
    member = make_staff()
    make_assignment(event, member)
    for offset in range(1, 9):
        make_event(event_date=today + timedelta(days=offset))

    snapshot = load_snapshot()
    todays = dash.todays_events(snapshot, today)

    assert len(todays) == 1
    assert todays[0].time_slot == "Full Day"
    assert todays[0].client_name == "Ravi Kumar"
    assert todays[0].staff_names == [member.name]

    upcoming = dash.upcoming_week_events(snapshot, today)
    assert len(upcoming) == 5
    assert upcoming[0].event_id == event.id
    assert all(e.event_date <= today + timedelta(days=7) for e in upcoming)


def test_financial_overview(make_booking, make_staff):
    today = date.today()
    booking = make_booking(package_amount="100000")
    member = make_staff()
    ClientPaymentRecord.create(
        client=booking.client, booking=booking, amount=Decimal("40000"), payment_date=today
    )
    StaffPaymentRecord.create(staff=member, type="agreed", amount=Decimal("9000"), payment_date=today)
    StaffPaymentRecord.create(staff=member, type="made", amount=Decimal("4000"), payment_date=today, payment_method="cash")

    overview = dash.financial_overview(load_snapshot(), today)

    assert overview.client_outstanding == Decimal("60000")
    assert overview.received_this_month == Decimal("40000")
    assert overview.staff_pending == Decimal("5000")
    assert overview.staff_paid_this_month == Decimal("4000")


def test_dashboard_conflicts(make_booking, make_event, make_staff, make_assignment):
    today = date.today()
    member = make_staff(role="videographer")
    first = make_event(event_date=today, photographers_required=1)
    second = make_event(event_date=today)
    make_assignment(first, member, role="photographer")
    make_assignment(second, member)

    report = dash.dashboard_conflicts(load_snapshot())

    assert len(report.conflicts) == 1
    assert [s.event_id for s in report.shortages] == [first.id]


def test_unpriced_assignment_is_not_overdue(make_event, make_staff):
    today = date.today()
    event = make_event(event_date=today - timedelta(days=60))
    assign_staff(event.id, make_staff().id)

    snapshot = load_snapshot()

    assert dash.overdue_payments(snapshot, today) == []
    stats = dash.quick_stats(snapshot, today)
    assert stats.overdue_payments == 0
    assert stats.overdue_amount == Decimal("0")


TODAY = date(2025, 6, 15)


def _event(event_id, day):
    return EventRecord(id=event_id, booking_id=1, event_date=day, time_slot="morning", event_name=f"Event {event_id}")


def test_staff_performance_top_and_rising():
    events = [
        _event(1, date(2025, 4, 20)),
        _event(2, date(2025, 5, 10)),
        _event(3, date(2025, 6, 1)),
        _event(4, date(2025, 5, 20)),
        _event(5, date(2025, 6, 5)),
        _event(6, TODAY),
    ]
    assigned = {1: [1, 2, 3, 6], 2: [4, 5]}
    snapshot = Snapshot(
        staff=[
            StaffRecord(id=1, name="Anil", role="photographer"),
            StaffRecord(id=2, name="Bela", role="editor"),
            StaffRecord(id=3, name="Kiran", role="editor"),
        ],
        events=events,
        staff_assignments=[
            AssignmentRecord(id=staff_id * 10 + event_id, event_id=event_id, staff_id=staff_id)
            for staff_id, event_ids in assigned.items()
            for event_id in event_ids
        ],
    )

    result = dash.staff_performance(snapshot, TODAY)

    anil = next(m for m in result.staff if m.staff_id == 1)
    assert (anil.events_total, anil.recent_events, anil.previous_events) == (4, 2, 1)
    assert anil.growth_rate == 100
    assert result.top_performer.staff_id == 1
    assert result.rising_star.staff_id == 2
    assert result.rising_star.growth_rate == 200


def test_staff_performance_without_events():
    snapshot = Snapshot(staff=[StaffRecord(id=1, name="Anil", role="photographer")])

    result = dash.staff_performance(snapshot, TODAY)

    assert result.top_performer is None
    assert result.rising_star is None


def _activity_snapshot():
    return Snapshot(
        clients=[ClientRecord(id=1, name="Asha Rao", contact_number="9876543210")],
        bookings=[
            BookingRecord(id=1, client_id=1, booking_name="Gold", created_at=datetime(2025, 6, 1, 10))
        ],
        client_payment_records=[
            ClientPaymentEntry(
                id=1, client_id=1, booking_id=1, amount=Decimal("25000"),
                payment_date=date(2025, 6, 5), payment_status="received",
            ),
            ClientPaymentEntry(
                id=2, client_id=1, booking_id=1, amount=Decimal("90000"),
                payment_date=date(2025, 6, 9), payment_status="agreed",
            ),
        ],
        events=[_event(i, date(2025, 5, i)) for i in range(1, 8)] + [_event(9, date(2025, 7, 1))],
    )


def test_recent_activity_feed():
    feed = dash.recent_activity(_activity_snapshot(), date(2025, 6, 10))

    assert [a.key for a in feed] == [
        "payment-1",
        "booking-1",
        "event-5",
        "event-4",
        "event-3",
        "event-2",
        "event-1",
    ]
    assert feed[0].message == "Payment received: Asha Rao - ₹25,000"
    assert feed[1].message == "New booking: Asha Rao - Gold"
    assert feed[2].message == "Event completed: Asha Rao - Event 5"


def test_recent_activity_limit_and_hidden_payments():
    snapshot = _activity_snapshot()

    assert len(dash.recent_activity(snapshot, date(2025, 6, 10), limit=3)) == 3
    feed = dash.recent_activity(snapshot, date(2025, 6, 10), include_payments=False)
    assert not any(a.key.startswith("payment") for a in feed)
