from datetime import date
from decimal import Decimal

from services import staff_finance as sf
from services.records import AssignmentRecord, EventRecord, StaffPaymentEntry, StaffRecord


def _rec(rec_id, staff_id, kind, amount, event_id=None, day=date(2025, 6, 5)):
    return StaffPaymentEntry(
        id=rec_id,
        staff_id=staff_id,
        type=kind,
        amount=Decimal(amount),
        payment_date=day,
        event_id=event_id,
    )


def test_totals_and_due():
    records = [
        _rec(1, 1, "agreed", "10000", event_id=1),
        _rec(2, 1, "agreed", "5000", event_id=2),
        _rec(3, 1, "made", "4000", event_id=1),
        _rec(4, 2, "agreed", "7000", event_id=1),
    ]
    assert sf.staff_total_agreed(1, records) == Decimal("15000")
    assert sf.staff_total_paid(1, records) == Decimal("4000")
    assert sf.staff_due(1, records) == Decimal("11000")
    assert sf.staff_event_amount(1, 1, records) == Decimal("10000")


def test_pending_total_ignores_overpayment_on_other_event():
    records = [
        _rec(1, 1, "agreed", "10000", event_id=1),
        _rec(2, 1, "made", "12000", event_id=1),
        _rec(3, 1, "agreed", "5000", event_id=2),
        _rec(4, 2, "agreed", "3000"),
        _rec(5, 2, "made", "1000"),
    ]
    assert sf.staff_pending_total(records) == Decimal("7000")


def test_paid_this_month():
    records = [
        _rec(1, 1, "made", "100", day=date(2025, 6, 1)),
        _rec(2, 1, "made", "200", day=date(2025, 5, 31)),
        _rec(3, 1, "agreed", "400", day=date(2025, 6, 2)),
    ]
    assert sf.paid_this_month(records, date(2025, 6, 20)) == Decimal("100")


def test_top_staff_skips_inactive_ledgers():
    staff = [
        StaffRecord(id=1, name="Anil", role="photographer"),
        StaffRecord(id=2, name="Bina", role="editor"),
        StaffRecord(id=3, name="Chand", role="editor"),
    ]
    records = [
        _rec(1, 1, "agreed", "1000"),
        _rec(2, 2, "agreed", "5000"),
        _rec(3, 2, "made", "1000"),
    ]
    top = sf.top_staff(staff, records)

    assert [s.staff_name for s in top] == ["Bina", "Anil"]
    assert top[0].total_due == Decimal("4000")


def test_staff_events_sorted_with_amounts():
    events = [
        EventRecord(id=1, booking_id=1, event_date=date(2025, 7, 1), time_slot="morning", event_name="Reception"),
        EventRecord(id=2, booking_id=1, event_date=date(2025, 6, 1), time_slot="evening", event_name="Sangeet"),
    ]
    assignments = [
        AssignmentRecord(id=1, event_id=1, staff_id=1),
        AssignmentRecord(id=2, event_id=2, staff_id=1),
        AssignmentRecord(id=3, event_id=2, staff_id=9),
    ]
    records = [_rec(1, 1, "agreed", "2500", event_id=1)]

    rows = sf.staff_events(1, events, assignments, records, {1: "Ravi"})

    assert [r.event_name for r in rows] == ["Sangeet", "Reception"]
    assert rows[0].client_name == "Unknown Client"
    assert rows[1].client_name == "Ravi"
    assert rows[1].amount == Decimal("2500")


def test_staff_payments_newest_first():
    records = [
        _rec(1, 1, "made", "1", day=date(2025, 1, 1)),
        _rec(2, 1, "made", "1", day=date(2025, 3, 1)),
        _rec(3, 2, "made", "1", day=date(2025, 2, 1)),
    ]
    assert [r.id for r in sf.staff_payments(1, records)] == [2, 1]
