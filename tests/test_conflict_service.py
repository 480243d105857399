from datetime import date

from services.conflict_service import (
    RoleCounts,
    conflicts_for_staff,
    count_assigned_roles,
    detect_conflicts,
    find_shortages,
    staff_availability,
)
from services.records import AssignmentRecord, EventRecord, StaffRecord

DAY = date(2025, 6, 10)


def _event(event_id, day=DAY, slot="morning", **required):
    return EventRecord(id=event_id, booking_id=1, event_date=day, time_slot=slot, **required)


def _assign(assignment_id, event_id, staff_id, role="photographer"):
    return AssignmentRecord(id=assignment_id, event_id=event_id, staff_id=staff_id, role=role)


def test_double_booking_same_date_and_slot():
    events = [_event(1), _event(2)]
    assignments = [_assign(1, 1, 7), _assign(2, 2, 7)]

    report = detect_conflicts(events, assignments)

    assert len(report.conflicts) == 1
    conflict = report.conflicts[0]
    assert conflict.staff_id == 7
    assert sorted(conflict.event_ids) == [1, 2]
    assert conflict.date == DAY
    assert conflict.time_slot == "morning"
    assert conflict.type == "double_booking"
    assert conflict.severity == "high"


def test_different_slots_do_not_conflict():
    events = [_event(1, slot="morning"), _event(2, slot="evening")]
    assignments = [_assign(1, 1, 7), _assign(2, 2, 7)]

    assert detect_conflicts(events, assignments).conflicts == []


def test_full_day_is_its_own_slot():
    """fullDay и morning в один день не считаются пересечением."""
    events = [_event(1, slot="fullDay"), _event(2, slot="morning")]
    assignments = [_assign(1, 1, 7), _assign(2, 2, 7)]

    assert detect_conflicts(events, assignments).conflicts == []


def test_shortage_when_assigned_below_required():
    events = [_event(1, photographers_required=2, videographers_required=1)]
    assignments = [_assign(1, 1, 7, "photographer")]

    shortages = find_shortages(events, assignments)

    assert len(shortages) == 1
    assert shortages[0].required == RoleCounts(photographers=2, videographers=1)
    assert shortages[0].assigned == RoleCounts(photographers=1)
    assert shortages[0].severity == "medium"


def test_no_shortage_when_requirements_met():
    events = [_event(1, photographers_required=1)]
    assignments = [_assign(1, 1, 7, "photographer"), _assign(2, 1, 8, "editor")]

    assert find_shortages(events, assignments) == []


def test_roster_role_preferred_over_assignment_role():
    roster = [StaffRecord(id=7, name="Anil", role="videographer")]
    counts = count_assigned_roles([_assign(1, 1, 7, "photographer")], roster)

    assert counts == RoleCounts(videographers=1)


def test_unknown_staff_in_roster_not_counted():
    counts = count_assigned_roles([_assign(1, 1, 99)], [])

    assert counts == RoleCounts()


def test_conflicts_for_staff_filters_by_staff():
    events = [_event(1), _event(2)]
    assignments = [_assign(1, 1, 7), _assign(2, 2, 7), _assign(3, 1, 8)]
    report = detect_conflicts(events, assignments)

    assert len(conflicts_for_staff(report, 7)) == 1
    assert conflicts_for_staff(report, 8) == []


def test_staff_availability_lists_busy_events():
    events = [_event(1), _event(2), _event(3, slot="evening")]
    assignments = [_assign(1, 1, 7), _assign(2, 3, 7)]

    assert staff_availability(7, DAY, "morning", events, assignments) == [1]
    assert staff_availability(7, DAY, "morning", events, assignments, exclude_event_id=1) == []
    assert staff_availability(8, DAY, "morning", events, assignments) == []
