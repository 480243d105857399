from datetime import date
from decimal import Decimal

import pytest

from services import access_control as ac
from services.records import AssignmentRecord, BookingRecord, EventRecord, StaffPaymentEntry

ADMIN = ac.CurrentUser(role="admin", user_id=1)
MANAGER = ac.CurrentUser(role="manager", staff_id=5, user_id=2)
STAFF = ac.CurrentUser(role="staff", staff_id=7, user_id=3)
ORPHAN = ac.CurrentUser(role="staff", staff_id=None, user_id=4)

BOOKINGS = [BookingRecord(id=1, client_id=1), BookingRecord(id=2, client_id=1)]
EVENTS = [
    EventRecord(id=10, booking_id=1, event_date=date(2025, 6, 1), time_slot="morning"),
    EventRecord(id=11, booking_id=1, event_date=date(2025, 6, 2), time_slot="morning"),
    EventRecord(id=20, booking_id=2, event_date=date(2025, 6, 3), time_slot="morning"),
]
ASSIGNMENTS = [AssignmentRecord(id=1, event_id=10, staff_id=7)]


def test_privileged_see_everything():
    assert ac.accessible_bookings(ADMIN, BOOKINGS, EVENTS, ASSIGNMENTS) == BOOKINGS
    assert ac.accessible_events(MANAGER, EVENTS, ASSIGNMENTS) == EVENTS


def test_staff_sees_bookings_where_assigned():
    assert [b.id for b in ac.accessible_bookings(STAFF, BOOKINGS, EVENTS, ASSIGNMENTS)] == [1]
    assert [e.id for e in ac.accessible_events(STAFF, EVENTS, ASSIGNMENTS)] == [10, 11]


def test_staff_without_profile_sees_nothing():
    assert ac.accessible_bookings(ORPHAN, BOOKINGS, EVENTS, ASSIGNMENTS) == []
    assert ac.accessible_events(None, EVENTS, ASSIGNMENTS) == []


def test_staff_payment_visibility():
    records = [
        StaffPaymentEntry(id=1, staff_id=7, type="made", amount=Decimal("1"), payment_date=date(2025, 1, 1)),
        StaffPaymentEntry(id=2, staff_id=5, type="made", amount=Decimal("1"), payment_date=date(2025, 1, 1)),
    ]
    assert len(ac.accessible_staff_payments(ADMIN, records)) == 2
    assert [r.id for r in ac.accessible_staff_payments(MANAGER, records)] == [2]
    assert [r.id for r in ac.accessible_staff_payments(STAFF, records)] == [1]
    assert ac.accessible_staff_payments(ORPHAN, records) == []


def test_capabilities():
    assert ac.can_manage_payments(ADMIN) and not ac.can_manage_payments(MANAGER)
    assert ac.can_manage_bookings(MANAGER) and not ac.can_manage_bookings(STAFF)
    assert ac.can_delete_bookings(ADMIN) and not ac.can_delete_bookings(MANAGER)
    assert ac.can_view_all_staff(MANAGER) and not ac.can_view_all_staff(STAFF)
    assert ac.can_manage_users(ADMIN) and not ac.can_manage_users(None)


def test_event_tracking_permission():
    assert ac.can_update_event_tracking(MANAGER, 20, ASSIGNMENTS) is True
    assert ac.can_update_event_tracking(STAFF, 10, ASSIGNMENTS) is True
    assert ac.can_update_event_tracking(STAFF, 11, ASSIGNMENTS) is False
    assert ac.can_update_event_tracking(None, 10, ASSIGNMENTS) is False


@pytest.mark.parametrize(
    "user, route, allowed",
    [
        (STAFF, "/dashboard", True),
        (STAFF, "/bookings", False),
        (STAFF, "/my-bookings", True),
        (MANAGER, "/my-bookings", False),
        (MANAGER, "/staff", True),
        (MANAGER, "/expenses", False),
        (ADMIN, "/client-payments", True),
        (MANAGER, "/my-payments", True),
        (ADMIN, "/unknown", False),
        (None, "/dashboard", False),
    ],
)
def test_route_access(user, route, allowed):
    assert ac.can_access_route(user, route) is allowed


def test_require():
    ac.require(True, "ok")
    with pytest.raises(ac.AccessDeniedError, match="удаление"):
        ac.require(False, "удаление")
