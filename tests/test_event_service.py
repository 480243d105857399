from datetime import date, timedelta

import pytest

from services import event_service as evs
from services.records import EventRecord

TODAY = date(2025, 6, 10)


def _event(event_id, offset):
    return EventRecord(id=event_id, booking_id=1, event_date=TODAY + timedelta(days=offset), time_slot="morning")


def test_add_event_cleans_counts(make_booking):
    booking = make_booking()
    event = evs.add_event(
        booking.id,
        event_name="Wedding",
        event_date=TODAY,
        venue="Hall",
        time_slot="evening",
        photographers_required="2",
        notes="",
        unknown="ignored",
    )

    assert event.photographers_required == 2
    assert event.notes is None
    assert [e.id for e in evs.get_events_by_booking(booking.id)] == [event.id]


def test_add_event_validation(make_booking):
    booking = make_booking()
    with pytest.raises(ValueError):
        evs.add_event(booking.id, event_name="X", event_date=TODAY, venue="Y", time_slot="night")
    with pytest.raises(ValueError):
        evs.add_event(booking.id, event_name="X", event_date=TODAY, venue="  ")
    with pytest.raises(ValueError):
        evs.add_event(booking.id, event_name="X", event_date=TODAY, venue="Y", editors_required=-1)
    with pytest.raises(LookupError):
        evs.add_event(999, event_name="X", event_date=TODAY, venue="Y")


def test_update_and_require_event(make_event):
    event = make_event()
    evs.update_event(event, venue="Beach", drone_operators_required=1)
    event = evs.require_event(event.id)
    assert event.venue == "Beach"
    assert event.drone_operators_required == 1

    with pytest.raises(evs.EventNotFoundError):
        evs.require_event(999)


def test_calendar_helpers():
    events = [_event(3, 3), _event(1, 0), _event(8, 8), _event(7, 7), _event(0, -1)]

    assert [e.id for e in evs.events_on(events, TODAY)] == [1]
    assert [e.id for e in evs.events_between(events, TODAY, TODAY + timedelta(days=7))] == [1, 3, 7]
    assert [e.id for e in evs.upcoming_events(events, TODAY)] == [1, 3, 7]
    assert [e.id for e in evs.upcoming_events(events, TODAY, limit=2)] == [1, 3]
    assert len(evs.upcoming_events(events, TODAY, days=30, limit=None)) == 4
