from datetime import date, timedelta

import pytest

from services import booking_status as bs
from services.records import EventRecord, WorkflowRecord
from services.workflow_steps import CATEGORIES, COLUMNS, TERMINAL_STEPS, empty_step_map

TODAY = date(2025, 6, 10)


def _event(days: int) -> EventRecord:
    return EventRecord(id=days + 100, booking_id=1, event_date=TODAY + timedelta(days=days), time_slot="morning")


def _workflow(done: dict[str, list[str]] | None = None) -> WorkflowRecord:
    data = {COLUMNS[c]: empty_step_map(c) for c in CATEGORIES}
    for category, keys in (done or {}).items():
        for key in keys:
            data[COLUMNS[category]][key] = {"completed": True}
    return WorkflowRecord(id=1, booking_id=1, event_id=None, **data)


def test_no_events():
    assert bs.derive_booking_status([], [_workflow()], TODAY) == bs.NO_EVENTS


def test_upcoming_event_wins_over_delivery():
    wf = _workflow({c: [TERMINAL_STEPS[c]] for c in CATEGORIES})
    assert bs.derive_booking_status([_event(-5), _event(0)], [wf], TODAY) == bs.SHOOT_SCHEDULED


def test_post_production_when_step_done_but_not_delivered():
    wf = _workflow({"still": ["rawDataSent"]})
    assert bs.derive_booking_status([_event(-1)], [wf], TODAY) == bs.POST_PRODUCTION


def test_delivered_when_every_workflow_has_a_delivery():
    wf1 = _workflow({"reel": ["reelDelivered"]})
    wf2 = _workflow({"video": ["videoDelivered"]})
    assert bs.derive_booking_status([_event(-1)], [wf1, wf2], TODAY) == bs.DELIVERED


def test_delivered_vacuously_without_workflows():
    assert bs.derive_booking_status([_event(-1)], [], TODAY) == bs.DELIVERED


def test_in_progress_when_nothing_started():
    assert bs.derive_booking_status([_event(-1)], [_workflow()], TODAY) == bs.IN_PROGRESS


def test_portrait_delivery_does_not_count_for_status():
    wf = _workflow({"portrait": ["portraitDelivered"]})
    assert bs.derive_booking_status([_event(-1)], [wf], TODAY) == bs.IN_PROGRESS


@pytest.mark.parametrize(
    "events, workflows, expected",
    [
        ([_event(3)], [], True),
        ([_event(-3)], [_workflow()], True),
        ([_event(-3)], [_workflow({c: [TERMINAL_STEPS[c]] for c in CATEGORIES})], False),
        ([_event(-3)], [], False),
    ],
)
def test_is_active_booking(events, workflows, expected):
    assert bs.is_active_booking(events, workflows, TODAY) is expected


def test_is_past_booking_requires_workflows():
    assert bs.is_past_booking([_event(-3)], [], TODAY) is False
    wf = _workflow({"portrait": ["portraitDelivered"]})
    assert bs.is_past_booking([_event(-3)], [wf], TODAY) is True
    assert bs.is_past_booking([_event(-3), _event(1)], [wf], TODAY) is False


def test_booking_phase():
    assert bs.booking_phase([], TODAY) == "active"
    assert bs.booking_phase([_event(-2), _event(0)], TODAY) == "active"
    assert bs.booking_phase([_event(-2), _event(-1)], TODAY) == "past"
