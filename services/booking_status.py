"""Статус брони, вычисляемый по мероприятиям и шагам workflow.

Статус нигде не хранится и пересчитывается из шагов при каждом вызове.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from services.workflow_steps import (
    CATEGORIES,
    DELIVERY_CATEGORIES,
    is_delivered,
    step_map,
)

NO_EVENTS = "No Events"
SHOOT_SCHEDULED = "Shoot Scheduled"
POST_PRODUCTION = "Post-Production"
DELIVERED = "Delivered"
IN_PROGRESS = "In Progress"

STATUSES = (NO_EVENTS, SHOOT_SCHEDULED, POST_PRODUCTION, DELIVERED, IN_PROGRESS)


def has_upcoming_event(events: Sequence[Any], today: date) -> bool:
    return any(e.event_date >= today for e in events)


def _category_in_post_production(workflow: Any, category: str) -> bool:
    if is_delivered(workflow, category):
        return False
    return any(
        (step or {}).get("completed") for step in step_map(workflow, category).values()
    )


def is_in_post_production(workflow: Any) -> bool:
    """Какой-то шаг still/reel/video выполнен, но категория ещё не сдана."""
    return any(_category_in_post_production(workflow, c) for c in DELIVERY_CATEGORIES)


def is_any_delivered(workflow: Any, categories: Sequence[str] = DELIVERY_CATEGORIES) -> bool:
    return any(is_delivered(workflow, c) for c in categories)


def is_fully_delivered(workflow: Any) -> bool:
    return all(is_delivered(workflow, c) for c in CATEGORIES)


def derive_booking_status(
    events: Sequence[Any], workflows: Sequence[Any], today: date | None = None
) -> str:
    """Статус брони; условия проверяются в строгом порядке приоритета."""
    today = today or date.today()
    if not events:
        return NO_EVENTS
    if has_upcoming_event(events, today):
        return SHOOT_SCHEDULED
    if any(is_in_post_production(w) for w in workflows):
        return POST_PRODUCTION
    if all(is_any_delivered(w) for w in workflows):
        return DELIVERED
    return IN_PROGRESS


def is_active_booking(
    events: Sequence[Any], workflows: Sequence[Any], today: date | None = None
) -> bool:
    """Впереди съёмка или какой-то workflow не сдан по всем четырём категориям."""
    today = today or date.today()
    if has_upcoming_event(events, today):
        return True
    return any(not is_fully_delivered(w) for w in workflows)


def is_past_booking(
    events: Sequence[Any], workflows: Sequence[Any], today: date | None = None
) -> bool:
    today = today or date.today()
    all_past = all(e.event_date < today for e in events)
    delivered = bool(workflows) and all(is_any_delivered(w, CATEGORIES) for w in workflows)
    return all_past and delivered


def booking_phase(events: Sequence[Any], today: date | None = None) -> str:
    """``past``, если последнее мероприятие прошло, иначе ``active``."""
    today = today or date.today()
    if not events:
        return "active"
    last = max(e.event_date for e in events)
    return "past" if last < today else "active"
