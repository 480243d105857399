"""Сервис мероприятий (съёмок) внутри брони."""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Sequence

from peewee import ModelSelect

from database.models import Booking, Event, TimeSlot
from services.validators import is_blank

logger = logging.getLogger(__name__)

EVENT_ALLOWED_FIELDS = {
    "event_name",
    "event_date",
    "time_slot",
    "venue",
    "notes",
    "photographers_required",
    "videographers_required",
    "drone_operators_required",
    "editors_required",
}

TIME_SLOTS = {t.value for t in TimeSlot}

_COUNT_FIELDS = (
    "photographers_required",
    "videographers_required",
    "drone_operators_required",
    "editors_required",
)


class EventNotFoundError(LookupError):
    """Мероприятие не найдено."""


def get_event_by_id(event_id: int) -> Event | None:
    return Event.get_or_none(Event.id == event_id)


def get_events_by_booking(booking_id: int) -> ModelSelect:
    return Event.select().where(Event.booking == booking_id).order_by(Event.event_date.asc())


def _clean(kwargs: dict) -> dict:
    clean_data = {k: v for k, v in kwargs.items() if k in EVENT_ALLOWED_FIELDS}
    if "time_slot" in clean_data and clean_data["time_slot"] not in TIME_SLOTS:
        raise ValueError(f"Неизвестный слот: {clean_data['time_slot']}")
    for key in _COUNT_FIELDS:
        if key in clean_data:
            value = int(clean_data[key] or 0)
            if value < 0:
                raise ValueError(f"{key} must be a positive number")
            clean_data[key] = value
    if clean_data.get("notes") == "":
        clean_data["notes"] = None
    return clean_data


def add_event(booking_id: int, **kwargs) -> Event:
    """Создать мероприятие в брони (без workflow)."""
    if not Booking.get_or_none(Booking.id == booking_id):
        raise LookupError(f"Бронь id={booking_id} не найдена")
    clean_data = _clean(kwargs)
    for required in ("event_name", "event_date", "venue"):
        if is_blank(clean_data.get(required)):
            raise ValueError(f"Поле '{required}' обязательно для мероприятия")
    event = Event.create(booking=booking_id, **clean_data)
    logger.info(
        "✅ Добавлено мероприятие id=%s «%s» %s в бронь id=%s",
        event.id,
        event.event_name,
        event.event_date,
        booking_id,
    )
    return event


def update_event(event: Event, **kwargs) -> Event:
    updates = _clean(kwargs)
    if not updates:
        return event
    for k, v in updates.items():
        setattr(event, k, v)
    event.updated_at = datetime.now()
    event.save()
    logger.info("✏️ Мероприятие id=%s обновлено", event.id)
    return event


def require_event(event_id: int) -> Event:
    event = get_event_by_id(event_id)
    if event is None:
        logger.warning("❗ Мероприятие id=%s не найдено", event_id)
        raise EventNotFoundError(f"Мероприятие id={event_id} не найдено")
    return event


# ──────────────────────────── Календарь ─────────────────────────────


def events_on(events: Sequence[Any], day: date) -> list[Any]:
    return [e for e in events if e.event_date == day]


def events_between(events: Sequence[Any], start: date, end: date) -> list[Any]:
    """Мероприятия в интервале включительно, по дате."""
    return sorted(
        (e for e in events if start <= e.event_date <= end), key=lambda e: e.event_date
    )


def upcoming_events(
    events: Sequence[Any], today: date | None = None, days: int = 7, limit: int | None = 5
) -> list[Any]:
    """Мероприятия с сегодняшнего дня на ``days`` дней вперёд включительно."""
    today = today or date.today()
    result = events_between(events, today, today + timedelta(days=days))
    return result[:limit] if limit is not None else result
