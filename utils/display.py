"""Display helpers shared by API responses."""

from __future__ import annotations

from dataclasses import dataclass

from utils.time_utils import format_date

TIME_SLOT_LABELS = {
    "morning": "Morning",
    "afternoon": "Afternoon",
    "evening": "Evening",
    "fullDay": "Full Day",
}

TIME_SLOT_BADGES = {
    "morning": "M",
    "afternoon": "A",
    "evening": "E",
    "fullDay": "W",
}

WEDDING_KEYWORDS = ("wedding", "pre-wedding", "reception", "haldi", "ring", "sangeet")


def format_time_slot(time_slot: str) -> str:
    return TIME_SLOT_LABELS.get(time_slot, time_slot)


def time_slot_badge(time_slot: str) -> str:
    return TIME_SLOT_BADGES.get(time_slot, "M")


def _possessive(name: str) -> str:
    first_name = (name or "").split(" ")[0]
    if first_name.lower().endswith("s"):
        return f"{first_name}'"
    return f"{first_name}'s"


def generate_booking_name(client_name: str, primary_event_type: str, event_count: int) -> str:
    """``Priya's Wedding Package`` for multi-event bookings, else the event type."""
    descriptor = primary_event_type
    if event_count > 1:
        lowered = primary_event_type.lower()
        if any(keyword in lowered for keyword in WEDDING_KEYWORDS):
            descriptor = "Wedding Package"
        else:
            descriptor = "Photography Package"
    return f"{_possessive(client_name)} {descriptor}"


def booking_display_name(booking_name: str | None, client_name: str | None = None) -> str:
    if booking_name and booking_name.strip():
        return booking_name
    if client_name:
        return f"{_possessive(client_name)} Booking"
    return "Unknown Booking"


@dataclass
class EventDisplayInfo:
    event_name: str
    booking_name: str
    client_name: str
    formatted_date: str
    full_display: str


def event_display_info(event, booking=None, client=None) -> EventDisplayInfo:
    event_name = event.event_name or "Untitled Event"
    client_name = client.name if client is not None else "Unknown Client"
    booking_name = (
        booking_display_name(booking.booking_name, client.name if client else None)
        if booking is not None
        else "Unknown Booking"
    )
    formatted = format_date(event.event_date)
    return EventDisplayInfo(
        event_name=event_name,
        booking_name=booking_name,
        client_name=client_name,
        formatted_date=formatted,
        full_display=f"{event_name} ({booking_name}) - {formatted}",
    )
