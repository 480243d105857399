"""Сервис броней: сохранение многособытийной формы, поиск и фильтры."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Sequence

from peewee import DatabaseError

from database.db import db
from database.models import Booking, Client, Event
from services import client_service, event_service, staff_service
from services.booking_status import derive_booking_status, is_active_booking, is_past_booking
from services.snapshot import Snapshot
from services.validators import FormValidationError, is_blank, is_valid_email, is_valid_phone
from services.workflow_service import (
    booking_progress,
    create_workflow,
    progress_percentage,
    workflow_progress,
)
from utils.display import booking_display_name, generate_booking_name
from utils.money import to_decimal
from utils.time_utils import format_date_range

logger = logging.getLogger(__name__)

BOOKING_ALLOWED_FIELDS = {"booking_name", "booking_date", "package_amount", "notes"}

LIST_FILTERS = ("active", "past", "all")


class BookingNotFoundError(LookupError):
    """Бронь не найдена."""


@dataclass
class EventForm:
    event_name: str = ""
    event_date: date | None = None
    time_slot: str = "morning"
    venue: str = ""
    notes: str | None = None
    photographers_required: int = 0
    videographers_required: int = 0
    drone_operators_required: int = 0
    editors_required: int = 0
    assigned_staff: list[int] = field(default_factory=list)
    id: int | None = None

    def event_fields(self) -> dict[str, Any]:
        return {
            "event_name": self.event_name.strip(),
            "event_date": self.event_date,
            "time_slot": self.time_slot,
            "venue": self.venue.strip(),
            "notes": self.notes or None,
            "photographers_required": self.photographers_required,
            "videographers_required": self.videographers_required,
            "drone_operators_required": self.drone_operators_required,
            "editors_required": self.editors_required,
        }


@dataclass
class BookingForm:
    """Данные формы брони: клиент и список мероприятий."""

    client_mode: str = "new"  # existing | new
    client_id: int | None = None
    client_name: str = ""
    contact_number: str = ""
    email: str | None = None
    alternate_contact: str | None = None
    client_notes: str | None = None
    booking_name: str | None = None
    package_amount: Decimal | None = None
    events: list[EventForm] = field(default_factory=list)


def validate_booking_form(
    form: BookingForm, *, is_new: bool = True, today: date | None = None
) -> dict[str, str]:
    """Вернуть словарь ошибок формы; пустой словарь означает корректную форму."""
    today = today or date.today()
    errors: dict[str, str] = {}

    if is_new and form.client_mode == "existing":
        if not form.client_id:
            errors["selected_client"] = "Please select a client"
    else:
        name = (form.client_name or "").strip()
        if not name:
            errors["client_name"] = "Client name is required"
        elif len(name) < 2:
            errors["client_name"] = "Client name must be at least 2 characters"

        if is_blank(form.contact_number):
            errors["contact_number"] = "Contact number is required"
        elif not is_valid_phone(form.contact_number):
            errors["contact_number"] = "Invalid phone number (must be 10 digits)"

        if form.email and not is_valid_email(form.email):
            errors["email"] = "Invalid email format"
        if form.alternate_contact and not is_valid_phone(form.alternate_contact):
            errors["alternate_contact"] = "Invalid phone number"

    if not form.events:
        errors["events"] = "At least one event is required"

    for idx, event in enumerate(form.events):
        if is_blank(event.event_name):
            errors[f"event_{idx}_name"] = "Event name is required"
        if event.event_date is None:
            errors[f"event_{idx}_date"] = "Event date is required"
        elif is_new and event.event_date < today:
            errors[f"event_{idx}_date"] = "Event date cannot be in the past"
        if is_blank(event.venue):
            errors[f"event_{idx}_venue"] = "Venue is required"

    if form.package_amount is not None and to_decimal(form.package_amount) < 0:
        errors["package_amount"] = "Package amount must be a positive number"
    return errors


def generate_booking_reference(year: int | None = None) -> str:
    """Следующий номер брони вида ``BK-YYYY-NNN`` в пределах года."""
    year = year or date.today().year
    start = datetime(year, 1, 1)
    end = datetime(year + 1, 1, 1)
    count = (
        Booking.select()
        .where((Booking.created_at >= start) & (Booking.created_at < end))
        .count()
    )
    return f"BK-{year}-{count + 1:03d}"


# ──────────────────────────── Получение ─────────────────────────────


def get_booking_by_id(booking_id: int) -> Booking | None:
    return Booking.get_or_none(Booking.id == booking_id)


def get_booking(booking_id: int) -> Booking:
    booking = get_booking_by_id(booking_id)
    if booking is None:
        logger.warning("❗ Бронь id=%s не найдена", booking_id)
        raise BookingNotFoundError(f"Бронь id={booking_id} не найдена")
    return booking


# ──────────────────────────── Сохранение ─────────────────────────────


def _resolve_client(form: BookingForm, booking: Booking | None, allow_duplicate: bool) -> Client:
    client_fields = {
        "name": form.client_name,
        "contact_number": form.contact_number,
        "email": form.email,
        "alternate_contact": form.alternate_contact,
        "notes": form.client_notes,
    }
    if booking is not None:
        client = booking.client
        if form.client_mode == "new":
            client_service.update_client(client, **client_fields)
        return client
    if form.client_mode == "existing":
        client = client_service.get_client_by_id(form.client_id)
        if client is None:
            raise FormValidationError({"selected_client": "Please select a client"})
        return client
    return client_service.add_client(allow_duplicate=allow_duplicate, **client_fields)


def _sync_events(booking: Booking, form: BookingForm) -> None:
    from services.deletion_service import delete_event_cascade

    kept_ids = {e.id for e in form.events if e.id is not None}
    for existing in list(Event.select().where(Event.booking == booking)):
        if existing.id not in kept_ids:
            delete_event_cascade(existing.id)

    for event_form in form.events:
        if event_form.id is not None:
            event = event_service.require_event(event_form.id)
            if event.booking_id != booking.id:
                raise ValueError(f"Мероприятие id={event.id} не относится к брони id={booking.id}")
            event_service.update_event(event, **event_form.event_fields())
        else:
            event = event_service.add_event(booking.id, **event_form.event_fields())
            create_workflow(booking.id, event.id)
        staff_service.sync_event_staff(event.id, event_form.assigned_staff)


def save_booking(
    form: BookingForm,
    booking_id: int | None = None,
    *,
    allow_duplicate: bool = False,
    today: date | None = None,
) -> Booking:
    """Создать или обновить бронь по данным формы.

    Всё сохраняется в одной транзакции. Ошибки валидации выбрасываются как
    :class:`FormValidationError`; ошибка записи попадает в ключ ``submit``.
    """
    booking = get_booking(booking_id) if booking_id is not None else None
    errors = validate_booking_form(form, is_new=booking is None, today=today)
    if errors:
        logger.warning("⚠️ Форма брони содержит ошибки: %s", sorted(errors))
        raise FormValidationError(errors)

    try:
        with db.atomic():
            client = _resolve_client(form, booking, allow_duplicate)
            if booking is None:
                first = form.events[0]
                booking = Booking.create(
                    client=client,
                    booking_name=(form.booking_name or "").strip()
                    or generate_booking_name(client.name, first.event_name.strip(), len(form.events)),
                    package_amount=form.package_amount,
                    notes=form.client_notes or None,
                )
                logger.info("✅ Создана бронь id=%s для клиента id=%s", booking.id, client.id)
            else:
                updates: dict[str, Any] = {"package_amount": form.package_amount}
                if form.booking_name:
                    updates["booking_name"] = form.booking_name.strip()
                update_booking(booking, **updates)
            _sync_events(booking, form)
    except DatabaseError as exc:
        logger.exception("❌ Ошибка при сохранении брони")
        raise FormValidationError({"submit": str(exc)}) from exc
    return booking


def update_booking(booking: Booking, **kwargs) -> Booking:
    updates = {k: v for k, v in kwargs.items() if k in BOOKING_ALLOWED_FIELDS}
    if "package_amount" in updates and updates["package_amount"] is not None:
        updates["package_amount"] = to_decimal(updates["package_amount"])
    if not updates:
        return booking
    for k, v in updates.items():
        setattr(booking, k, v)
    booking.updated_at = datetime.now()
    booking.save()
    logger.info("✏️ Бронь id=%s обновлена", booking.id)
    return booking


# ──────────────────────────── Списки ─────────────────────────────


@dataclass
class BookingOverview:
    booking_id: Any
    client_id: Any
    client_name: str | None
    display_name: str
    status: str
    progress: int
    event_count: int
    date_range: str | None
    package_amount: Decimal | None
    created_at: datetime | None


def booking_overview(
    snapshot: Snapshot, booking: Any, today: date | None = None
) -> BookingOverview:
    events = snapshot.events_for_booking(booking.id)
    workflows = snapshot.workflows_for_booking(booking.id)
    client = snapshot.client(booking.client_id)
    dates = [e.event_date for e in events]
    return BookingOverview(
        booking_id=booking.id,
        client_id=booking.client_id,
        client_name=client.name if client else None,
        display_name=booking_display_name(booking.booking_name, client.name if client else None),
        status=derive_booking_status(events, workflows, today),
        progress=progress_percentage(booking_progress(workflows)),
        event_count=len(events),
        date_range=format_date_range(min(dates), max(dates)) if dates else None,
        package_amount=booking.package_amount,
        created_at=booking.created_at,
    )


def _matches(snapshot: Snapshot, booking: Any, query: str) -> bool:
    client = snapshot.client(booking.client_id)
    if client and query in client.name.lower():
        return True
    for event in snapshot.events_for_booking(booking.id):
        if query in event.event_name.lower() or query in event.venue.lower():
            return True
        for assignment in snapshot.assignments_for_event(event.id):
            member = snapshot.staff_member(assignment.staff_id)
            if member and query in member.name.lower():
                return True
    return False


def list_bookings(
    snapshot: Snapshot,
    filter_type: str = "active",
    search: str = "",
    today: date | None = None,
    bookings: Sequence[Any] | None = None,
) -> list[Any]:
    """Брони по фильтру active/past и строке поиска, новые первыми.

    Поиск идёт по имени клиента, названию и месту мероприятий и именам
    назначенных сотрудников.
    """
    if filter_type not in LIST_FILTERS:
        raise ValueError(f"Неизвестный фильтр: {filter_type}")
    today = today or date.today()
    result = list(snapshot.bookings if bookings is None else bookings)

    if filter_type != "all":
        check = is_active_booking if filter_type == "active" else is_past_booking
        result = [
            b
            for b in result
            if check(
                snapshot.events_for_booking(b.id),
                snapshot.event_workflows_for_booking(b.id),
                today,
            )
        ]

    query = search.strip().lower()
    if query:
        result = [b for b in result if _matches(snapshot, b, query)]

    result.sort(key=lambda b: b.created_at or datetime.min, reverse=True)
    return result


# ──────────────────────────── Трекинг ─────────────────────────────


@dataclass
class TrackedAssignment:
    assignment_id: Any
    staff_id: Any
    staff_name: str | None
    role: str | None
    data_received: bool


@dataclass
class TrackedEvent:
    event: Any
    workflow: Any | None
    progress: int
    delivery_state: str
    assignments: list[TrackedAssignment] = field(default_factory=list)

    @property
    def data_received_count(self) -> int:
        return sum(1 for a in self.assignments if a.data_received)


@dataclass
class BookingTracking:
    overview: BookingOverview
    booking_workflow: Any | None
    booking_workflow_progress: int
    events: list[TrackedEvent] = field(default_factory=list)


def booking_tracking(
    snapshot: Snapshot, booking_id: Any, today: date | None = None
) -> BookingTracking:
    """Подробный трекинг брони: workflow брони и каждого мероприятия."""
    booking = snapshot.booking(booking_id)
    if booking is None:
        raise BookingNotFoundError(f"Бронь id={booking_id} не найдена")

    booking_workflow = next(
        (w for w in snapshot.workflows if w.booking_id == booking_id and w.event_id is None),
        None,
    )
    tracked: list[TrackedEvent] = []
    for event in sorted(snapshot.events_for_booking(booking_id), key=lambda e: e.event_date):
        workflow = next((w for w in snapshot.workflows if w.event_id == event.id), None)
        assignments = []
        for assignment in snapshot.assignments_for_event(event.id):
            member = snapshot.staff_member(assignment.staff_id)
            assignments.append(
                TrackedAssignment(
                    assignment_id=assignment.id,
                    staff_id=assignment.staff_id,
                    staff_name=member.name if member else None,
                    role=assignment.role or (member.role if member else None),
                    data_received=assignment.data_received,
                )
            )
        tracked.append(
            TrackedEvent(
                event=event,
                workflow=workflow,
                progress=progress_percentage(workflow_progress(workflow)),
                delivery_state=staff_service.delivery_state(workflow),
                assignments=assignments,
            )
        )
    return BookingTracking(
        overview=booking_overview(snapshot, booking, today),
        booking_workflow=booking_workflow,
        booking_workflow_progress=progress_percentage(workflow_progress(booking_workflow)),
        events=tracked,
    )
