"""Сервис сотрудников: справочник, назначения на мероприятия, учётные записи."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Sequence

from dateutil.relativedelta import relativedelta
from peewee import ModelSelect

from database.db import db
from database.models import (
    Event,
    Payment,
    PaymentTransaction,
    Staff,
    StaffAssignment,
    StaffRole,
    StaffStatus,
    User,
    UserRole,
)
from services.payment_service import create_payment
from services.snapshot import Snapshot
from services.validators import is_valid_email, normalize_full_name, normalize_phone
from services.workflow_steps import STILL, REEL, VIDEO, step_map

logger = logging.getLogger(__name__)

STAFF_ALLOWED_FIELDS = {"name", "role", "contact_number", "email", "join_date", "status"}

ROLES = {r.value for r in StaffRole}
STATUSES = {s.value for s in StaffStatus}

# фильтр периода → (сдвиг начала, сдвиг конца) относительно сегодняшней даты
ASSIGNMENT_PERIODS = {
    "next3months": (relativedelta(), relativedelta(months=3)),
    "next6months": (relativedelta(), relativedelta(months=6)),
    "past3months": (relativedelta(months=-3), relativedelta()),
    "past6months": (relativedelta(months=-6), relativedelta()),
}


class StaffNotFoundError(LookupError):
    """Сотрудник не найден."""


class AssignmentNotFoundError(LookupError):
    """Назначение не найдено."""


# ──────────────────────────── Справочник ─────────────────────────────


def get_all_staff() -> ModelSelect:
    return Staff.select().order_by(Staff.name.asc())


def get_active_staff() -> ModelSelect:
    return get_all_staff().where(Staff.status == StaffStatus.ACTIVE.value)


def get_staff_by_id(staff_id: int) -> Staff | None:
    return Staff.get_or_none(Staff.id == staff_id)


def filter_staff(
    staff_members: Sequence[Any],
    search: str = "",
    role: str = "all",
    status: str = "all",
) -> list[Any]:
    """Отбор по роли, статусу и строке поиска; сортировка по имени."""
    result = list(staff_members)
    if role != "all":
        result = [s for s in result if s.role == role]
    if status != "all":
        result = [s for s in result if s.status == status]
    query = search.strip().lower()
    if query:
        result = [
            s
            for s in result
            if query in s.name.lower()
            or query in s.role.lower()
            or query in (s.contact_number or "")
        ]
    return sorted(result, key=lambda s: s.name.lower())


def _clean(kwargs: dict) -> dict:
    clean_data = {
        k: v for k, v in kwargs.items() if k in STAFF_ALLOWED_FIELDS and v not in ("", None)
    }
    if "name" in clean_data:
        clean_data["name"] = normalize_full_name(clean_data["name"])
    if "role" in clean_data and clean_data["role"] not in ROLES:
        raise ValueError(f"Неизвестная роль: {clean_data['role']}")
    if "status" in clean_data and clean_data["status"] not in STATUSES:
        raise ValueError(f"Неизвестный статус: {clean_data['status']}")
    if "contact_number" in clean_data:
        clean_data["contact_number"] = normalize_phone(clean_data["contact_number"])
    if "email" in clean_data and not is_valid_email(clean_data["email"]):
        raise ValueError("Invalid email format")
    return clean_data


def add_staff(**kwargs) -> Staff:
    clean_data = _clean(kwargs)
    for required in ("name", "role", "contact_number"):
        if not clean_data.get(required):
            raise ValueError(f"Поле '{required}' обязательно для сотрудника")
    member = Staff.create(**clean_data)
    logger.info("✅ Добавлен сотрудник id=%s: %s (%s)", member.id, member.name, member.role)
    return member


def update_staff(member: Staff, **kwargs) -> Staff:
    updates = _clean(kwargs)
    if not updates:
        return member
    for k, v in updates.items():
        setattr(member, k, v)
    member.save()
    logger.info("✏️ Сотрудник id=%s обновлён: %s", member.id, updates)
    return member


def delete_staff(staff_id: int) -> None:
    """Удалить сотрудника без назначений и записей о выплатах."""
    member = get_staff_by_id(staff_id)
    if member is None:
        logger.warning("❗ Сотрудник id=%s не найден для удаления", staff_id)
        raise StaffNotFoundError(f"Сотрудник id={staff_id} не найден")
    if member.assignments.count() or member.payment_records.count() or member.payments.count():
        raise ValueError("Cannot delete staff with assignments or payments; mark inactive instead")
    with db.atomic():
        User.update(staff=None).where(User.staff == member).execute()
        member.delete_instance()
    logger.info("🗑️ Удалён сотрудник id=%s", staff_id)


# ──────────────────────────── Назначения ─────────────────────────────


def assign_staff(event_id: int, staff_id: int, role: str | None = None) -> StaffAssignment:
    """Назначить сотрудника на мероприятие и завести строку учёта выплат."""
    member = get_staff_by_id(staff_id)
    if member is None:
        raise StaffNotFoundError(f"Сотрудник id={staff_id} не найден")
    if not Event.get_or_none(Event.id == event_id):
        raise LookupError(f"Мероприятие id={event_id} не найдено")
    exists = (
        StaffAssignment.select()
        .where((StaffAssignment.event == event_id) & (StaffAssignment.staff == staff_id))
        .exists()
    )
    if exists:
        raise ValueError("Staff member is already assigned to this event")

    role = role or member.role
    with db.atomic():
        assignment = StaffAssignment.create(event=event_id, staff=staff_id, role=role)
        create_payment(event_id, staff_id, role)
    logger.info(
        "✅ Сотрудник id=%s назначен на мероприятие id=%s (%s)", staff_id, event_id, role
    )
    return assignment


def unassign_staff(event_id: int, staff_id: int) -> int:
    """Снять сотрудника с мероприятия вместе с его строкой учёта выплат."""
    payment_ids = Payment.select(Payment.id).where(
        (Payment.event == event_id) & (Payment.staff == staff_id)
    )
    with db.atomic():
        removed = (
            StaffAssignment.delete()
            .where((StaffAssignment.event == event_id) & (StaffAssignment.staff == staff_id))
            .execute()
        )
        PaymentTransaction.delete().where(PaymentTransaction.payment.in_(payment_ids)).execute()
        Payment.delete().where(
            (Payment.event == event_id) & (Payment.staff == staff_id)
        ).execute()
    if removed:
        logger.info("🗑️ Сотрудник id=%s снят с мероприятия id=%s", staff_id, event_id)
    else:
        logger.warning(
            "❗ Назначение сотрудника id=%s на мероприятие id=%s не найдено", staff_id, event_id
        )
    return removed


def sync_event_staff(event_id: int, staff_ids: Sequence[int]) -> tuple[list[int], list[int]]:
    """Привести состав сотрудников мероприятия к переданному списку.

    Неизвестные id сотрудников пропускаются. Возвращает (добавленные, снятые).
    """
    existing = [
        a.staff_id
        for a in StaffAssignment.select(StaffAssignment.staff).where(
            StaffAssignment.event == event_id
        )
    ]
    wanted = list(dict.fromkeys(staff_ids))
    removed = [sid for sid in existing if sid not in wanted]
    added: list[int] = []
    for staff_id in removed:
        unassign_staff(event_id, staff_id)
    for staff_id in wanted:
        if staff_id in existing:
            continue
        if get_staff_by_id(staff_id) is None:
            logger.warning("❗ Сотрудник id=%s не найден, назначение пропущено", staff_id)
            continue
        assign_staff(event_id, staff_id)
        added.append(staff_id)
    return added, removed


def mark_data_received(
    assignment_id: int, received: bool = True, received_by: str | None = None
) -> StaffAssignment:
    assignment = StaffAssignment.get_or_none(StaffAssignment.id == assignment_id)
    if assignment is None:
        logger.warning("❗ Назначение id=%s не найдено", assignment_id)
        raise AssignmentNotFoundError(f"Назначение id={assignment_id} не найдено")
    assignment.data_received = received
    assignment.data_received_at = datetime.now() if received else None
    assignment.data_received_by = received_by if received else None
    assignment.save()
    logger.info(
        "✏️ Назначение id=%s: данные %s", assignment_id, "получены" if received else "не получены"
    )
    return assignment


@dataclass
class PendingData:
    assignment_id: Any
    event_id: Any
    event_name: str
    event_date: date
    booking_name: str | None
    client_name: str | None
    staff_name: str
    staff_role: str


def data_not_received(snapshot: Snapshot, today: date | None = None) -> list[PendingData]:
    """Назначения на прошедшие мероприятия, по которым данные не сданы."""
    today = today or date.today()
    rows: list[PendingData] = []
    for assignment in snapshot.staff_assignments:
        if assignment.data_received:
            continue
        event = snapshot.event(assignment.event_id)
        member = snapshot.staff_member(assignment.staff_id)
        if event is None or member is None or event.event_date >= today:
            continue
        booking = snapshot.booking(event.booking_id)
        client = snapshot.client(booking.client_id) if booking else None
        rows.append(
            PendingData(
                assignment_id=assignment.id,
                event_id=event.id,
                event_name=event.event_name,
                event_date=event.event_date,
                booking_name=booking.booking_name if booking else None,
                client_name=client.name if client else None,
                staff_name=member.name,
                staff_role=member.role,
            )
        )
    rows.sort(key=lambda r: r.event_date, reverse=True)
    return rows


def _category_state(workflow: Any, category: str, start_step: str, end_step: str) -> str:
    steps = step_map(workflow, category)
    if (steps.get(end_step) or {}).get("completed"):
        return "received"
    if (steps.get(start_step) or {}).get("completed"):
        return "pending"
    return "not_started"


def delivery_state(workflow: Any | None) -> str:
    """Сводное состояние сдачи материалов по мероприятию."""
    if workflow is None:
        return "not_started"
    still = _category_state(workflow, STILL, "rawDataSent", "deliveredToClient")
    reel = _category_state(workflow, REEL, "reelSentToEditor", "reelDelivered")
    video = _category_state(workflow, VIDEO, "videoSentToEditor", "videoDelivered")
    if still == "received" and reel in ("received", "not_started") and video in (
        "received",
        "not_started",
    ):
        return "received"
    if still == reel == video == "not_started":
        return "not_started"
    return "pending"


@dataclass
class StaffAssignmentView:
    assignment_id: Any
    event_id: Any
    event_name: str
    event_date: date
    time_slot: str
    venue: str
    role: str | None
    booking_id: Any
    client_name: str | None
    data_received: bool
    delivery_state: str


def staff_assignments_for(
    snapshot: Snapshot,
    staff_id: Any,
    period: str = "all",
    *,
    start: date | None = None,
    end: date | None = None,
    today: date | None = None,
) -> list[StaffAssignmentView]:
    """Мероприятия сотрудника по возрастанию даты с фильтром периода.

    ``period``: ``all``, ``next3months``, ``next6months``, ``past3months``,
    ``past6months`` или ``custom`` (с ``start`` и ``end``).
    """
    today = today or date.today()
    if period in ASSIGNMENT_PERIODS:
        shift_start, shift_end = ASSIGNMENT_PERIODS[period]
        start, end = today + shift_start, today + shift_end
    elif period == "custom":
        if not (start and end):
            start = end = None
    elif period == "all":
        start = end = None
    else:
        raise ValueError(f"Неизвестный период: {period}")

    rows: list[StaffAssignmentView] = []
    for assignment in snapshot.staff_assignments:
        if assignment.staff_id != staff_id:
            continue
        event = snapshot.event(assignment.event_id)
        if event is None:
            continue
        if start and end and not start <= event.event_date <= end:
            continue
        client = snapshot.client_for_booking(event.booking_id)
        workflow = next((w for w in snapshot.workflows if w.event_id == event.id), None)
        rows.append(
            StaffAssignmentView(
                assignment_id=assignment.id,
                event_id=event.id,
                event_name=event.event_name,
                event_date=event.event_date,
                time_slot=event.time_slot,
                venue=event.venue,
                role=assignment.role,
                booking_id=event.booking_id,
                client_name=client.name if client else None,
                data_received=assignment.data_received,
                delivery_state=delivery_state(workflow),
            )
        )
    rows.sort(key=lambda r: r.event_date)
    return rows


# ──────────────────────────── Учётные записи ─────────────────────────────


def create_login(staff_id: int, email: str, role: str = UserRole.STAFF.value) -> User:
    """Создать пользователя системы, привязанного к сотруднику."""
    member = get_staff_by_id(staff_id)
    if member is None:
        raise StaffNotFoundError(f"Сотрудник id={staff_id} не найден")
    if not email or not is_valid_email(email):
        raise ValueError("Invalid email format")
    if role not in {r.value for r in UserRole}:
        raise ValueError("Please select a system role")
    if User.select().where(User.email == email).exists():
        raise ValueError("A user account with this email already exists")
    user = User.create(email=email, name=member.name, role=role, staff=member)
    logger.info("✅ Создана учётная запись id=%s для сотрудника id=%s", user.id, staff_id)
    return user


def get_user(user_id: int) -> User | None:
    return User.get_or_none(User.id == user_id)
