"""Права доступа по ролям пользователей (admin / manager / staff)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from database.models import User, UserRole

ADMIN = UserRole.ADMIN.value
MANAGER = UserRole.MANAGER.value
STAFF = UserRole.STAFF.value


ROUTE_ROLES: dict[str, tuple[str, ...]] = {
    "/dashboard": (ADMIN, MANAGER, STAFF),
    "/bookings": (ADMIN, MANAGER),
    "/my-bookings": (STAFF,),
    "/tracking": (ADMIN, MANAGER),
    "/my-events": (STAFF,),
    "/tracking/{booking_id}": (ADMIN, MANAGER, STAFF),
    "/staff": (ADMIN, MANAGER),
    "/calendar": (ADMIN, MANAGER, STAFF),
    "/staff-payments": (ADMIN,),
    "/my-payments": (ADMIN, MANAGER, STAFF),
    "/client-payments": (ADMIN,),
    "/expenses": (ADMIN,),
}


class AccessDeniedError(PermissionError):
    """Недостаточно прав для операции."""


@dataclass(frozen=True)
class CurrentUser:
    role: str
    staff_id: int | None = None
    user_id: int | None = None
    name: str | None = None

    @classmethod
    def from_model(cls, user: User) -> "CurrentUser":
        return cls(role=user.role, staff_id=user.staff_id, user_id=user.id, name=user.name)

    @property
    def is_privileged(self) -> bool:
        return self.role in (ADMIN, MANAGER)


def _assigned_event_ids(staff_id: Any, assignments: Iterable[Any]) -> set[Any]:
    return {a.event_id for a in assignments if a.staff_id == staff_id}


def accessible_bookings(
    user: CurrentUser | None,
    bookings: Iterable[Any],
    events: Iterable[Any],
    assignments: Iterable[Any],
) -> list[Any]:
    """Брони, видимые пользователю: сотрудник видит брони, где он назначен."""
    if user is None:
        return []
    if user.is_privileged:
        return list(bookings)
    if user.role == STAFF and user.staff_id:
        event_ids = _assigned_event_ids(user.staff_id, assignments)
        booking_ids = {e.booking_id for e in events if e.id in event_ids}
        return [b for b in bookings if b.id in booking_ids]
    return []


def accessible_events(
    user: CurrentUser | None, events: Iterable[Any], assignments: Iterable[Any]
) -> list[Any]:
    """Мероприятия, видимые пользователю.

    Сотрудник видит все мероприятия тех броней, где он назначен хотя бы
    на одно мероприятие.
    """
    if user is None:
        return []
    events = list(events)
    if user.is_privileged:
        return events
    if user.role == STAFF and user.staff_id:
        event_ids = _assigned_event_ids(user.staff_id, assignments)
        booking_ids = {e.booking_id for e in events if e.id in event_ids}
        return [e for e in events if e.booking_id in booking_ids]
    return []


def accessible_staff_payments(user: CurrentUser | None, records: Iterable[Any]) -> list[Any]:
    if user is None:
        return []
    if user.role == ADMIN:
        return list(records)
    if user.role in (MANAGER, STAFF) and user.staff_id:
        return [r for r in records if r.staff_id == user.staff_id]
    return []


def can_manage_payments(user: CurrentUser | None) -> bool:
    return user is not None and user.role == ADMIN


def can_manage_bookings(user: CurrentUser | None) -> bool:
    return user is not None and user.is_privileged


def can_delete_bookings(user: CurrentUser | None) -> bool:
    return user is not None and user.role == ADMIN


def can_view_all_staff(user: CurrentUser | None) -> bool:
    return user is not None and user.is_privileged


def can_update_event_tracking(
    user: CurrentUser | None, event_id: Any, assignments: Iterable[Any]
) -> bool:
    if user is None:
        return False
    if user.is_privileged:
        return True
    if user.role == STAFF and user.staff_id:
        return event_id in _assigned_event_ids(user.staff_id, assignments)
    return False


def can_manage_users(user: CurrentUser | None) -> bool:
    return user is not None and user.role == ADMIN


def can_access_route(user: CurrentUser | None, route: str) -> bool:
    if user is None:
        return False
    return user.role in ROUTE_ROLES.get(route, ())


def require(allowed: bool, action: str) -> None:
    """Бросить :class:`AccessDeniedError`, если действие запрещено."""
    if not allowed:
        raise AccessDeniedError(f"Недостаточно прав: {action}")
