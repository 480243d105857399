"""Поиск двойных назначений и нехватки сотрудников на мероприятиях."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Sequence

# роль сотрудника → счётчик в RoleCounts
ROLE_COUNTERS: dict[str, str] = {
    "photographer": "photographers",
    "videographer": "videographers",
    "drone_operator": "drone_operators",
    "editor": "editors",
}


@dataclass
class RoleCounts:
    photographers: int = 0
    videographers: int = 0
    drone_operators: int = 0
    editors: int = 0

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.photographers, self.videographers, self.drone_operators, self.editors)


@dataclass
class Conflict:
    staff_id: Any
    event_ids: list[Any]
    date: date
    time_slot: str
    type: str = "double_booking"
    severity: str = "high"


@dataclass
class Shortage:
    event_id: Any
    required: RoleCounts
    assigned: RoleCounts
    type: str = "staff_shortage"
    severity: str = "medium"


@dataclass
class ConflictReport:
    conflicts: list[Conflict] = field(default_factory=list)
    shortages: list[Shortage] = field(default_factory=list)


def _assignments_by_event(staff_assignments: Iterable[Any]) -> dict[Any, list[Any]]:
    grouped: dict[Any, list[Any]] = defaultdict(list)
    for assignment in staff_assignments:
        grouped[assignment.event_id].append(assignment)
    return grouped


def _find_double_bookings(
    events: Sequence[Any], by_event: dict[Any, list[Any]]
) -> list[Conflict]:
    buckets: dict[tuple[Any, str], list[Any]] = {}
    for event in events:
        buckets.setdefault((event.event_date, event.time_slot), []).append(event)

    conflicts: list[Conflict] = []
    for (event_date, time_slot), bucket in buckets.items():
        staff_events: dict[Any, list[Any]] = {}
        for event in bucket:
            for assignment in by_event.get(event.id, ()):
                staff_events.setdefault(assignment.staff_id, []).append(event.id)
        for staff_id, event_ids in staff_events.items():
            if len(event_ids) > 1:
                conflicts.append(
                    Conflict(
                        staff_id=staff_id,
                        event_ids=event_ids,
                        date=event_date,
                        time_slot=time_slot,
                    )
                )
    return conflicts


def count_assigned_roles(
    assignments: Iterable[Any], staff_members: Sequence[Any] | None = None
) -> RoleCounts:
    """Посчитать назначенных сотрудников по ролям.

    При наличии справочника берётся роль сотрудника, иначе ``role`` самого
    назначения. Неизвестные сотрудники и роли не учитываются.
    """
    roster = {s.id: s for s in staff_members} if staff_members is not None else None
    counts = RoleCounts()
    for assignment in assignments:
        if roster is not None:
            member = roster.get(assignment.staff_id)
            role = getattr(member, "role", None)
        else:
            role = getattr(assignment, "role", None)
        counter = ROLE_COUNTERS.get(role or "")
        if counter is None:
            continue
        setattr(counts, counter, getattr(counts, counter) + 1)
    return counts


def required_roles(event: Any) -> RoleCounts:
    return RoleCounts(
        photographers=int(getattr(event, "photographers_required", 0) or 0),
        videographers=int(getattr(event, "videographers_required", 0) or 0),
        drone_operators=int(getattr(event, "drone_operators_required", 0) or 0),
        editors=int(getattr(event, "editors_required", 0) or 0),
    )


def find_shortages(
    events: Sequence[Any],
    staff_assignments: Iterable[Any],
    staff_members: Sequence[Any] | None = None,
) -> list[Shortage]:
    by_event = _assignments_by_event(staff_assignments)
    shortages: list[Shortage] = []
    for event in events:
        required = required_roles(event)
        assigned = count_assigned_roles(by_event.get(event.id, ()), staff_members)
        if any(a < r for a, r in zip(assigned.as_tuple(), required.as_tuple())):
            shortages.append(Shortage(event_id=event.id, required=required, assigned=assigned))
    return shortages


def detect_conflicts(
    events: Sequence[Any],
    staff_assignments: Sequence[Any],
    staff_members: Sequence[Any] | None = None,
) -> ConflictReport:
    """Найти двойные назначения и нехватку сотрудников по всем мероприятиям."""
    by_event = _assignments_by_event(staff_assignments)
    return ConflictReport(
        conflicts=_find_double_bookings(events, by_event),
        shortages=find_shortages(events, staff_assignments, staff_members),
    )


def conflicts_for_staff(report: ConflictReport, staff_id: Any) -> list[Conflict]:
    return [c for c in report.conflicts if c.staff_id == staff_id]


def staff_availability(
    staff_id: Any,
    event_date: date,
    time_slot: str,
    events: Sequence[Any],
    staff_assignments: Iterable[Any],
    *,
    exclude_event_id: Any = None,
) -> list[Any]:
    """Id мероприятий в ту же дату и слот, где сотрудник уже занят."""
    slot_events = {
        e.id
        for e in events
        if e.event_date == event_date
        and e.time_slot == time_slot
        and e.id != exclude_event_id
    }
    busy: list[Any] = []
    for assignment in staff_assignments:
        if assignment.staff_id == staff_id and assignment.event_id in slot_events:
            if assignment.event_id not in busy:
                busy.append(assignment.event_id)
    return busy
