"""Снимок данных студии в памяти.

Все вычислительные модули работают поверх :class:`Snapshot`. Хранилище
:class:`SnapshotStore` держит записи, проиндексированные по id, и умеет
перечитывать как всё целиком, так и отдельные таблицы после мутации.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from database.models import (
    Booking,
    Client,
    ClientPaymentRecord,
    Event,
    Expense,
    Payment,
    Staff,
    StaffAssignment,
    StaffPaymentRecord,
    Workflow,
)
from services.records import (
    AssignmentRecord,
    BookingRecord,
    ClientPaymentEntry,
    ClientRecord,
    EventRecord,
    ExpenseRecord,
    PaymentRecord,
    StaffPaymentEntry,
    StaffRecord,
    WorkflowRecord,
)

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    clients: list[ClientRecord] = field(default_factory=list)
    bookings: list[BookingRecord] = field(default_factory=list)
    events: list[EventRecord] = field(default_factory=list)
    staff: list[StaffRecord] = field(default_factory=list)
    staff_assignments: list[AssignmentRecord] = field(default_factory=list)
    workflows: list[WorkflowRecord] = field(default_factory=list)
    payments: list[PaymentRecord] = field(default_factory=list)
    staff_payment_records: list[StaffPaymentEntry] = field(default_factory=list)
    client_payment_records: list[ClientPaymentEntry] = field(default_factory=list)
    expenses: list[ExpenseRecord] = field(default_factory=list)

    # ─────────────────────── выборки по связям ───────────────────────

    def booking(self, booking_id: Any) -> BookingRecord | None:
        return next((b for b in self.bookings if b.id == booking_id), None)

    def client(self, client_id: Any) -> ClientRecord | None:
        return next((c for c in self.clients if c.id == client_id), None)

    def event(self, event_id: Any) -> EventRecord | None:
        return next((e for e in self.events if e.id == event_id), None)

    def staff_member(self, staff_id: Any) -> StaffRecord | None:
        return next((s for s in self.staff if s.id == staff_id), None)

    def client_for_booking(self, booking_id: Any) -> ClientRecord | None:
        booking = self.booking(booking_id)
        return self.client(booking.client_id) if booking else None

    def events_for_booking(self, booking_id: Any) -> list[EventRecord]:
        return [e for e in self.events if e.booking_id == booking_id]

    def assignments_for_event(self, event_id: Any) -> list[AssignmentRecord]:
        return [a for a in self.staff_assignments if a.event_id == event_id]

    def workflows_for_booking(self, booking_id: Any) -> list[WorkflowRecord]:
        """Workflow уровня брони и workflow её мероприятий."""
        event_ids = {e.id for e in self.events_for_booking(booking_id)}
        return [
            w
            for w in self.workflows
            if w.event_id in event_ids or (w.event_id is None and w.booking_id == booking_id)
        ]

    def event_workflows_for_booking(self, booking_id: Any) -> list[WorkflowRecord]:
        event_ids = {e.id for e in self.events_for_booking(booking_id)}
        return [w for w in self.workflows if w.event_id in event_ids]


# таблица снимка → загрузчик
_LOADERS: dict[str, Callable[[], list[Any]]] = {
    "clients": lambda: [
        ClientRecord.from_model(c) for c in Client.select().order_by(Client.created_at.desc())
    ],
    "bookings": lambda: [
        BookingRecord.from_model(b) for b in Booking.select().order_by(Booking.created_at.desc())
    ],
    "events": lambda: [
        EventRecord.from_model(e) for e in Event.select().order_by(Event.event_date.asc())
    ],
    "staff": lambda: [StaffRecord.from_model(s) for s in Staff.select().order_by(Staff.name.asc())],
    "staff_assignments": lambda: [
        AssignmentRecord.from_model(a) for a in StaffAssignment.select()
    ],
    "workflows": lambda: [WorkflowRecord.from_model(w) for w in Workflow.select()],
    "payments": lambda: [PaymentRecord.from_model(p) for p in Payment.select()],
    "staff_payment_records": lambda: [
        StaffPaymentEntry.from_model(r)
        for r in StaffPaymentRecord.select().order_by(StaffPaymentRecord.payment_date.desc())
    ],
    "client_payment_records": lambda: [
        ClientPaymentEntry.from_model(r)
        for r in ClientPaymentRecord.select().order_by(ClientPaymentRecord.payment_date.desc())
    ],
    "expenses": lambda: [
        ExpenseRecord.from_model(e) for e in Expense.select().order_by(Expense.date.desc())
    ],
}

TABLES: tuple[str, ...] = tuple(_LOADERS)


def load_snapshot() -> Snapshot:
    """Полностью перечитать все таблицы."""
    return Snapshot(**{table: loader() for table, loader in _LOADERS.items()})


class SnapshotStore:
    """Кэш снимка с индексом по id и точечной инвалидацией таблиц."""

    def __init__(self, loaders: dict[str, Callable[[], list[Any]]] | None = None) -> None:
        self._loaders = dict(loaders or _LOADERS)
        self._snapshot = Snapshot()
        self._index: dict[str, dict[Any, Any]] = {table: {} for table in self._loaders}
        self.loading = False
        self.loaded = False
        self.error: str | None = None

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def refresh(self) -> Snapshot:
        """Перечитать все таблицы."""
        snapshot = self.invalidate(*self._loaders)
        self.loaded = True
        return snapshot

    def ensure_loaded(self) -> Snapshot:
        if not self.loaded:
            return self.refresh()
        return self._snapshot

    def invalidate(self, *tables: str) -> Snapshot:
        """Перечитать только указанные таблицы."""
        unknown = set(tables) - set(self._loaders)
        if unknown:
            raise ValueError(f"Неизвестные таблицы снимка: {', '.join(sorted(unknown))}")
        self.loading = True
        self.error = None
        try:
            for table in tables:
                rows = self._loaders[table]()
                setattr(self._snapshot, table, rows)
                self._index[table] = {row.id: row for row in rows}
        except Exception as exc:
            self.error = str(exc)
            logger.exception("❌ Ошибка обновления снимка (%s)", ", ".join(tables))
            raise
        finally:
            self.loading = False
        logger.debug("🔄 Снимок обновлён: %s", ", ".join(tables))
        return self._snapshot

    def get(self, table: str, record_id: Any) -> Any | None:
        return self._index.get(table, {}).get(record_id)

    def ids(self, table: str) -> Iterable[Any]:
        return self._index.get(table, {}).keys()
