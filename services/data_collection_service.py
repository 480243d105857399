"""Чек-лист сбора материалов с мероприятия."""

import logging
from dataclasses import dataclass
from datetime import datetime

from peewee import ModelSelect

from database.models import Event, EventDataCollection, Staff, StaffAssignment

logger = logging.getLogger(__name__)


class DataCollectionItemNotFoundError(LookupError):
    """Пункт чек-листа не найден."""


def get_items(event_id: int) -> ModelSelect:
    return (
        EventDataCollection.select()
        .where(EventDataCollection.event == event_id)
        .order_by(EventDataCollection.id.asc())
    )


def add_item(
    event_id: int, item: str, staff_id: int | None = None, notes: str | None = None
) -> EventDataCollection:
    """Добавить пункт чек-листа мероприятия."""
    if not (item or "").strip():
        raise ValueError("Название пункта обязательно")
    if not Event.get_or_none(Event.id == event_id):
        raise LookupError(f"Мероприятие id={event_id} не найдено")
    if staff_id is not None and not Staff.get_or_none(Staff.id == staff_id):
        raise LookupError(f"Сотрудник id={staff_id} не найден")
    row = EventDataCollection.create(
        event=event_id, staff=staff_id, item=item.strip(), notes=notes or None
    )
    logger.info("✅ Пункт чек-листа id=%s добавлен к мероприятию id=%s", row.id, event_id)
    return row


def get_item(item_id: int) -> EventDataCollection:
    row = EventDataCollection.get_or_none(EventDataCollection.id == item_id)
    if row is None:
        logger.warning("❗ Пункт чек-листа id=%s не найден", item_id)
        raise DataCollectionItemNotFoundError(f"Пункт id={item_id} не найден")
    return row


def toggle_item(item_id: int, received_by: str | None = "Admin") -> EventDataCollection:
    """Переключить отметку «получено»; при снятии очищает время и автора."""
    row = get_item(item_id)
    row.received = not row.received
    row.received_at = datetime.now() if row.received else None
    row.received_by = received_by if row.received else None
    row.save()
    logger.info("✏️ Пункт чек-листа id=%s: received=%s", item_id, row.received)
    return row


def delete_item(item_id: int) -> bool:
    deleted = EventDataCollection.delete().where(EventDataCollection.id == item_id).execute()
    if deleted:
        logger.info("🗑️ Пункт чек-листа id=%s удалён", item_id)
    return bool(deleted)


@dataclass
class CollectionProgress:
    items_received: int
    items_total: int
    staff_received: int
    staff_total: int

    @property
    def all_received(self) -> bool:
        total = self.items_total + self.staff_total
        return total > 0 and (
            self.items_received == self.items_total
            and self.staff_received == self.staff_total
        )

    @property
    def percentage(self) -> int:
        total = self.items_total + self.staff_total
        if total == 0:
            return 0
        return round((self.items_received + self.staff_received) / total * 100)


def collection_progress(event_id: int) -> CollectionProgress:
    """Сколько пунктов чек-листа и сотрудников уже сдали материалы."""
    items = list(get_items(event_id))
    assignments = list(StaffAssignment.select().where(StaffAssignment.event == event_id))
    return CollectionProgress(
        items_received=sum(1 for i in items if i.received),
        items_total=len(items),
        staff_received=sum(1 for a in assignments if a.data_received),
        staff_total=len(assignments),
    )
