"""Сервисный модуль для управления клиентами."""

import logging

from peewee import ModelSelect

from database.db import db
from database.models import Client
from services.validators import is_valid_email, normalize_full_name, normalize_phone

logger = logging.getLogger(__name__)

CLIENT_ALLOWED_FIELDS = {"name", "contact_number", "email", "alternate_contact", "notes"}


class ClientNotFoundError(LookupError):
    """Клиент не найден."""


class DuplicatePhoneError(ValueError):
    """Клиент с таким номером уже существует."""

    def __init__(self, contact_number: str, existing: Client):
        super().__init__(
            f"A client with contact number {contact_number} already exists ({existing.name})"
        )
        self.contact_number = contact_number
        self.existing = existing


# ──────────────────────────── Получение ─────────────────────────────


def get_client_by_id(client_id: int) -> Client | None:
    """Получить клиента по его идентификатору."""
    return Client.get_or_none(Client.id == client_id)


def require_client(client_id: int) -> Client:
    client = get_client_by_id(client_id)
    if client is None:
        logger.warning("❗ Клиент с id=%s не найден", client_id)
        raise ClientNotFoundError(f"Клиент id={client_id} не найден")
    return client


def find_by_contact(contact_number: str) -> Client | None:
    return Client.get_or_none(Client.contact_number == contact_number)


def apply_client_filters(query: ModelSelect, search_text: str) -> ModelSelect:
    """Поиск по имени или номеру телефона."""
    if search_text:
        query = query.where(
            (Client.name.contains(search_text))
            | (Client.contact_number.contains(search_text))
        )
    return query


def search_clients(search_text: str = "") -> ModelSelect:
    return apply_client_filters(Client.select(), search_text).order_by(Client.name.asc())


# ──────────────────────────── Добавление ─────────────────────────────


def _clean(kwargs: dict) -> dict:
    clean_data = {
        key: kwargs[key]
        for key in CLIENT_ALLOWED_FIELDS
        if key in kwargs and kwargs[key] not in ("", None)
    }
    if "name" in clean_data:
        clean_data["name"] = normalize_full_name(clean_data["name"])
    if "contact_number" in clean_data:
        try:
            clean_data["contact_number"] = normalize_phone(clean_data["contact_number"])
        except ValueError as e:
            logger.warning(
                "⚠️ Ошибка нормализации телефона '%s': %s", clean_data["contact_number"], e
            )
            raise
    if "email" in clean_data and not is_valid_email(clean_data["email"]):
        raise ValueError("Invalid email format")
    return clean_data


def add_client(*, allow_duplicate: bool = False, **kwargs) -> Client:
    """Создать и вернуть нового клиента.

    Если номер уже занят, выбрасывается :class:`DuplicatePhoneError`, пока
    пользователь явно не разрешит дубликат.
    """
    clean_data = _clean(kwargs)

    if not clean_data.get("name"):
        logger.warning("❌ Попытка создать клиента без имени")
        raise ValueError("Client name is required")
    if not clean_data.get("contact_number"):
        raise ValueError("Contact number is required")

    existing = find_by_contact(clean_data["contact_number"])
    if existing and not allow_duplicate:
        logger.warning(
            "⚠️ Номер %s уже принадлежит клиенту id=%s",
            clean_data["contact_number"],
            existing.id,
        )
        raise DuplicatePhoneError(clean_data["contact_number"], existing)

    with db.atomic():
        client = Client.create(**clean_data)
    logger.info("✅ Добавлен клиент id=%s: %s", client.id, client.name)
    return client


# ──────────────────────────── Обновление ─────────────────────────────


def update_client(client: Client, **kwargs) -> Client:
    """Обновить данные клиента."""
    updates = _clean(kwargs)
    if not updates:
        return client

    logger.info("✏️ Обновление клиента #%s: %s", client.id, updates)
    for k, v in updates.items():
        setattr(client, k, v)
    client.save()
    return client


# ──────────────────────────── Удаление ─────────────────────────────


def delete_client(client_id: int) -> None:
    """Удалить клиента без броней."""
    client = get_client_by_id(client_id)
    if client is None:
        logger.warning("❗ Клиент с id=%s не найден для удаления", client_id)
        raise ClientNotFoundError(f"Клиент id={client_id} не найден")
    if client.bookings.count() or client.payment_records.count():
        raise ValueError("Cannot delete a client that has bookings or payments")
    client.delete_instance()
    logger.info("🗑️ Удалён клиент id=%s", client_id)
