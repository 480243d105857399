"""Зависимости FastAPI: соединение с базой, снимок данных и текущий пользователь."""

from fastapi import Depends, Header

from database.db import db
from services.access_control import AccessDeniedError, CurrentUser, can_access_route
from services.snapshot import Snapshot, SnapshotStore
from services.staff_service import get_user

_store = SnapshotStore()


def get_session():
    """Соединение на время запроса."""
    with db.connection_context():
        yield


def get_store() -> SnapshotStore:
    return _store


def get_snapshot(
    _session=Depends(get_session), store: SnapshotStore = Depends(get_store)
) -> Snapshot:
    return store.ensure_loaded()


def get_current_user(
    x_user_id: int | None = Header(None), _session=Depends(get_session)
) -> CurrentUser:
    if x_user_id is None:
        raise AccessDeniedError("Не указан пользователь (X-User-Id)")
    user = get_user(x_user_id)
    if user is None:
        raise AccessDeniedError(f"Пользователь id={x_user_id} не найден")
    return CurrentUser.from_model(user)


def route_guard(route: str):
    """Зависимость, пропускающая только роли, которым открыт ``route``."""

    def _guard(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not can_access_route(user, route):
            raise AccessDeniedError(f"Недостаточно прав: {route}")
        return user

    return _guard
