"""Пакет прикладных сервисов.

Подмодули на уровне пакета не импортируются; импортируйте нужные
напрямую, например:
    from services import booking_service
    from services.client_finance import overdue_bookings
"""

__all__: list[str] = []
