import logging

import uvicorn

from config import Settings, get_settings
from database.init import create_tables, init_from_env
from utils.logging_config import setup_logging

__all__ = ["main"]


def main(settings: Settings | None = None) -> int:
    """Запускает HTTP-сервис студии."""

    settings = settings or get_settings()
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL не задан в .env")

    init_from_env(settings.database_url)
    setup_logging(settings)
    logger = logging.getLogger(__name__)

    # ───── Проверка и подготовка окружения ─────
    create_tables()

    logger.info("🚀 Сервис запускается на %s:%s", settings.api_host, settings.api_port)
    uvicorn.run("app.main:app", host=settings.api_host, port=settings.api_port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
