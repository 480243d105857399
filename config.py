from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from appdirs import user_log_dir
from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    database_url: str = ""
    log_dir: str = field(default_factory=lambda: user_log_dir("studio_desk"))
    log_level: str = "INFO"
    detailed_logging: bool = False
    staff_overdue_days: int = 30
    outstanding_warn_amount: Decimal = Decimal("50000")
    currency_symbol: str = "₹"
    api_host: str = "127.0.0.1"
    api_port: int = 8000


@lru_cache()
def get_settings() -> Settings:
    dotenv_path = Path(__file__).resolve().parent / ".env"
    load_dotenv(dotenv_path)

    return Settings(
        database_url=os.getenv("DATABASE_URL", ""),
        log_dir=os.getenv("LOG_DIR") or user_log_dir("studio_desk"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        detailed_logging=os.getenv("DETAILED_LOGGING", "0").lower() in _TRUTHY,
        staff_overdue_days=int(os.getenv("STAFF_OVERDUE_DAYS", "30")),
        outstanding_warn_amount=Decimal(os.getenv("OUTSTANDING_WARN_AMOUNT", "50000")),
        currency_symbol=os.getenv("CURRENCY_SYMBOL", "₹"),
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )
