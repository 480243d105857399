"""Валидаторы и нормализаторы входных данных."""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

_PHONE_RE = re.compile(r"^[0-9]{10}$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_phone(phone: str) -> str:
    """Нормализовать номер телефона.

    Args:
        phone: Исходный номер.

    Returns:
        str: Номер из 10 цифр без пробелов и разделителей.
    """
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) != 10:
        raise ValueError(
            f"Неверный формат телефона: ожидается 10 цифр, получили {len(digits)}"
        )
    return digits


def is_valid_phone(phone: str | None) -> bool:
    return bool(_PHONE_RE.match(phone or ""))


def is_valid_email(email: str | None) -> bool:
    """Пустой адрес допустим."""
    if not email:
        return True
    return bool(_EMAIL_RE.match(email))


def normalize_full_name(name: str) -> str:
    """Убрать лишние пробелы в имени."""
    return " ".join(re.split(r"\s+", (name or "").strip()))


def is_blank(value: str | None) -> bool:
    return value is None or str(value).strip() == ""


def is_past_date(value: date, today: date | None = None) -> bool:
    return value < (today or date.today())


def parse_amount(value: str | int | float | Decimal | None) -> Decimal:
    """Привести введённую сумму к ``Decimal``.

    Пробелы, запятые-разделители тысяч и знак рупии отбрасываются.
    """
    if value is None or value == "":
        raise ValueError("Сумма не указана")
    if isinstance(value, Decimal):
        return value
    text = re.sub(r"[\s,₹]", "", str(value))
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Некорректная сумма: {value}") from exc


def require_positive(amount: Decimal, field: str = "Amount") -> Decimal:
    if amount <= 0:
        raise ValueError(f"{field} must be greater than 0")
    return amount


class FormValidationError(ValueError):
    """Ошибки формы по полям: ``{"amount": "Amount must be greater than 0"}``."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


def check_payment_date(
    payment_date: date | None, errors: dict[str, str], today: date | None = None
) -> None:
    """Дата обязательна и не дальше года вперёд."""
    if payment_date is None:
        errors["payment_date"] = "Payment date is required"
        return
    today = today or date.today()
    try:
        limit = today.replace(year=today.year + 1)
    except ValueError:  # 29 февраля
        limit = today.replace(year=today.year + 1, day=28)
    if payment_date > limit:
        errors["payment_date"] = "Date cannot be more than 1 year ahead"
