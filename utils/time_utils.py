import calendar
from datetime import date, datetime

DISPLAY_DATE_FORMAT = "%d-%b-%Y"


def now_iso() -> str:
    """Timestamp stored inside workflow steps and data-received flags."""
    return datetime.now().isoformat(timespec="seconds")


def as_date(value: date | datetime | str | None) -> date | None:
    """Normalize ``YYYY-MM-DD`` strings and datetimes to :class:`date`."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def format_date(value: date | str | None) -> str:
    """``2025-06-10`` → ``10-Jun-2025``."""
    parsed = as_date(value)
    if parsed is None:
        return ""
    return parsed.strftime(DISPLAY_DATE_FORMAT)


def format_date_range(first: date | None, last: date | None) -> str | None:
    if first is None:
        return None
    if last is None or first == last:
        return format_date(first)
    return f"{format_date(first)} - {format_date(last)}"


def month_bounds(today: date) -> tuple[date, date]:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def quarter_bounds(today: date) -> tuple[date, date]:
    first_month = (today.month - 1) // 3 * 3 + 1
    start = date(today.year, first_month, 1)
    _, end = month_bounds(date(today.year, first_month + 2, 1))
    return start, end


def year_bounds(today: date) -> tuple[date, date]:
    return date(today.year, 1, 1), date(today.year, 12, 31)
