"""Month keys: ``YYYY-MM`` strings used to group expenses by calendar month."""
from datetime import date, datetime
from typing import Optional, Union

MONTH_RANGES: tuple[int, ...] = (3, 6, 12, 24)


def month_key(value: Union[date, datetime, str]) -> str:
    """Return the month key for a date, datetime or ISO date string.

    Strings are cut to their first seven characters, so ``"2024-01-15"`` and
    ``"2024-01-15T09:30:00"`` both give ``"2024-01"``.
    """
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    return str(value)[:7]


def parse_month(key: str) -> tuple[int, int]:
    try:
        year_part, month_part = key.split("-")
        year, month = int(year_part), int(month_part)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid month key: {key!r}") from None
    if len(year_part) != 4 or not 1 <= month <= 12:
        raise ValueError(f"Invalid month key: {key!r}")
    return year, month


def shift_month(key: str, offset: int) -> str:
    year, month = parse_month(key)
    index = year * 12 + (month - 1) + offset
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def previous_month(key: str) -> str:
    return shift_month(key, -1)


def next_month(key: str) -> str:
    return shift_month(key, 1)


def current_month(today: Optional[date] = None) -> str:
    return month_key(today or date.today())


def previous_month_of_today(today: Optional[date] = None) -> str:
    return previous_month(current_month(today))


def generate_month_keys(count: int, today: Optional[date] = None) -> list[str]:
    """Contiguous window of ``count`` months ending at the current month, oldest first.

    Counts below one give a one-month window.
    """
    end = current_month(today)
    return [shift_month(end, -i) for i in range(max(count, 1) - 1, -1, -1)]


def month_range(count: int, today: Optional[date] = None) -> tuple[str, str]:
    keys = generate_month_keys(count, today)
    return keys[0], keys[-1]


def parse_date(value: str, default: date) -> date:
    """ISO date from ``value``'s first ten characters, or ``default`` when unparsable."""
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return default


def months_between(start: str, end: str) -> list[str]:
    start_year, start_month = parse_month(start)
    end_year, end_month = parse_month(end)
    span = (end_year * 12 + end_month) - (start_year * 12 + start_month)
    return [shift_month(start, i) for i in range(span + 1)]


def format_month(key: str) -> str:
    year, month = key.split("-")
    return f"{year}年{month}月"


def format_month_for_chart(key: str) -> str:
    year, month = key.split("-")
    return f"{year}/{month}"
