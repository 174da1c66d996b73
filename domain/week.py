"""
Calendar helpers for week-keyed meal plans.

Every date that enters the planning core goes through ``to_local_date`` first.
Aware datetimes are converted to the local timezone before the calendar date
is taken, so a plan stored as "local midnight in UTC" lands on the right day.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import List, Union

DateLike = Union[date, datetime, str]

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
SHORT_DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def parse_iso(value: str) -> date:
    """Parse an ISO-8601 date or datetime string into a local calendar date."""
    text = value.strip()
    if not text:
        raise ValueError("empty date string")
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_local_date(datetime.fromisoformat(text))


def to_local_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string to a local calendar date."""
    if isinstance(value, str):
        return parse_iso(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Unsupported date value: {value!r}")


def week_start(value: DateLike) -> date:
    """Monday of the week containing ``value``."""
    d = to_local_date(value)
    return d - timedelta(days=d.weekday())


def week_key(value: DateLike) -> str:
    """Canonical week key: ISO date string of the week's Monday."""
    return week_start(value).isoformat()


def week_dates(start: DateLike) -> List[date]:
    monday = week_start(start)
    return [monday + timedelta(days=i) for i in range(7)]


def day_index(value: DateLike) -> int:
    """Position of a date inside its plan (0 = Monday)."""
    return to_local_date(value).weekday()


def add_months(value: DateLike, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    d = to_local_date(value)
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def month_grid_start(value: DateLike) -> date:
    """Sunday on or before the first day of the month containing ``value``."""
    first = to_local_date(value).replace(day=1)
    # weekday(): Monday=0 .. Sunday=6
    return first - timedelta(days=(first.weekday() + 1) % 7)


def format_week_range(start: DateLike) -> str:
    monday = week_start(start)
    sunday = monday + timedelta(days=6)
    return f"{monday.strftime('%b')} {monday.day} - {sunday.strftime('%b')} {sunday.day}, {sunday.year}"


def format_day(value: DateLike) -> str:
    d = to_local_date(value)
    return f"{d.strftime('%A, %B')} {d.day}, {d.year}"


def format_month(value: DateLike) -> str:
    return to_local_date(value).strftime("%B %Y")
