from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def parse_iso_time(value: str) -> time:
    return time.fromisoformat(value)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in [start, end]."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def clip_range(start: date, end: date, lo: date, hi: date) -> tuple[date, date] | None:
    s = max(start, lo)
    e = min(end, hi)
    if s > e:
        return None
    return s, e


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end (negative if end is earlier)."""
    return int((end - start).total_seconds() // 60)


def tenure_months(hire_date: date, on: date) -> int:
    return (on.year - hire_date.year) * 12 + (on.month - hire_date.month)
