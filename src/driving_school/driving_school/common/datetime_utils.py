from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Union

from ..core.enums import ViewMode
from ..core.exceptions import ValidationError

DateLike = Union[date, datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def combine_local(day: date, at: time) -> datetime:
    return datetime.combine(day, at)


def start_of_day(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def day_range(anchor: DateLike) -> tuple[datetime, datetime]:
    """Half-open [00:00, next 00:00) range of the anchor's day."""
    start = start_of_day(anchor)
    return start, start + timedelta(days=1)


def start_of_week(anchor: DateLike) -> datetime:
    """Monday 00:00 of the anchor's week."""
    start = start_of_day(anchor)
    return start - timedelta(days=start.weekday())


def week_range(anchor: DateLike) -> tuple[datetime, datetime]:
    start = start_of_week(anchor)
    return start, start + timedelta(days=7)


def visible_range(anchor: DateLike, view_mode: ViewMode) -> tuple[datetime, datetime]:
    if view_mode == ViewMode.DAY:
        return day_range(anchor)
    return week_range(anchor)


def shift_anchor(anchor: date, view_mode: ViewMode, direction: int) -> date:
    """Move the anchor one day (day view) or one week (week view)."""
    step = 1 if view_mode == ViewMode.DAY else 7
    return anchor + timedelta(days=step * (1 if direction > 0 else -1))


def hours_to_timedelta(hours: Union[Decimal, float, int]) -> timedelta:
    # Lesson durations are multiples of half an hour; minutes keep them exact.
    return timedelta(minutes=float(Decimal(str(hours)) * 60))


def lesson_end(start: datetime, duration_hours: Union[Decimal, float, int]) -> datetime:
    return start + hours_to_timedelta(duration_hours)


def hour_offset(value: datetime, grid_start_hour: int) -> float:
    """Hours between the grid's first row and value, including minutes."""
    return (value.hour - grid_start_hour) + value.minute / 60


def weekday_index(value: DateLike) -> int:
    """Monday-first column index (Monday=0 .. Sunday=6)."""
    return value.weekday()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
