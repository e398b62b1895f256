from datetime import date, datetime, time
from decimal import Decimal

import pytest

from src.driving_school.driving_school.common.datetime_utils import (
    day_range,
    hour_offset,
    lesson_end,
    parse_hhmm,
    parse_iso_date,
    shift_anchor,
    week_range,
    weekday_index,
)
from src.driving_school.driving_school.core.enums import ViewMode
from src.driving_school.driving_school.core.exceptions import ValidationError


def test_week_range_starts_on_monday_and_is_half_open():
    start, end = week_range(date(2026, 3, 5))  # Thursday

    assert start == datetime(2026, 3, 2)
    assert end == datetime(2026, 3, 9)


def test_day_range_of_a_datetime_covers_the_whole_day():
    assert day_range(datetime(2026, 3, 5, 15, 45)) == (datetime(2026, 3, 5), datetime(2026, 3, 6))


def test_shift_anchor_moves_by_view_unit():
    anchor = date(2026, 3, 5)

    assert shift_anchor(anchor, ViewMode.DAY, 1) == date(2026, 3, 6)
    assert shift_anchor(anchor, ViewMode.WEEK, -1) == date(2026, 2, 26)


def test_lesson_end_handles_half_hours():
    assert lesson_end(datetime(2026, 3, 5, 10, 0), Decimal("1.5")) == datetime(2026, 3, 5, 11, 30)


def test_hour_offset_and_weekday_index():
    value = datetime(2026, 3, 8, 8, 15)  # Sunday

    assert hour_offset(value, 7) == pytest.approx(1.25)
    assert weekday_index(value) == 6


def test_parsers_reject_bad_input():
    assert parse_iso_date("2026-03-05") == date(2026, 3, 5)
    assert parse_hhmm("09:30") == time(9, 30)

    with pytest.raises(ValidationError):
        parse_iso_date("05/03/2026")
    with pytest.raises(ValidationError):
        parse_hhmm("25:00")
