from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from src.driving_school.driving_school.core.enums import LessonStatus
from src.driving_school.driving_school.core.exceptions import ConflictError
from src.driving_school.driving_school.scheduling.conflict import (
    SlotRequest,
    ensure_no_conflict,
    find_conflict,
    has_conflict,
    intervals_overlap,
)
from tests.fakes import lesson

DAY = datetime(2026, 3, 2)


def at(hour, minute=0):
    return DAY.replace(hour=hour, minute=minute)


def test_overlapping_request_conflicts_and_adjacent_does_not():
    existing = [lesson(1, at(10), 2)]

    assert has_conflict(SlotRequest(1, at(11), Decimal("1")), existing)
    assert not has_conflict(SlotRequest(1, at(12), Decimal("1")), existing)
    assert not has_conflict(SlotRequest(1, at(9), Decimal("1")), existing)


def test_overlap_matches_interval_formula():
    base = at(8)
    starts = [base + timedelta(minutes=30 * i) for i in range(8)]
    durations = [Decimal("0.5"), Decimal("1"), Decimal("2")]

    for s1 in starts:
        for d1 in durations:
            for s2 in starts:
                for d2 in durations:
                    e1 = s1 + timedelta(hours=float(d1))
                    e2 = s2 + timedelta(hours=float(d2))
                    expected = s1 < e2 and s2 < e1
                    assert has_conflict(SlotRequest(1, s1, d1), [lesson(7, s2, d2)]) == expected
                    assert intervals_overlap(s1, e1, s2, e2) == expected


def test_editing_a_lesson_in_place_never_conflicts_with_itself():
    existing = [lesson(1, at(10), 2), lesson(2, at(13), 1)]

    assert not has_conflict(SlotRequest(1, at(10), Decimal("2")), existing, exclude_id=1)
    assert find_conflict(SlotRequest(1, at(11), Decimal("2")), existing, exclude_id=1) is None
    assert find_conflict(SlotRequest(1, at(12), Decimal("2")), existing, exclude_id=1).lesson_id == 2


def test_other_instructors_never_conflict():
    existing = [lesson(1, at(10), 2, instructor_id=2)]

    assert not has_conflict(SlotRequest(1, at(10), Decimal("2")), existing)


def test_cancelled_lesson_frees_its_slot():
    existing = [lesson(1, at(10), 2)]
    slot = SlotRequest(1, at(10), Decimal("2"))
    assert has_conflict(slot, existing)

    cancelled = [lesson(1, at(10), 2, status=LessonStatus.CANCELLED)]
    assert not has_conflict(slot, cancelled)


def test_ensure_no_conflict_reports_the_blocking_lesson():
    existing = [lesson(4, at(10), 2)]

    with pytest.raises(ConflictError) as exc:
        ensure_no_conflict(SlotRequest(1, at(11), Decimal("1")), existing)

    assert exc.value.conflicting.lesson_id == 4
    assert "10:00-12:00" in str(exc.value)
