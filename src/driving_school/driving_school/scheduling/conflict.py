from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..common.datetime_utils import lesson_end
from ..core.exceptions import ConflictError
from ..lessons.model import Lesson


@dataclass(frozen=True)
class SlotRequest:
    """The time slot a new or edited lesson wants to occupy."""

    instructor_id: int
    start: datetime
    duration: Decimal

    @property
    def end(self) -> datetime:
        return lesson_end(self.start, self.duration)


def intervals_overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    """Half-open intervals overlap iff neither ends before the other starts.

    Back-to-back sessions (e1 == s2) do not overlap.
    """
    return s1 < e2 and s2 < e1


def find_conflict(
    candidate: SlotRequest,
    existing: Iterable[Lesson],
    exclude_id: Optional[int] = None,
) -> Optional[Lesson]:
    """First same-instructor, non-cancelled lesson overlapping the candidate slot."""

    cand_end = candidate.end
    for lesson in existing:
        if lesson.instructor_id != candidate.instructor_id:
            continue
        if lesson.is_cancelled:
            continue
        if exclude_id is not None and lesson.lesson_id == exclude_id:
            continue
        if intervals_overlap(candidate.start, cand_end, lesson.session_date, lesson.end_time):
            return lesson
    return None


def has_conflict(
    candidate: SlotRequest,
    existing: Iterable[Lesson],
    exclude_id: Optional[int] = None,
) -> bool:
    return find_conflict(candidate, existing, exclude_id) is not None


def ensure_no_conflict(
    candidate: SlotRequest,
    existing: Iterable[Lesson],
    exclude_id: Optional[int] = None,
) -> None:
    conflicting = find_conflict(candidate, existing, exclude_id)
    if conflicting is not None:
        raise ConflictError(conflicting)
