from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import lesson_end
from ..core.enums import LessonStatus


@dataclass(frozen=True)
class Lesson:
    """One scheduled (or ad-hoc logged) training session.

    Occupies [session_date, session_date + duration) on the instructor's
    calendar and consumes `duration` hours of its package unless cancelled.
    client_label is display-only, filled by joined reads.
    """

    lesson_id: int
    package_id: int
    instructor_id: int
    session_date: datetime
    duration: Decimal
    status: LessonStatus = LessonStatus.PLANNED
    location: Optional[str] = None
    summary: Optional[str] = None
    client_label: Optional[str] = None

    @property
    def end_time(self) -> datetime:
        return lesson_end(self.session_date, self.duration)

    @property
    def is_cancelled(self) -> bool:
        return self.status == LessonStatus.CANCELLED


@dataclass(frozen=True)
class LessonDraft:
    """Form input for creating (lesson_id=None) or editing a lesson."""

    package_id: int
    instructor_id: Optional[int]
    session_date: datetime
    duration: Decimal
    location: Optional[str] = None
    summary: Optional[str] = None
    status: LessonStatus = LessonStatus.PLANNED
    lesson_id: Optional[int] = None

    @property
    def is_edit(self) -> bool:
        return self.lesson_id is not None
