from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import LessonStatus
from .model import Lesson


class LessonRepository(Protocol):
    def get_by_id(self, lesson_id: int) -> Optional[Lesson]:
        raise NotImplementedError

    def list_range(self, *, instructor_id: int, start: datetime, end: datetime) -> Sequence[Lesson]:
        """Lessons of one instructor with session_date in [start, end), ordered by start."""

        raise NotImplementedError

    def list_for_package(self, package_id: int) -> Sequence[Lesson]:
        raise NotImplementedError

    def list_recent(self, *, instructor_id: Optional[int] = None, limit: int = 10) -> Sequence[Lesson]:
        raise NotImplementedError

    def create(
        self,
        *,
        package_id: int,
        instructor_id: int,
        session_date: datetime,
        duration: Decimal,
        status: LessonStatus,
        location: Optional[str] = None,
        summary: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        lesson_id: int,
        package_id: int,
        instructor_id: int,
        session_date: datetime,
        duration: Decimal,
        status: LessonStatus,
        location: Optional[str] = None,
        summary: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def set_status(self, *, lesson_id: int, status: LessonStatus) -> bool:
        raise NotImplementedError

    def delete(self, *, lesson_id: int) -> bool:
        raise NotImplementedError
