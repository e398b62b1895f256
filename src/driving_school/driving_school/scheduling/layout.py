from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..common.datetime_utils import hour_offset, weekday_index
from ..core.constants import DAYS_IN_WEEK, DEFAULT_GRID_END_HOUR, DEFAULT_GRID_START_HOUR, DEFAULT_ROW_HEIGHT
from ..core.enums import ViewMode
from ..lessons.model import Lesson


@dataclass(frozen=True)
class GridConfig:
    """Presentation settings of the day/week grid (not correctness constraints)."""

    start_hour: int = DEFAULT_GRID_START_HOUR
    end_hour: int = DEFAULT_GRID_END_HOUR
    row_height: int = DEFAULT_ROW_HEIGHT

    @property
    def total_height(self) -> int:
        return (self.end_hour - self.start_hour + 1) * self.row_height

    def hour_labels(self) -> list[str]:
        return [f"{h:02d}:00" for h in range(self.start_hour, self.end_hour + 1)]


@dataclass(frozen=True)
class LessonPlacement:
    lesson_id: int
    top: float
    height: float
    column: int
    left_percent: float
    width_percent: float

    def as_dict(self) -> dict:
        return {
            "lesson_id": self.lesson_id,
            "top": self.top,
            "height": self.height,
            "column": self.column,
            "left_percent": self.left_percent,
            "width_percent": self.width_percent,
        }


def place_lesson(lesson: Lesson, view_mode: ViewMode, grid: GridConfig) -> LessonPlacement:
    top = hour_offset(lesson.session_date, grid.start_hour) * grid.row_height
    height = float(lesson.duration) * grid.row_height

    if view_mode == ViewMode.DAY:
        return LessonPlacement(lesson.lesson_id, top, height, 0, 0.0, 100.0)

    column = weekday_index(lesson.session_date)
    width = 100 / DAYS_IN_WEEK
    return LessonPlacement(lesson.lesson_id, top, height, column, column * width, width)


def layout_lessons(lessons: Iterable[Lesson], view_mode: ViewMode, grid: GridConfig) -> list[LessonPlacement]:
    return [place_lesson(l, view_mode, grid) for l in lessons]
