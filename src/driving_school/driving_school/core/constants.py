"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_GRID_START_HOUR = 7
DEFAULT_GRID_END_HOUR = 22
DEFAULT_ROW_HEIGHT = 80

DEFAULT_LESSON_START = "12:00"
DEFAULT_LESSON_DURATION = Decimal("2")
LESSON_DURATION_CHOICES = tuple(Decimal(v) for v in ("0.5", "1", "1.5", "2", "2.5", "3", "4"))
MAX_LESSON_HOURS = Decimal("12")

RECENT_LOGS_ADMIN_LIMIT = 20
RECENT_LOGS_INSTRUCTOR_LIMIT = 10

DAYS_IN_WEEK = 7
