from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, to_decimal, to_optional_decimal
from .model import Course
from .repository import CourseRepository


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT course_id, name, category, total_hours, base_price, discounted_price, is_active
                FROM courses
                WHERE course_id=%s
                """,
                (int(course_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Course(
                course_id=int(r["course_id"]),
                name=r["name"],
                category=r["category"],
                total_hours=to_decimal(r["total_hours"]),
                base_price=to_decimal(r["base_price"]),
                discounted_price=to_optional_decimal(r.get("discounted_price")),
                is_active=bool(r["is_active"]),
            )
