from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import LessonStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import Lesson
from .repository import LessonRepository

_SELECT = """
    SELECT
        l.lesson_id,
        l.package_id,
        l.instructor_id,
        l.session_date,
        l.duration,
        l.status,
        l.location,
        l.summary,
        c.name,
        c.last_name
    FROM lessons l
    JOIN course_packages p ON p.package_id = l.package_id
    JOIN clients c ON c.client_id = p.client_id
"""


def _row_to_lesson(r: dict) -> Lesson:
    label = f"{r.get('name') or ''} {r.get('last_name') or ''}".strip() or None
    return Lesson(
        lesson_id=int(r["lesson_id"]),
        package_id=int(r["package_id"]),
        instructor_id=int(r["instructor_id"]),
        session_date=r["session_date"],
        duration=to_decimal(r["duration"]),
        status=LessonStatus(r["status"]),
        location=r.get("location"),
        summary=r.get("summary"),
        client_label=label,
    )


class MySQLLessonRepository(LessonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, lesson_id: int) -> Optional[Lesson]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE l.lesson_id=%s", (int(lesson_id),))
            r = fetchone(cur)
            return _row_to_lesson(r) if r else None

    def list_range(self, *, instructor_id: int, start: datetime, end: datetime) -> Sequence[Lesson]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE l.instructor_id=%s AND l.session_date >= %s AND l.session_date < %s
                ORDER BY l.session_date ASC, l.lesson_id ASC
                """,
                (int(instructor_id), start, end),
            )
            return [_row_to_lesson(r) for r in fetchall(cur)]

    def list_for_package(self, package_id: int) -> Sequence[Lesson]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE l.package_id=%s ORDER BY l.session_date ASC",
                (int(package_id),),
            )
            return [_row_to_lesson(r) for r in fetchall(cur)]

    def list_recent(self, *, instructor_id: Optional[int] = None, limit: int = 10) -> Sequence[Lesson]:
        clauses = ["1=1"]
        params: list[object] = []
        if instructor_id is not None:
            clauses.append("l.instructor_id=%s")
            params.append(int(instructor_id))
        params.append(int(limit))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY l.session_date DESC, l.lesson_id DESC LIMIT %s",
                tuple(params),
            )
            return [_row_to_lesson(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO lessons(package_id, instructor_id, session_date, duration, status, location, summary)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(package_id), int(instructor_id), session_date, duration, status.value, location, summary),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE lessons
                SET package_id=%s, instructor_id=%s, session_date=%s, duration=%s, status=%s, location=%s, summary=%s
                WHERE lesson_id=%s
                """,
                (
                    int(package_id),
                    int(instructor_id),
                    session_date,
                    duration,
                    status.value,
                    location,
                    summary,
                    int(lesson_id),
                ),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when an UPDATE changes nothing.
            cur.execute("SELECT lesson_id FROM lessons WHERE lesson_id=%s", (int(lesson_id),))
            return fetchone(cur) is not None

    def set_status(self, *, lesson_id: int, status: LessonStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE lessons SET status=%s WHERE lesson_id=%s", (status.value, int(lesson_id)))
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT lesson_id FROM lessons WHERE lesson_id=%s", (int(lesson_id),))
            return fetchone(cur) is not None

    def delete(self, *, lesson_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM lessons WHERE lesson_id=%s", (int(lesson_id),))
            return cur.rowcount > 0
