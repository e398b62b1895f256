from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_optional_int
from .model import Instructor
from .repository import InstructorRepository

_COLUMNS = "instructor_id, full_name, profile_id, is_active"


def _row_to_instructor(r: dict) -> Instructor:
    return Instructor(
        instructor_id=int(r["instructor_id"]),
        full_name=r["full_name"],
        profile_id=to_optional_int(r.get("profile_id")),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLInstructorRepository(InstructorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[Instructor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM instructors WHERE is_active=1 ORDER BY full_name, instructor_id")
            return [_row_to_instructor(r) for r in fetchall(cur)]

    def get_by_id(self, instructor_id: int) -> Optional[Instructor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM instructors WHERE instructor_id=%s", (int(instructor_id),))
            r = fetchone(cur)
            return _row_to_instructor(r) if r else None
