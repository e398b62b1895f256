from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..clients.model import ClientRef
from ..core.enums import PackageStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal, to_optional_int
from .model import Package, PackageOption
from .repository import PackageRepository

_COLUMNS = "package_id, client_id, course_id, total_hours, contract_price, status, instructor_id, created_at"


def _row_to_package(r: dict) -> Package:
    return Package(
        package_id=int(r["package_id"]),
        client_id=int(r["client_id"]),
        course_id=to_optional_int(r.get("course_id")),
        total_hours=to_decimal(r["total_hours"]),
        contract_price=to_decimal(r["contract_price"]),
        status=PackageStatus(r["status"]),
        instructor_id=to_optional_int(r.get("instructor_id")),
        created_at=r.get("created_at"),
    )


def _client_label(r: dict) -> str:
    label = f"{r.get('name') or ''} {r.get('last_name') or ''}".strip()
    return label or "Unnamed Client"


def _exists(cur, package_id: int) -> bool:
    # MySQL reports 0 affected rows when an UPDATE changes nothing.
    cur.execute("SELECT package_id FROM course_packages WHERE package_id=%s", (int(package_id),))
    return fetchone(cur) is not None


class MySQLPackageRepository(PackageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, package_id: int) -> Optional[Package]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM course_packages WHERE package_id=%s", (int(package_id),))
            r = fetchone(cur)
            return _row_to_package(r) if r else None

    def create(
        self,
        *,
        client_id: int,
        course_id: Optional[int],
        total_hours: Decimal,
        contract_price: Decimal,
        instructor_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO course_packages(client_id, course_id, total_hours, contract_price, status, instructor_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(client_id), course_id, total_hours, contract_price, PackageStatus.ACTIVE.value, instructor_id),
            )
            return int(cur.lastrowid)

    def update_terms(self, *, package_id: int, total_hours: Decimal, contract_price: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE course_packages SET total_hours=%s, contract_price=%s WHERE package_id=%s",
                (total_hours, contract_price, int(package_id)),
            )
            return cur.rowcount > 0 or _exists(cur, package_id)

    def set_instructor(self, *, package_id: int, instructor_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE course_packages SET instructor_id=%s WHERE package_id=%s",
                (instructor_id, int(package_id)),
            )
            return cur.rowcount > 0 or _exists(cur, package_id)

    def set_status(self, *, package_id: int, status: PackageStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE course_packages SET status=%s WHERE package_id=%s",
                (status.value, int(package_id)),
            )
            return cur.rowcount > 0 or _exists(cur, package_id)

    def list_packages(
        self,
        *,
        status: Optional[PackageStatus] = None,
        instructor_id: Optional[int] = None,
    ) -> Sequence[Package]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if instructor_id is not None:
            clauses.append("instructor_id=%s")
            params.append(int(instructor_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM course_packages WHERE {where} ORDER BY created_at DESC, package_id DESC",
                tuple(params),
            )
            return [_row_to_package(r) for r in fetchall(cur)]

    def list_options(self, *, status: PackageStatus = PackageStatus.ACTIVE) -> Sequence[PackageOption]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.package_id, p.instructor_id, c.client_id, c.name, c.last_name, c.phone, c.address
                FROM course_packages p
                JOIN clients c ON c.client_id = p.client_id
                WHERE p.status=%s
                ORDER BY c.name, c.last_name, p.package_id
                """,
                (status.value,),
            )
            return [
                PackageOption(
                    package_id=int(r["package_id"]),
                    client_id=int(r["client_id"]),
                    client_label=_client_label(r),
                    instructor_id=to_optional_int(r.get("instructor_id")),
                    phone=r.get("phone"),
                    address=r.get("address"),
                )
                for r in fetchall(cur)
            ]

    def get_client_ref(self, package_id: int) -> Optional[ClientRef]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.client_id, c.name, c.last_name, c.phone, c.address
                FROM course_packages p
                JOIN clients c ON c.client_id = p.client_id
                WHERE p.package_id=%s
                """,
                (int(package_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClientRef(
                client_id=int(r["client_id"]),
                display_name=_client_label(r),
                phone=r.get("phone"),
                address=r.get("address"),
            )
