from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PaymentMethod, PaymentPlan, PaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal, to_optional_int
from .model import Payment
from .repository import PaymentRepository

_COLUMNS = "payment_id, package_id, amount, payment_method, payment_plan, status, notes, created_by, created_at"


def _row_to_payment(r: dict) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        package_id=int(r["package_id"]),
        amount=to_decimal(r["amount"]),
        method=PaymentMethod(r["payment_method"]),
        plan=PaymentPlan(r["payment_plan"]),
        status=PaymentStatus(r["status"]),
        notes=r.get("notes"),
        created_by=to_optional_int(r.get("created_by")),
        created_at=r.get("created_at"),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payments WHERE payment_id=%s", (int(payment_id),))
            r = fetchone(cur)
            return _row_to_payment(r) if r else None

    def list_for_package(self, package_id: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payments WHERE package_id=%s ORDER BY created_at, payment_id",
                (int(package_id),),
            )
            return [_row_to_payment(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        package_id: int,
        amount: Decimal,
        method: PaymentMethod,
        plan: PaymentPlan,
        status: PaymentStatus,
        notes: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(package_id, amount, payment_method, payment_plan, status, notes, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(package_id), amount, method.value, plan.value, status.value, notes, created_by),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        payment_id: int,
        package_id: int,
        amount: Decimal,
        method: PaymentMethod,
        plan: PaymentPlan,
        status: PaymentStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payments
                SET package_id=%s, amount=%s, payment_method=%s, payment_plan=%s, status=%s, notes=%s
                WHERE payment_id=%s
                """,
                (int(package_id), amount, method.value, plan.value, status.value, notes, int(payment_id)),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when an UPDATE changes nothing.
            cur.execute("SELECT payment_id FROM payments WHERE payment_id=%s", (int(payment_id),))
            return fetchone(cur) is not None

    def delete(self, *, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE payment_id=%s", (int(payment_id),))
            return cur.rowcount > 0
