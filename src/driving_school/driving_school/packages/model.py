from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PackageStatus


@dataclass(frozen=True)
class Package:
    """A purchased training contract with a fixed hour budget and price.

    instructor_id is None while the package is unassigned. Consumed hours,
    payments and balance are never stored here, see ledger.calculator.
    """

    package_id: int
    client_id: int
    course_id: Optional[int]
    total_hours: Decimal
    contract_price: Decimal
    status: PackageStatus = PackageStatus.ACTIVE
    instructor_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == PackageStatus.ACTIVE


@dataclass(frozen=True)
class PackageOption:
    """Read-model for the "choose a student" list of the lesson form."""

    package_id: int
    client_id: int
    client_label: str
    instructor_id: Optional[int]
    phone: Optional[str] = None
    address: Optional[str] = None
