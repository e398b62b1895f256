from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentMethod, PaymentPlan, PaymentStatus


@dataclass(frozen=True)
class Payment:
    """An amount applied to a package's contract price."""

    payment_id: int
    package_id: int
    amount: Decimal
    method: PaymentMethod = PaymentMethod.CASH
    plan: PaymentPlan = PaymentPlan.FULL
    status: PaymentStatus = PaymentStatus.COMPLETED
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def counts_as_paid(self) -> bool:
        return self.status == PaymentStatus.COMPLETED
