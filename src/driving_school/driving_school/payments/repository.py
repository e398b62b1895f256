from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentMethod, PaymentPlan, PaymentStatus
from .model import Payment


class PaymentRepository(Protocol):
    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def list_for_package(self, package_id: int) -> Sequence[Payment]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def delete(self, *, payment_id: int) -> bool:
        raise NotImplementedError
