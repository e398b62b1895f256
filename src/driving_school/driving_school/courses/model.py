from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Course:
    """Catalog template a package copies its hours and price from."""

    course_id: int
    name: str
    category: str
    total_hours: Decimal
    base_price: Decimal
    discounted_price: Optional[Decimal] = None
    is_active: bool = True

    @property
    def has_discount(self) -> bool:
        return self.discounted_price is not None

    def price(self, *, use_discount: bool = False) -> Decimal:
        if use_discount and self.has_discount:
            return self.discounted_price
        return self.base_price
