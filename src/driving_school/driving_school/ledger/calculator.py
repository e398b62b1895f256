from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ..lessons.model import Lesson
from ..packages.model import Package
from ..payments.model import Payment

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LedgerSnapshot:
    """Derived state of one package, recomputed from source rows on every read."""

    package_id: int
    total_hours: Decimal
    consumed_hours: Decimal
    remaining_hours: Decimal
    contract_price: Decimal
    total_paid: Decimal
    balance_due: Decimal
    progress_percent: Decimal

    @property
    def is_over_hours(self) -> bool:
        return self.remaining_hours < 0

    @property
    def is_fully_paid(self) -> bool:
        return self.balance_due <= 0

    def as_dict(self) -> dict:
        return {
            "package_id": self.package_id,
            "total_hours": str(self.total_hours),
            "consumed_hours": str(self.consumed_hours),
            "remaining_hours": str(self.remaining_hours),
            "contract_price": str(self.contract_price),
            "total_paid": str(self.total_paid),
            "balance_due": str(self.balance_due),
            "progress_percent": str(self.progress_percent),
            "hours_label": hours_label(self),
        }


@dataclass(frozen=True)
class HourOverageWarning:
    """Soft-limit notice: the package would be consumed beyond its contracted hours."""

    package_id: int
    total_hours: Decimal
    projected_hours: Decimal

    @property
    def over_by(self) -> Decimal:
        return self.projected_hours - self.total_hours

    @property
    def message(self) -> str:
        return (
            f"Package #{self.package_id} would use {_fmt_hours(self.projected_hours)}h "
            f"of {_fmt_hours(self.total_hours)}h ({_fmt_hours(self.over_by)}h over)"
        )


class PackageLedger:
    """Pure projection: package + lessons + payments -> remaining hours and balance."""

    @staticmethod
    def consumed_hours(package_id: int, lessons: Iterable[Lesson]) -> Decimal:
        return sum(
            (l.duration for l in lessons if l.package_id == package_id and not l.is_cancelled),
            _ZERO,
        )

    @staticmethod
    def total_paid(package_id: int, payments: Iterable[Payment]) -> Decimal:
        return sum(
            (p.amount for p in payments if p.package_id == package_id and p.counts_as_paid),
            _ZERO,
        )

    @staticmethod
    def progress_percent(total_hours: Decimal, consumed_hours: Decimal) -> Decimal:
        if total_hours <= 0:
            return _ZERO
        percent = consumed_hours / total_hours * _HUNDRED
        return min(max(percent, _ZERO), _HUNDRED)

    def compute(self, package: Package, lessons: Iterable[Lesson], payments: Iterable[Payment]) -> LedgerSnapshot:
        consumed = self.consumed_hours(package.package_id, lessons)
        paid = self.total_paid(package.package_id, payments)
        return LedgerSnapshot(
            package_id=package.package_id,
            total_hours=package.total_hours,
            consumed_hours=consumed,
            # Not clamped: a negative value is a legitimate overage.
            remaining_hours=package.total_hours - consumed,
            contract_price=package.contract_price,
            total_paid=paid,
            balance_due=package.contract_price - paid,
            progress_percent=self.progress_percent(package.total_hours, consumed),
        )


def check_overage(
    snapshot: LedgerSnapshot,
    additional_hours: Decimal,
    *,
    ignore_hours: Decimal = _ZERO,
) -> Optional[HourOverageWarning]:
    """Warn (never raise) if adding a lesson pushes consumption over the contract.

    ignore_hours discounts hours already counted in the snapshot, e.g. the old
    duration of a lesson being edited.
    """

    projected = snapshot.consumed_hours - ignore_hours + additional_hours
    if projected <= snapshot.total_hours:
        return None
    return HourOverageWarning(
        package_id=snapshot.package_id,
        total_hours=snapshot.total_hours,
        projected_hours=projected,
    )


def hours_label(snapshot: LedgerSnapshot) -> str:
    if snapshot.is_over_hours:
        return f"{_fmt_hours(-snapshot.remaining_hours)} over"
    return f"{_fmt_hours(snapshot.remaining_hours)} remaining"


def _fmt_hours(value: Decimal) -> str:
    return format(value.normalize(), "f")
