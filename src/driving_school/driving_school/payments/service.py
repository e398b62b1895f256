from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from ..common.persistence import store_errors
from ..common.validators import optional_text, require_id, require_positive
from ..core.enums import PaymentMethod, PaymentPlan, PaymentStatus
from ..core.exceptions import ValidationError
from ..ledger.calculator import LedgerSnapshot
from ..ledger.service import LedgerService
from ..packages.repository import PackageRepository
from ..staff.model import StaffContext
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


def _parse_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


class PaymentService:
    """Record money against a package; each mutation returns the fresh ledger."""

    def __init__(self, payments: PaymentRepository, packages: PackageRepository, ledger: LedgerService):
        self._payments = payments
        self._packages = packages
        self._ledger = ledger

    def suggested_amount(self, package_id: int) -> Decimal:
        """Pre-filled amount in the payment form: what is still owed."""

        snapshot = self._ledger.recompute(package_id)
        return max(snapshot.balance_due, Decimal("0"))

    def record(
        self,
        *,
        context: StaffContext,
        package_id: int,
        amount: Decimal,
        method: str | PaymentMethod = PaymentMethod.CASH,
        plan: str | PaymentPlan = PaymentPlan.FULL,
        status: str | PaymentStatus = PaymentStatus.COMPLETED,
        notes: Optional[str] = None,
    ) -> tuple[int, LedgerSnapshot]:
        package_id = self._require_package(package_id)
        fields = dict(
            package_id=package_id,
            amount=require_positive(amount, "Amount"),
            method=_parse_enum(PaymentMethod, method, "Payment method"),
            plan=_parse_enum(PaymentPlan, plan, "Payment plan"),
            status=_parse_enum(PaymentStatus, status, "Payment status"),
            notes=optional_text(notes),
            created_by=context.profile_id,
        )
        with store_errors("Could not record the payment"):
            payment_id = self._payments.create(**fields)
        logger.info("Recorded payment #%s of %s on package #%s", payment_id, amount, package_id)
        return payment_id, self._ledger.recompute(package_id)

    def update(
        self,
        *,
        payment_id: int,
        package_id: int,
        amount: Decimal,
        method: str | PaymentMethod,
        plan: str | PaymentPlan,
        status: str | PaymentStatus,
        notes: Optional[str] = None,
    ) -> LedgerSnapshot:
        payment_id = require_id(payment_id, "Payment")
        existing = self._require_payment(payment_id)
        package_id = self._require_package(package_id)

        fields = dict(
            payment_id=payment_id,
            package_id=package_id,
            amount=require_positive(amount, "Amount"),
            method=_parse_enum(PaymentMethod, method, "Payment method"),
            plan=_parse_enum(PaymentPlan, plan, "Payment plan"),
            status=_parse_enum(PaymentStatus, status, "Payment status"),
            notes=optional_text(notes),
        )
        with store_errors("Could not update the payment"):
            self._payments.update(**fields)
        if existing.package_id != package_id:
            logger.info("Payment #%s moved from package #%s to #%s", payment_id, existing.package_id, package_id)
        return self._ledger.recompute(package_id)

    def delete(self, *, payment_id: int) -> LedgerSnapshot:
        payment_id = require_id(payment_id, "Payment")
        existing = self._require_payment(payment_id)
        with store_errors("Could not delete the payment"):
            deleted = self._payments.delete(payment_id=payment_id)
        if not deleted:
            raise ValidationError(f"Payment #{payment_id} does not exist")
        logger.info("Deleted payment #%s of package #%s", payment_id, existing.package_id)
        return self._ledger.recompute(existing.package_id)

    def _require_payment(self, payment_id: int):
        with store_errors("Could not load the payment"):
            existing = self._payments.get_by_id(payment_id)
        if existing is None:
            raise ValidationError(f"Payment #{payment_id} does not exist")
        return existing

    def _require_package(self, package_id: int) -> int:
        package_id = require_id(package_id, "Package")
        with store_errors("Could not load the package"):
            package = self._packages.get_by_id(package_id)
        if package is None:
            raise ValidationError(f"Package #{package_id} does not exist")
        return package_id
