from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from ..common.persistence import store_errors
from ..common.validators import optional_id, require_id, require_non_negative, require_positive
from ..core.enums import PackageStatus, PaymentMethod, PaymentPlan, PaymentStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..courses.repository import CourseRepository
from ..ledger.calculator import LedgerSnapshot
from ..ledger.service import LedgerService
from ..payments.repository import PaymentRepository
from ..staff.model import StaffContext
from .model import Package
from .repository import PackageRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenedPackage:
    package_id: int
    ledger: LedgerSnapshot
    initial_payment_id: Optional[int] = None


class PackageService:
    """Use cases around training packages (enrollments)."""

    def __init__(
        self,
        packages: PackageRepository,
        courses: CourseRepository,
        payments: PaymentRepository,
        ledger: LedgerService,
    ):
        self._packages = packages
        self._courses = courses
        self._payments = payments
        self._ledger = ledger

    def open_package(
        self,
        *,
        context: StaffContext,
        client_id: int,
        course_id: int,
        instructor_id: Optional[int] = None,
        use_discount: bool = False,
        amount_paid_today: Decimal = Decimal("0"),
    ) -> OpenedPackage:
        """Sell a course: hours and price are copied from the catalog entry."""

        client_id = require_id(client_id, "Client")
        course_id = require_id(course_id, "Course")
        with store_errors("Could not load the course"):
            course = self._courses.get_by_id(course_id)
        if course is None or not course.is_active:
            raise ValidationError("Course is not available")
        paid_today = require_non_negative(amount_paid_today, "Amount paid today")

        # Instructors selling a package keep it on their own roster.
        if instructor_id is None and context.role == Role.INSTRUCTOR:
            instructor_id = context.instructor_id
        instructor_id = optional_id(instructor_id, "Instructor")

        with store_errors("Could not open the package"):
            package_id = self._packages.create(
                client_id=client_id,
                course_id=course.course_id,
                total_hours=course.total_hours,
                contract_price=course.price(use_discount=use_discount),
                instructor_id=instructor_id,
            )
        logger.info("Opened package #%s (client #%s, course %r)", package_id, client_id, course.name)

        payment_id = None
        if paid_today > 0:
            plan = PaymentPlan.FULL if paid_today >= course.price(use_discount=use_discount) else PaymentPlan.INSTALLMENT
            with store_errors("Could not record the initial payment"):
                payment_id = self._payments.create(
                    package_id=package_id,
                    amount=paid_today,
                    method=PaymentMethod.CASH,
                    plan=plan,
                    status=PaymentStatus.COMPLETED,
                    notes="Initial payment",
                    created_by=context.profile_id,
                )

        return OpenedPackage(
            package_id=package_id,
            ledger=self._ledger.recompute(package_id),
            initial_payment_id=payment_id,
        )

    def update_terms(self, *, package_id: int, total_hours: Decimal, contract_price: Decimal) -> LedgerSnapshot:
        package = self._require_package(package_id)
        hours = require_positive(total_hours, "Total hours")
        price = require_non_negative(contract_price, "Contract price")
        with store_errors("Could not update the package"):
            self._packages.update_terms(package_id=package.package_id, total_hours=hours, contract_price=price)
        return self._ledger.recompute(package.package_id)

    def assign_instructor(self, *, context: StaffContext, package_id: int, instructor_id: Optional[int]) -> None:
        """Assign or clear (None) the package's instructor."""

        if not context.is_admin:
            raise AuthorizationError("Only admins can reassign packages")
        package = self._require_package(package_id)
        instructor_id = optional_id(instructor_id, "Instructor")
        with store_errors("Could not assign the instructor"):
            self._packages.set_instructor(package_id=package.package_id, instructor_id=instructor_id)

    def archive(self, *, package_id: int) -> None:
        package = self._require_package(package_id)
        if package.status == PackageStatus.ARCHIVED:
            return
        with store_errors("Could not archive the package"):
            self._packages.set_status(package_id=package.package_id, status=PackageStatus.ARCHIVED)
        logger.info("Archived package #%s", package.package_id)

    def list_for_staff(
        self,
        *,
        context: StaffContext,
        status: Optional[PackageStatus] = PackageStatus.ACTIVE,
    ) -> Sequence[Package]:
        """All packages for admins, only their own for instructors."""

        if not context.is_admin and context.instructor_id is None:
            return []
        instructor_id = None if context.is_admin else context.instructor_id
        with store_errors("Could not load packages"):
            return self._packages.list_packages(status=status, instructor_id=instructor_id)

    def _require_package(self, package_id: int) -> Package:
        package_id = require_id(package_id, "Package")
        with store_errors("Could not load the package"):
            package = self._packages.get_by_id(package_id)
        if package is None:
            raise ValidationError(f"Package #{package_id} does not exist")
        return package
