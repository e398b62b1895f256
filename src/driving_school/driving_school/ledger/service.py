from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import LedgerFetchError, ValidationError
from ..lessons.repository import LessonRepository
from ..packages.repository import PackageRepository
from ..payments.repository import PaymentRepository
from .calculator import LedgerSnapshot, PackageLedger

logger = logging.getLogger(__name__)


class LedgerService:
    """Loads a package's source rows and projects them through PackageLedger.

    Every call aggregates from the current rows; nothing is cached or written back.
    """

    def __init__(
        self,
        packages: PackageRepository,
        lessons: LessonRepository,
        payments: PaymentRepository,
        *,
        ledger: Optional[PackageLedger] = None,
    ):
        self._packages = packages
        self._lessons = lessons
        self._payments = payments
        self._ledger = ledger or PackageLedger()

    def recompute(self, package_id: int) -> LedgerSnapshot:
        try:
            package = self._packages.get_by_id(int(package_id))
            if package is None:
                raise ValidationError(f"Package #{package_id} does not exist")
            lessons = self._lessons.list_for_package(package.package_id)
            payments = self._payments.list_for_package(package.package_id)
        except ValidationError:
            raise
        except Exception as e:
            logger.warning("Ledger fetch failed for package #%s: %s", package_id, e)
            raise LedgerFetchError(f"Could not load hours and payments for package #{package_id}: {e}") from e

        return self._ledger.compute(package, lessons, payments)
