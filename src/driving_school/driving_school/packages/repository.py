from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..clients.model import ClientRef
from ..core.enums import PackageStatus
from .model import Package, PackageOption


class PackageRepository(Protocol):
    def get_by_id(self, package_id: int) -> Optional[Package]:
        raise NotImplementedError

    def create(
        self,
        *,
        client_id: int,
        course_id: Optional[int],
        total_hours: Decimal,
        contract_price: Decimal,
        instructor_id: Optional[int] = None,
    ) -> int:
        """Create an ACTIVE package. Returns package_id."""

        raise NotImplementedError

    def update_terms(self, *, package_id: int, total_hours: Decimal, contract_price: Decimal) -> bool:
        raise NotImplementedError

    def set_instructor(self, *, package_id: int, instructor_id: Optional[int]) -> bool:
        raise NotImplementedError

    def set_status(self, *, package_id: int, status: PackageStatus) -> bool:
        raise NotImplementedError

    def list_packages(
        self,
        *,
        status: Optional[PackageStatus] = None,
        instructor_id: Optional[int] = None,
    ) -> Sequence[Package]:
        raise NotImplementedError

    def list_options(self, *, status: PackageStatus = PackageStatus.ACTIVE) -> Sequence[PackageOption]:
        """Packages joined with their client for selection lists."""

        raise NotImplementedError

    def get_client_ref(self, package_id: int) -> Optional[ClientRef]:
        raise NotImplementedError
