from decimal import Decimal

import pytest

from src.driving_school.driving_school.core.enums import PackageStatus, PaymentPlan, PaymentStatus
from src.driving_school.driving_school.core.exceptions import AuthorizationError, PersistenceError, ValidationError
from src.driving_school.driving_school.courses.model import Course
from src.driving_school.driving_school.packages.service import PackageService
from tests.fakes import (
    ADMIN,
    INSTRUCTOR_1,
    InMemoryCourses,
    InMemoryLessons,
    InMemoryPackages,
    InMemoryPayments,
    ledger_for,
    package,
)

COURSE_B = Course(
    course_id=1,
    name="Category B",
    category="B",
    total_hours=Decimal("30"),
    base_price=Decimal("1200"),
    discounted_price=Decimal("1000"),
)
COURSE_OLD = Course(
    course_id=2,
    name="Category C (retired)",
    category="C",
    total_hours=Decimal("40"),
    base_price=Decimal("2000"),
    is_active=False,
)


def _service(packages=()):
    package_repo = InMemoryPackages(packages)
    payment_repo = InMemoryPayments()
    svc = PackageService(
        package_repo,
        InMemoryCourses({1: COURSE_B, 2: COURSE_OLD}),
        payment_repo,
        ledger_for(package_repo, InMemoryLessons(), payment_repo),
    )
    return svc, package_repo, payment_repo


def test_open_package_copies_course_terms():
    svc, packages, payments = _service()

    opened = svc.open_package(context=ADMIN, client_id=7, course_id=1)

    pkg = packages.get_by_id(opened.package_id)
    assert pkg.total_hours == Decimal("30")
    assert pkg.contract_price == Decimal("1200")
    assert pkg.status == PackageStatus.ACTIVE
    assert pkg.instructor_id is None
    assert opened.initial_payment_id is None
    assert payments.list_for_package(opened.package_id) == []
    assert opened.ledger.balance_due == Decimal("1200")


def test_open_package_with_discount_and_first_installment():
    svc, _, payments = _service()

    opened = svc.open_package(
        context=ADMIN, client_id=7, course_id=1, use_discount=True, amount_paid_today=Decimal("400")
    )

    [first] = payments.list_for_package(opened.package_id)
    assert first.plan == PaymentPlan.INSTALLMENT
    assert first.status == PaymentStatus.COMPLETED
    assert opened.ledger.contract_price == Decimal("1000")
    assert opened.ledger.balance_due == Decimal("600")


def test_instructor_selling_a_package_is_assigned_to_it():
    svc, packages, _ = _service()

    opened = svc.open_package(context=INSTRUCTOR_1, client_id=7, course_id=1)

    assert packages.get_by_id(opened.package_id).instructor_id == 1


def test_inactive_or_missing_course_cannot_be_sold():
    svc, _, _ = _service()

    with pytest.raises(ValidationError):
        svc.open_package(context=ADMIN, client_id=7, course_id=2)
    with pytest.raises(ValidationError):
        svc.open_package(context=ADMIN, client_id=7, course_id=9)
    with pytest.raises(ValidationError):
        svc.open_package(context=ADMIN, client_id=7, course_id=1, amount_paid_today=Decimal("-1"))


def test_update_terms_returns_recomputed_ledger():
    svc, _, _ = _service([package(1, total_hours=10, price=500)])

    snap = svc.update_terms(package_id=1, total_hours="12", contract_price="650")

    assert snap.remaining_hours == Decimal("12")
    assert snap.balance_due == Decimal("650")


def test_only_admin_reassigns_and_empty_means_unassigned():
    svc, packages, _ = _service([package(1, instructor_id=1)])

    with pytest.raises(AuthorizationError):
        svc.assign_instructor(context=INSTRUCTOR_1, package_id=1, instructor_id=2)

    svc.assign_instructor(context=ADMIN, package_id=1, instructor_id="")
    assert packages.get_by_id(1).instructor_id is None


def test_archive_and_list_for_staff():
    svc, _, _ = _service([package(1, instructor_id=1), package(2, instructor_id=2), package(3, instructor_id=1)])

    svc.archive(package_id=3)

    assert [p.package_id for p in svc.list_for_staff(context=INSTRUCTOR_1)] == [1]
    assert {p.package_id for p in svc.list_for_staff(context=ADMIN)} == {1, 2}
    assert [p.package_id for p in svc.list_for_staff(context=ADMIN, status=PackageStatus.ARCHIVED)] == [3]


def test_store_failure_is_a_persistence_error():
    svc, packages, _ = _service([package(1)])
    packages.fail_reads = RuntimeError("Can't connect to MySQL server")

    with pytest.raises(PersistenceError):
        svc.update_terms(package_id=1, total_hours="12", contract_price="650")
    with pytest.raises(PersistenceError):
        svc.archive(package_id=1)
