from datetime import datetime
from decimal import Decimal

import pytest

from src.driving_school.driving_school.core.enums import LessonStatus
from src.driving_school.driving_school.core.exceptions import LedgerFetchError, PersistenceError, ValidationError
from src.driving_school.driving_school.ledger.service import LedgerService
from tests.fakes import InMemoryLessons, InMemoryPackages, InMemoryPayments, lesson, package, payment


def _service(lessons=(), payments=(), packages=None):
    lesson_repo = InMemoryLessons(lessons)
    payment_repo = InMemoryPayments(payments)
    package_repo = InMemoryPackages(packages if packages is not None else [package()])
    return LedgerService(package_repo, lesson_repo, payment_repo), lesson_repo, payment_repo


def test_recompute_aggregates_current_rows():
    svc, lessons, _ = _service([lesson(1, datetime(2026, 3, 2, 9), 2)], [payment(1, 500)])

    assert svc.recompute(1).remaining_hours == Decimal("8")

    lessons.create(
        package_id=1,
        instructor_id=1,
        session_date=datetime(2026, 3, 3, 9),
        duration=Decimal("1"),
        status=LessonStatus.PLANNED,
    )
    snap = svc.recompute(1)
    assert snap.remaining_hours == Decimal("7")
    assert snap.total_paid == Decimal("500")


def test_missing_package_is_a_validation_error():
    svc, _, _ = _service(packages=[])

    with pytest.raises(ValidationError):
        svc.recompute(5)


def test_fetch_failure_is_surfaced_not_zeroed():
    svc, _, payments = _service()
    payments.fail_reads = RuntimeError("connection lost")

    with pytest.raises(LedgerFetchError) as exc:
        svc.recompute(1)

    assert isinstance(exc.value, PersistenceError)
    assert "connection lost" in str(exc.value)
