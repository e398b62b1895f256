from datetime import datetime
from decimal import Decimal

from src.driving_school.driving_school.core.enums import LessonStatus, PaymentStatus
from src.driving_school.driving_school.ledger.calculator import PackageLedger, check_overage, hours_label
from tests.fakes import lesson, package, payment

T0 = datetime(2026, 3, 2, 10, 0)


def test_remaining_hours_and_progress_for_one_lesson():
    snap = PackageLedger().compute(package(total_hours=10), [lesson(1, T0, 3)], [])

    assert snap.remaining_hours == Decimal("7")
    assert snap.consumed_hours == Decimal("3")
    assert snap.progress_percent == Decimal("30")
    assert not snap.is_over_hours


def test_only_completed_payments_count_towards_paid():
    payments = [payment(1, 3000), payment(2, 5000, PaymentStatus.PENDING)]

    snap = PackageLedger().compute(package(price=12000), [], payments)

    assert snap.total_paid == Decimal("3000")
    assert snap.balance_due == Decimal("9000")
    assert not snap.is_fully_paid


def test_failed_payment_does_not_change_total_paid_and_recompute_is_stable():
    ledger = PackageLedger()
    payments = [payment(1, 3000)]
    first = ledger.compute(package(), [], payments)
    again = ledger.compute(package(), [], payments)

    with_failed = ledger.compute(package(), [], payments + [payment(2, 4000, PaymentStatus.FAILED)])

    assert first.total_paid == again.total_paid == with_failed.total_paid == Decimal("3000")


def test_remaining_plus_consumed_equals_total():
    lessons = [
        lesson(1, T0, 2),
        lesson(2, T0, "1.5", status=LessonStatus.COMPLETED),
        lesson(3, T0, 4, status=LessonStatus.CANCELLED),
        lesson(4, T0, 3, package_id=99),
    ]
    snap = PackageLedger().compute(package(total_hours=10), lessons, [])

    non_cancelled = sum(
        (l.duration for l in lessons if l.package_id == 1 and l.status != LessonStatus.CANCELLED), Decimal("0")
    )
    assert snap.remaining_hours + non_cancelled == snap.total_hours
    assert snap.consumed_hours == Decimal("3.5")


def test_overage_is_negative_remaining_and_progress_is_clamped():
    snap = PackageLedger().compute(package(total_hours=4), [lesson(1, T0, 3), lesson(2, T0, 3)], [])

    assert snap.remaining_hours == Decimal("-2")
    assert snap.is_over_hours
    assert snap.progress_percent == Decimal("100")
    assert hours_label(snap) == "2 over"


def test_zero_hour_package_has_zero_progress():
    snap = PackageLedger().compute(package(total_hours=0), [], [])

    assert snap.progress_percent == Decimal("0")
    assert hours_label(snap) == "0 remaining"


def test_overpayment_gives_negative_balance():
    snap = PackageLedger().compute(package(price=1000), [], [payment(1, 1200)])

    assert snap.balance_due == Decimal("-200")
    assert snap.is_fully_paid


def test_check_overage_warns_instead_of_raising():
    snap = PackageLedger().compute(package(total_hours=10), [lesson(1, T0, 9)], [])

    assert check_overage(snap, Decimal("1")) is None

    warning = check_overage(snap, Decimal("2"))
    assert warning is not None
    assert warning.over_by == Decimal("1")
    assert "11h of 10h" in warning.message


def test_check_overage_ignores_previous_duration_of_edited_lesson():
    snap = PackageLedger().compute(package(total_hours=10), [lesson(1, T0, 9)], [])

    assert check_overage(snap, Decimal("10"), ignore_hours=Decimal("9")) is None


def test_as_dict_serializes_decimals_as_strings():
    data = PackageLedger().compute(package(total_hours=10), [lesson(1, T0, "2.5")], []).as_dict()

    assert data["remaining_hours"] == "7.5"
    assert data["hours_label"] == "7.5 remaining"
