from decimal import Decimal

import pytest

from src.driving_school.driving_school.core.enums import PaymentMethod, PaymentStatus
from src.driving_school.driving_school.core.exceptions import PersistenceError, ValidationError
from src.driving_school.driving_school.payments.service import PaymentService
from tests.fakes import ADMIN, InMemoryLessons, InMemoryPackages, InMemoryPayments, ledger_for, package, payment


def _service(payments=()):
    package_repo = InMemoryPackages([package(1, price=12000)])
    payment_repo = InMemoryPayments(payments)
    svc = PaymentService(payment_repo, package_repo, ledger_for(package_repo, InMemoryLessons(), payment_repo))
    return svc, payment_repo


def test_record_returns_updated_balance():
    svc, payments = _service([payment(1, 3000)])

    payment_id, snap = svc.record(context=ADMIN, package_id=1, amount="5000", method="card", status="pending")

    assert payments.get_by_id(payment_id).method == PaymentMethod.CARD
    assert payments.get_by_id(payment_id).created_by == ADMIN.profile_id
    assert snap.total_paid == Decimal("3000")
    assert snap.balance_due == Decimal("9000")


def test_completing_a_pending_payment_reduces_balance():
    svc, _ = _service([payment(1, 3000), payment(2, 5000, PaymentStatus.PENDING)])

    snap = svc.update(payment_id=2, package_id=1, amount="5000", method="transfer", plan="installment", status="completed")

    assert snap.balance_due == Decimal("4000")


def test_delete_payment_recomputes_ledger():
    svc, payments = _service([payment(1, 3000)])

    snap = svc.delete(payment_id=1)

    assert payments.get_by_id(1) is None
    assert snap.total_paid == Decimal("0")
    with pytest.raises(ValidationError):
        svc.delete(payment_id=1)


def test_suggested_amount_is_balance_never_negative():
    assert _service([payment(1, 3000)])[0].suggested_amount(1) == Decimal("9000")
    assert _service([payment(1, 13000)])[0].suggested_amount(1) == Decimal("0")


def test_invalid_payments_are_rejected():
    svc, payments = _service()

    with pytest.raises(ValidationError):
        svc.record(context=ADMIN, package_id=1, amount="0")
    with pytest.raises(ValidationError):
        svc.record(context=ADMIN, package_id=1, amount="10", method="cheque")
    with pytest.raises(ValidationError):
        svc.record(context=ADMIN, package_id=2, amount="10")
    assert payments.list_for_package(1) == []


def test_store_failure_on_record_is_a_persistence_error():
    svc, payments = _service()
    payments.fail_writes = RuntimeError("Lost connection to MySQL server during query")

    with pytest.raises(PersistenceError) as exc:
        svc.record(context=ADMIN, package_id=1, amount="100")

    assert "Lost connection" in str(exc.value)
