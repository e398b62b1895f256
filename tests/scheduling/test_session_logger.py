from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from src.driving_school.driving_school.core.enums import LessonStatus, PackageStatus, Role
from src.driving_school.driving_school.core.exceptions import AuthorizationError, PersistenceError, ValidationError
from src.driving_school.driving_school.scheduling.session_logger import SessionLogger
from src.driving_school.driving_school.staff.model import StaffContext
from tests.fakes import (
    ADMIN,
    INSTRUCTOR_1,
    InMemoryLessons,
    InMemoryPackages,
    InMemoryPayments,
    ledger_for,
    lesson,
    package,
)

NOW = datetime(2026, 3, 4, 16, 30)


def _logger(context=INSTRUCTOR_1, lessons=(), packages=None):
    lesson_repo = InMemoryLessons(lessons)
    package_repo = InMemoryPackages(
        packages
        if packages is not None
        else [
            package(1, total_hours=4, instructor_id=1),
            package(2, instructor_id=2),
            package(3, instructor_id=None),
            package(4, instructor_id=1, status=PackageStatus.ARCHIVED),
        ]
    )
    svc = SessionLogger(
        context,
        lesson_repo,
        package_repo,
        ledger_for(package_repo, lesson_repo, InMemoryPayments()),
        clock=lambda: NOW,
    )
    return svc, lesson_repo


def test_log_session_records_completed_lesson_now():
    svc, lessons = _logger()

    logged = svc.log_session(1, Decimal("1.5"), summary="  parking practice ")

    row = lessons.get_by_id(logged.lesson_id)
    assert row.status == LessonStatus.COMPLETED
    assert row.session_date == NOW
    assert row.instructor_id == 1
    assert row.summary == "parking practice"
    assert logged.ledger.remaining_hours == Decimal("2.5")
    assert logged.warning is None


def test_log_session_ignores_calendar_conflicts():
    svc, lessons = _logger(lessons=[lesson(1, NOW - timedelta(minutes=30), 2)])

    svc.log_session(1, Decimal("1"))

    assert lessons.writes == 1


def test_logging_past_contracted_hours_warns():
    svc, _ = _logger(lessons=[lesson(1, NOW - timedelta(days=1), 4)])

    logged = svc.log_session(1, Decimal("2"))

    assert logged.ledger.remaining_hours == Decimal("-2")
    assert logged.warning is not None


def test_profile_without_instructor_cannot_log():
    svc, lessons = _logger(context=ADMIN)

    with pytest.raises(ValidationError):
        svc.log_session(1, Decimal("1"))
    assert lessons.writes == 0


def test_rejects_bad_hours_missing_and_archived_packages():
    svc, lessons = _logger()

    with pytest.raises(ValidationError):
        svc.log_session(1, Decimal("0"))
    with pytest.raises(ValidationError):
        svc.log_session(99, Decimal("1"))
    with pytest.raises(ValidationError):
        svc.log_session(4, Decimal("1"))
    assert lessons.writes == 0


def test_instructor_cannot_log_on_another_instructors_package():
    svc, _ = _logger()

    with pytest.raises(AuthorizationError):
        svc.log_session(2, Decimal("1"))

    # Unassigned packages are open to anyone.
    assert svc.log_session(3, Decimal("1")).lesson_id


def test_store_failure_is_a_persistence_error():
    svc, lessons = _logger()
    lessons.fail_writes = RuntimeError("deadlock")

    with pytest.raises(PersistenceError):
        svc.log_session(1, Decimal("1"))


def test_recent_logs_scope_by_role():
    rows = [lesson(i, NOW - timedelta(hours=i), 1, instructor_id=1 if i % 2 else 2) for i in range(1, 31)]
    admin_with_instructor = StaffContext(profile_id=1, role=Role.ADMIN, instructor_id=2)

    mine, _ = _logger(lessons=rows)
    everyone, _ = _logger(context=admin_with_instructor, lessons=rows)

    own = mine.recent_logs()
    assert len(own) == 10
    assert {l.instructor_id for l in own} == {1}
    assert own[0].lesson_id == 1

    assert len(everyone.recent_logs()) == 20
