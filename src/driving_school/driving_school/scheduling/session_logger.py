from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_id, require_positive
from ..core.constants import MAX_LESSON_HOURS, RECENT_LOGS_ADMIN_LIMIT, RECENT_LOGS_INSTRUCTOR_LIMIT
from ..core.enums import LessonStatus
from ..core.exceptions import AuthorizationError, PersistenceError, ValidationError
from ..ledger.calculator import HourOverageWarning, LedgerSnapshot, check_overage
from ..ledger.service import LedgerService
from ..lessons.model import Lesson
from ..lessons.repository import LessonRepository
from ..packages.repository import PackageRepository
from ..staff.model import StaffContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggedSession:
    lesson_id: int
    ledger: LedgerSnapshot
    warning: Optional[HourOverageWarning] = None


class SessionLogger:
    """Attendance-style logging outside the calendar.

    Records hours against a package without claiming a time slot, so no
    conflict check is run: retroactive attendance has no future slot to protect.
    """

    def __init__(
        self,
        context: StaffContext,
        lessons: LessonRepository,
        packages: PackageRepository,
        ledger: LedgerService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._context = context
        self._lessons = lessons
        self._packages = packages
        self._ledger = ledger
        self._clock = clock

    def log_session(
        self,
        package_id: int,
        hours_spent: Decimal,
        *,
        summary: Optional[str] = None,
        session_date: Optional[datetime] = None,
    ) -> LoggedSession:
        package_id = require_id(package_id, "Student package")
        hours = require_positive(hours_spent, "Hours", maximum=MAX_LESSON_HOURS)
        if self._context.instructor_id is None:
            raise ValidationError("Your profile must be linked to an instructor to log hours")

        try:
            package = self._packages.get_by_id(package_id)
        except Exception as e:
            raise PersistenceError(str(e) or "Could not load the package") from e
        if package is None:
            raise ValidationError(f"Package #{package_id} does not exist")
        if not package.is_active:
            raise ValidationError(f"Package #{package_id} is archived")
        if (
            not self._context.is_admin
            and package.instructor_id is not None
            and package.instructor_id != self._context.instructor_id
        ):
            raise AuthorizationError("This student is assigned to another instructor")

        try:
            lesson_id = self._lessons.create(
                package_id=package_id,
                instructor_id=self._context.instructor_id,
                session_date=session_date or self._clock(),
                duration=hours,
                status=LessonStatus.COMPLETED,
                summary=optional_text(summary),
            )
        except Exception as e:
            logger.exception("Logging session failed for package #%s", package_id)
            raise PersistenceError(str(e) or "Failed to log session") from e

        logger.info("Logged %sh for package #%s (lesson #%s)", hours, package_id, lesson_id)
        snapshot = self._ledger.recompute(package_id)
        return LoggedSession(
            lesson_id=int(lesson_id),
            ledger=snapshot,
            warning=check_overage(snapshot, Decimal("0")),
        )

    def recent_logs(self) -> list[Lesson]:
        """Last sessions: everyone's for admins, only their own for instructors."""

        if self._context.is_admin:
            return list(self._lessons.list_recent(limit=RECENT_LOGS_ADMIN_LIMIT))
        if self._context.instructor_id is None:
            return []
        return list(
            self._lessons.list_recent(instructor_id=self._context.instructor_id, limit=RECENT_LOGS_INSTRUCTOR_LIMIT)
        )
