from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .courses.mysql_course_repository import MySQLCourseRepository
from .core.enums import ViewMode
from .database.connection import DBConfig, DatabaseConnection
from .ledger.service import LedgerService
from .lessons.mysql_lesson_repository import MySQLLessonRepository
from .packages.mysql_package_repository import MySQLPackageRepository
from .packages.service import PackageService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.service import PaymentService
from .scheduling.layout import GridConfig
from .scheduling.scheduler import Scheduler
from .scheduling.session_logger import SessionLogger
from .staff.model import StaffContext
from .staff.mysql_instructor_repository import MySQLInstructorRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    grid: GridConfig

    instructors_repo: MySQLInstructorRepository
    courses_repo: MySQLCourseRepository
    packages_repo: MySQLPackageRepository
    payments_repo: MySQLPaymentRepository
    lessons_repo: MySQLLessonRepository

    ledger_service: LedgerService
    package_service: PackageService
    payment_service: PaymentService

    def scheduler_for(
        self,
        context: StaffContext,
        *,
        view_mode: ViewMode = ViewMode.WEEK,
        anchor: Optional[date] = None,
    ) -> Scheduler:
        """Schedulers hold per-view state, so each view/request gets its own."""

        return Scheduler(
            context,
            self.lessons_repo,
            self.packages_repo,
            self.instructors_repo,
            self.ledger_service,
            grid=self.grid,
            view_mode=view_mode,
            anchor=anchor,
        )

    def session_logger_for(self, context: StaffContext) -> SessionLogger:
        return SessionLogger(context, self.lessons_repo, self.packages_repo, self.ledger_service)


def build_container(*, db_config: dict, grid: Optional[GridConfig] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    instructors_repo = MySQLInstructorRepository(conn)
    courses_repo = MySQLCourseRepository(conn)
    packages_repo = MySQLPackageRepository(conn)
    payments_repo = MySQLPaymentRepository(conn)
    lessons_repo = MySQLLessonRepository(conn)

    ledger_service = LedgerService(packages_repo, lessons_repo, payments_repo)
    package_service = PackageService(packages_repo, courses_repo, payments_repo, ledger_service)
    payment_service = PaymentService(payments_repo, packages_repo, ledger_service)

    return Container(
        conn=conn,
        grid=grid or GridConfig(),
        instructors_repo=instructors_repo,
        courses_repo=courses_repo,
        packages_repo=packages_repo,
        payments_repo=payments_repo,
        lessons_repo=lessons_repo,
        ledger_service=ledger_service,
        package_service=package_service,
        payment_service=payment_service,
    )
