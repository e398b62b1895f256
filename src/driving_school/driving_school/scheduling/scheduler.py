from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..clients.model import ClientRef
from ..common.datetime_utils import now_local, shift_anchor, start_of_day, visible_range
from ..common.validators import optional_text, require_id, require_positive
from ..core.constants import MAX_LESSON_HOURS
from ..core.enums import LessonStatus, PackageStatus, ViewMode, ViewState
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    LedgerFetchError,
    PersistenceError,
    StaleReadError,
    ValidationError,
)
from ..ledger.calculator import HourOverageWarning, LedgerSnapshot, check_overage
from ..ledger.service import LedgerService
from ..lessons.model import Lesson, LessonDraft
from ..lessons.repository import LessonRepository
from ..packages.model import PackageOption
from ..packages.repository import PackageRepository
from ..staff.model import Instructor, StaffContext
from ..staff.repository import InstructorRepository
from .conflict import SlotRequest, ensure_no_conflict
from .layout import GridConfig, LessonPlacement, layout_lessons

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a successful lesson write.

    ledger is None (and ledger_error set) when the write landed but the
    package's rows could not be re-read afterwards. previous_ledger is set when
    an edit moved the lesson to another package and holds the old package's hours.
    """

    lesson_id: int
    package_id: int
    ledger: Optional[LedgerSnapshot] = None
    warning: Optional[HourOverageWarning] = None
    ledger_error: Optional[str] = None
    previous_ledger: Optional[LedgerSnapshot] = None


@dataclass(frozen=True)
class BookablePackages:
    mine: list[PackageOption] = field(default_factory=list)
    unassigned: list[PackageOption] = field(default_factory=list)


class Scheduler:
    """Day/week calendar of one instructor.

    Loads the visible range, lays lessons out on the grid and guards every
    write with the conflict check against the loaded snapshot. Loads are
    generation-tagged: a load that completes after a newer one started is
    discarded.
    """

    def __init__(
        self,
        context: StaffContext,
        lessons: LessonRepository,
        packages: PackageRepository,
        instructors: InstructorRepository,
        ledger: LedgerService,
        *,
        grid: Optional[GridConfig] = None,
        view_mode: ViewMode = ViewMode.WEEK,
        anchor: Optional[date] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._context = context
        self._lessons_repo = lessons
        self._packages = packages
        self._instructors = instructors
        self._ledger = ledger
        self._grid = grid or GridConfig()
        self._clock = clock

        self._view_mode = view_mode
        self._anchor = anchor or clock().date()
        self._instructor_id: Optional[int] = context.instructor_id

        self._state = ViewState.IDLE
        self._lessons: list[Lesson] = []
        self._loaded_for: Optional[tuple[int, datetime, datetime]] = None
        self._error: Optional[str] = None

        self._generation = 0
        self._lock = threading.Lock()

    # ---- view state ----

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def lessons(self) -> list[Lesson]:
        return list(self._lessons)

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def view_mode(self) -> ViewMode:
        return self._view_mode

    @property
    def anchor(self) -> date:
        return self._anchor

    @property
    def instructor_id(self) -> Optional[int]:
        return self._instructor_id

    @property
    def grid(self) -> GridConfig:
        return self._grid

    @property
    def visible_range(self) -> tuple[datetime, datetime]:
        return visible_range(self._anchor, self._view_mode)

    def open(self) -> None:
        """Pick the default calendar ("my lessons" / first instructor for admins) and load it."""

        if self._instructor_id is None and self._context.is_admin:
            roster = self.available_instructors()
            if roster:
                self._instructor_id = roster[0].instructor_id
        self.refresh()

    def available_instructors(self) -> list[Instructor]:
        if self._context.is_admin:
            return list(self._instructors.list_active())
        if self._context.instructor_id is None:
            return []
        own = self._instructors.get_by_id(self._context.instructor_id)
        return [own] if own else []

    def select_instructor(self, instructor_id: int) -> None:
        instructor_id = require_id(instructor_id, "Instructor")
        self._require_calendar_access(instructor_id)
        self._instructor_id = instructor_id
        self.refresh()

    def set_view_mode(self, view_mode: ViewMode) -> None:
        self._view_mode = ViewMode(view_mode)
        self.refresh()

    def set_anchor(self, anchor: date) -> None:
        self._anchor = anchor
        self.refresh()

    def navigate(self, direction: int) -> None:
        self._anchor = shift_anchor(self._anchor, self._view_mode, direction)
        self.refresh()

    def show_today(self) -> None:
        """The simple "today" screen: a day view anchored at the current date."""

        self._view_mode = ViewMode.DAY
        self._anchor = self._clock().date()
        self.refresh()

    def refresh(self) -> None:
        if self._instructor_id is None:
            self.cancel()
            self._lessons = []
            self._loaded_for = None
            return
        start, end = self.visible_range
        self.load_range(self._instructor_id, start, end)

    def cancel(self) -> None:
        """Abandon in-flight loads (navigation away); their results will be dropped."""

        with self._lock:
            self._generation += 1
        if self._state == ViewState.LOADING:
            self._state = ViewState.IDLE

    # ---- loading ----

    def load_range(self, instructor_id: int, start: datetime, end: datetime) -> bool:
        """Fetch lessons with session_date in [start, end).

        Returns False when the result was discarded because a newer load
        (or cancel) superseded it.
        """

        ticket = self._begin_load()
        logger.debug("Loading lessons instructor=%s range=[%s, %s) ticket=%s", instructor_id, start, end, ticket)
        try:
            rows = [
                l
                for l in self._lessons_repo.list_range(instructor_id=int(instructor_id), start=start, end=end)
                if start <= l.session_date < end
            ]
        except Exception as e:
            logger.warning("Loading lessons failed for instructor=%s: %s", instructor_id, e)
            try:
                self._apply_load(ticket, [], None, error=str(e) or "Could not load lessons")
            except StaleReadError:
                logger.debug("Discarded failed stale load ticket=%s", ticket)
                return False
            return True

        try:
            self._apply_load(ticket, rows, (int(instructor_id), start, end))
        except StaleReadError:
            logger.debug("Discarded stale load ticket=%s", ticket)
            return False
        return True

    def _begin_load(self) -> int:
        with self._lock:
            self._generation += 1
            self._state = ViewState.LOADING
            return self._generation

    def _apply_load(
        self,
        ticket: int,
        rows: list[Lesson],
        loaded_for: Optional[tuple[int, datetime, datetime]],
        *,
        error: Optional[str] = None,
    ) -> None:
        with self._lock:
            if ticket != self._generation:
                raise StaleReadError(f"Load #{ticket} superseded by #{self._generation}")
            rows.sort(key=lambda l: (l.session_date, l.lesson_id))
            self._lessons = rows
            self._loaded_for = loaded_for
            self._error = error
            self._state = ViewState.ERROR if error else ViewState.READY

    # ---- writes ----

    def create_or_update(self, draft: LessonDraft) -> CommitResult:
        package_id = require_id(draft.package_id, "Student package")
        if not isinstance(draft.session_date, datetime):
            raise ValidationError("Lesson date and start time are required")
        duration = require_positive(draft.duration, "Duration", maximum=MAX_LESSON_HOURS)
        if not draft.is_edit and not (draft.instructor_id or self._instructor_id):
            raise ValidationError("Select an instructor")

        previous: Optional[Lesson] = None
        if draft.is_edit:
            previous = self._find_lesson(draft.lesson_id)
            if previous is None:
                raise ValidationError(f"Lesson #{draft.lesson_id} no longer exists")
            self._require_calendar_access(previous.instructor_id)

        # An edit stays on its own calendar unless another instructor is picked.
        instructor_id = draft.instructor_id or (previous.instructor_id if previous else self._instructor_id)
        instructor_id = require_id(instructor_id, "Instructor")
        self._require_calendar_access(instructor_id)

        slot = SlotRequest(instructor_id=instructor_id, start=draft.session_date, duration=duration)
        if draft.status != LessonStatus.CANCELLED:
            snapshot = self._conflict_snapshot(slot)
            try:
                ensure_no_conflict(slot, snapshot, exclude_id=draft.lesson_id)
            except ConflictError as e:
                logger.info("Rejected lesson for instructor=%s at %s: %s", instructor_id, slot.start, e)
                raise

        fields = dict(
            package_id=package_id,
            instructor_id=instructor_id,
            session_date=draft.session_date,
            duration=duration,
            status=draft.status,
            location=optional_text(draft.location),
            summary=optional_text(draft.summary),
        )
        if previous is not None:
            lesson_id = previous.lesson_id
            self._submit(
                lambda: self._lessons_repo.update(lesson_id=lesson_id, **fields),
                f"Lesson #{lesson_id} no longer exists",
            )
        else:
            lesson_id = self._submit(lambda: self._lessons_repo.create(**fields))

        logger.info("Saved lesson #%s for package #%s (%sh at %s)", lesson_id, package_id, duration, slot.start)
        self.refresh()
        result = self._commit_result(lesson_id, package_id)
        if previous is not None and previous.package_id != package_id:
            previous_ledger, _ = self._safe_recompute(previous.package_id)
            result = replace(result, previous_ledger=previous_ledger)
        return result

    def remove(self, lesson_id: int) -> CommitResult:
        lesson_id = require_id(lesson_id, "Lesson")
        lesson = self._find_lesson(lesson_id)
        if lesson is None:
            raise ValidationError(f"Lesson #{lesson_id} no longer exists")
        self._require_calendar_access(lesson.instructor_id)

        self._submit(lambda: self._lessons_repo.delete(lesson_id=lesson_id), f"Lesson #{lesson_id} no longer exists")
        logger.info("Deleted lesson #%s of package #%s", lesson_id, lesson.package_id)
        self.refresh()
        return self._commit_result(lesson_id, lesson.package_id, with_warning=False)

    def set_status(self, lesson_id: int, status: LessonStatus) -> CommitResult:
        lesson_id = require_id(lesson_id, "Lesson")
        status = LessonStatus(status)
        lesson = self._find_lesson(lesson_id)
        if lesson is None:
            raise ValidationError(f"Lesson #{lesson_id} no longer exists")
        self._require_calendar_access(lesson.instructor_id)

        if lesson.is_cancelled and status != LessonStatus.CANCELLED:
            # Reviving a cancelled lesson claims its slot again.
            slot = SlotRequest(lesson.instructor_id, lesson.session_date, lesson.duration)
            ensure_no_conflict(slot, self._conflict_snapshot(slot), exclude_id=lesson_id)

        self._submit(
            lambda: self._lessons_repo.set_status(lesson_id=lesson_id, status=status),
            f"Lesson #{lesson_id} no longer exists",
        )
        self.refresh()
        return self._commit_result(lesson_id, lesson.package_id, with_warning=status != LessonStatus.CANCELLED)

    def invalidate_and_recompute(self, package_id: Optional[int] = None) -> Optional[LedgerSnapshot]:
        """Re-fetch the visible range and, if given, the package's ledger."""

        self.refresh()
        if package_id is None:
            return None
        return self._ledger.recompute(package_id)

    def preview_overage(self, draft: LessonDraft) -> Optional[HourOverageWarning]:
        """Soft check before saving; callers decide whether to block or just flag."""

        duration = require_positive(draft.duration, "Duration", maximum=MAX_LESSON_HOURS)
        if draft.status == LessonStatus.CANCELLED:
            return None
        snapshot = self._ledger.recompute(require_id(draft.package_id, "Student package"))
        ignore = Decimal("0")
        if draft.is_edit:
            previous = self._find_lesson(draft.lesson_id)
            if previous is not None and previous.package_id == snapshot.package_id and not previous.is_cancelled:
                ignore = previous.duration
        return check_overage(snapshot, duration, ignore_hours=ignore)

    # ---- read helpers for the views ----

    def layout(self) -> list[LessonPlacement]:
        return layout_lessons(self._lessons, self._view_mode, self._grid)

    def bookable_packages(self) -> BookablePackages:
        options = self._packages.list_options(status=PackageStatus.ACTIVE)
        return BookablePackages(
            mine=[o for o in options if o.instructor_id is not None and o.instructor_id == self._instructor_id],
            unassigned=[o for o in options if o.instructor_id is None],
        )

    def client_reference(self, lesson_id: int) -> ClientRef:
        """Identity to forward to the client dossier viewer."""

        lesson = self._find_lesson(require_id(lesson_id, "Lesson"))
        if lesson is None:
            raise ValidationError(f"Lesson #{lesson_id} no longer exists")
        ref = self._packages.get_client_ref(lesson.package_id)
        if ref is None:
            raise ValidationError(f"No client found for package #{lesson.package_id}")
        return ref

    # ---- internals ----

    def _require_calendar_access(self, instructor_id: int) -> None:
        if self._context.is_admin:
            return
        if self._context.instructor_id is None or int(instructor_id) != self._context.instructor_id:
            raise AuthorizationError("Instructors can only manage their own calendar")

    def _find_lesson(self, lesson_id: Optional[int]) -> Optional[Lesson]:
        if lesson_id is None:
            return None
        for l in self._lessons:
            if l.lesson_id == lesson_id:
                return l
        try:
            return self._lessons_repo.get_by_id(int(lesson_id))
        except Exception as e:
            raise PersistenceError(str(e) or "Could not load lesson") from e

    def _conflict_snapshot(self, slot: SlotRequest) -> Sequence[Lesson]:
        """Lessons that could overlap the slot: the loaded ones when they cover it, else a fetch.

        The window reaches back MAX_LESSON_HOURS before the slot's day so lessons
        started the evening before and running past midnight are included.
        """

        lower = start_of_day(slot.start) - timedelta(hours=int(MAX_LESSON_HOURS))
        upper = start_of_day(slot.end) + timedelta(days=1)
        if self._loaded_for is not None:
            loaded_instructor, loaded_start, loaded_end = self._loaded_for
            if loaded_instructor == slot.instructor_id and loaded_start <= lower and upper <= loaded_end:
                return self._lessons
        try:
            return self._lessons_repo.list_range(instructor_id=slot.instructor_id, start=lower, end=upper)
        except Exception as e:
            raise PersistenceError(str(e) or "Could not load the instructor's lessons") from e

    def _submit(self, write: Callable[[], object], missing_message: Optional[str] = None):
        previous_state = self._state
        previous_error = self._error
        self._state = ViewState.SUBMITTING
        try:
            result = write()
        except Exception as e:
            self._state = ViewState.ERROR
            self._error = str(e) or "Could not save the lesson"
            logger.exception("Lesson write failed")
            raise PersistenceError(self._error) from e
        if result is False:
            self._state, self._error = previous_state, previous_error
            raise ValidationError(missing_message or "Nothing was changed")
        self._state = previous_state
        return result

    def _safe_recompute(self, package_id: int) -> tuple[Optional[LedgerSnapshot], Optional[str]]:
        try:
            return self._ledger.recompute(package_id), None
        except LedgerFetchError as e:
            return None, str(e)

    def _commit_result(self, lesson_id: int, package_id: int, *, with_warning: bool = True) -> CommitResult:
        snapshot, ledger_error = self._safe_recompute(package_id)
        warning = None
        if snapshot is not None and with_warning:
            warning = check_overage(snapshot, Decimal("0"))
        return CommitResult(
            lesson_id=int(lesson_id),
            package_id=int(package_id),
            ledger=snapshot,
            warning=warning,
            ledger_error=ledger_error,
        )
