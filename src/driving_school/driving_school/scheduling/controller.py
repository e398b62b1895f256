from __future__ import annotations

from datetime import date
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import combine_local, parse_hhmm, parse_iso_date
from ..common.validators import optional_id
from ..common.web import SessionIdentityProvider, error_response, login_required
from ..container import Container
from ..core.constants import DEFAULT_LESSON_DURATION, DEFAULT_LESSON_START, LESSON_DURATION_CHOICES
from ..core.enums import LessonStatus, ViewMode
from ..core.exceptions import ValidationError
from ..lessons.model import LessonDraft
from ..lessons.serializers import lesson_to_dict
from .scheduler import CommitResult


def _draft_from_payload(payload: dict, *, lesson_id: Optional[int] = None) -> LessonDraft:
    day = parse_iso_date(payload.get("date") or "")
    start = parse_hhmm(payload.get("start_time") or DEFAULT_LESSON_START)
    try:
        status = LessonStatus(payload.get("status") or LessonStatus.PLANNED.value)
    except ValueError:
        raise ValidationError("Unknown lesson status")
    return LessonDraft(
        package_id=payload.get("package_id"),
        instructor_id=optional_id(payload.get("instructor_id"), "Instructor"),
        session_date=combine_local(day, start),
        duration=payload["duration"] if payload.get("duration") is not None else DEFAULT_LESSON_DURATION,
        location=payload.get("location"),
        summary=payload.get("summary"),
        status=status,
        lesson_id=lesson_id,
    )


def _commit_to_dict(result: CommitResult) -> dict:
    return {
        "lesson_id": result.lesson_id,
        "package_id": result.package_id,
        "ledger": result.ledger.as_dict() if result.ledger else None,
        "ledger_error": result.ledger_error,
        "previous_ledger": result.previous_ledger.as_dict() if result.previous_ledger else None,
        "warning": result.warning.message if result.warning else None,
    }


def register(app: Flask, container: Container) -> None:
    identity = SessionIdentityProvider()

    @app.route("/api/schedule", methods=["GET"], endpoint="schedule_view")
    @login_required
    def schedule_view():
        try:
            context = identity.current()
            view_mode = ViewMode(request.args.get("view") or ViewMode.WEEK.value)
            date_s = request.args.get("date")
            anchor = parse_iso_date(date_s) if date_s else date.today()

            scheduler = container.scheduler_for(context, view_mode=view_mode, anchor=anchor)
            instructor_s = request.args.get("instructor_id")
            if instructor_s:
                scheduler.select_instructor(int(instructor_s))
            else:
                scheduler.open()

            start, end = scheduler.visible_range
            placements = {p.lesson_id: p.as_dict() for p in scheduler.layout()}
            return jsonify(
                {
                    "state": scheduler.state.value,
                    "error": scheduler.error,
                    "view": scheduler.view_mode.value,
                    "instructor_id": scheduler.instructor_id,
                    "range": {"start": start.isoformat(), "end": end.isoformat()},
                    "hours": scheduler.grid.hour_labels(),
                    "duration_choices": [str(d) for d in LESSON_DURATION_CHOICES],
                    "instructors": [
                        {"instructor_id": i.instructor_id, "full_name": i.full_name}
                        for i in scheduler.available_instructors()
                    ],
                    "lessons": [
                        {**lesson_to_dict(l), "placement": placements.get(l.lesson_id)} for l in scheduler.lessons
                    ],
                }
            )
        except ValueError:
            return jsonify({"error": "Invalid view or instructor"}), 400
        except Exception as e:
            return error_response(e)

    @app.route("/api/schedule/packages", methods=["GET"], endpoint="schedule_packages")
    @login_required
    def schedule_packages():
        try:
            scheduler = container.scheduler_for(identity.current())
            instructor_s = request.args.get("instructor_id")
            if instructor_s:
                scheduler.select_instructor(int(instructor_s))
            options = scheduler.bookable_packages()

            def _opt(o):
                return {
                    "package_id": o.package_id,
                    "client_id": o.client_id,
                    "client_label": o.client_label,
                    "phone": o.phone or "",
                    "address": o.address or "",
                }

            return jsonify({"mine": [_opt(o) for o in options.mine], "unassigned": [_opt(o) for o in options.unassigned]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/lessons", methods=["POST"], endpoint="lesson_create")
    @login_required
    def lesson_create():
        try:
            scheduler = container.scheduler_for(identity.current())
            result = scheduler.create_or_update(_draft_from_payload(request.get_json(silent=True) or {}))
            return jsonify(_commit_to_dict(result)), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/lessons/<int:lesson_id>", methods=["PUT"], endpoint="lesson_update")
    @login_required
    def lesson_update(lesson_id: int):
        try:
            scheduler = container.scheduler_for(identity.current())
            draft = _draft_from_payload(request.get_json(silent=True) or {}, lesson_id=lesson_id)
            return jsonify(_commit_to_dict(scheduler.create_or_update(draft)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/lessons/<int:lesson_id>", methods=["DELETE"], endpoint="lesson_delete")
    @login_required
    def lesson_delete(lesson_id: int):
        try:
            scheduler = container.scheduler_for(identity.current())
            return jsonify(_commit_to_dict(scheduler.remove(lesson_id)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/lessons/<int:lesson_id>/status", methods=["POST"], endpoint="lesson_status")
    @login_required
    def lesson_status(lesson_id: int):
        try:
            payload = request.get_json(silent=True) or {}
            try:
                status = LessonStatus(payload.get("status") or "")
            except ValueError:
                raise ValidationError("Unknown lesson status")
            scheduler = container.scheduler_for(identity.current())
            return jsonify(_commit_to_dict(scheduler.set_status(lesson_id, status)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/lessons/<int:lesson_id>/client", methods=["GET"], endpoint="lesson_client")
    @login_required
    def lesson_client(lesson_id: int):
        try:
            ref = container.scheduler_for(identity.current()).client_reference(lesson_id)
            return jsonify({"client_id": ref.client_id, "display_name": ref.display_name})
        except Exception as e:
            return error_response(e)

    @app.route("/api/packages/<int:package_id>/sessions", methods=["POST"], endpoint="session_log")
    @login_required
    def session_log(package_id: int):
        try:
            payload = request.get_json(silent=True) or {}
            session_logger = container.session_logger_for(identity.current())
            logged = session_logger.log_session(package_id, payload.get("hours_spent"), summary=payload.get("summary"))
            return (
                jsonify(
                    {
                        "lesson_id": logged.lesson_id,
                        "ledger": logged.ledger.as_dict(),
                        "warning": logged.warning.message if logged.warning else None,
                    }
                ),
                201,
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/sessions/recent", methods=["GET"], endpoint="session_recent")
    @login_required
    def session_recent():
        try:
            logs = container.session_logger_for(identity.current()).recent_logs()
            return jsonify({"sessions": [lesson_to_dict(l) for l in logs]})
        except Exception as e:
            return error_response(e)
