from __future__ import annotations

import logging
from functools import wraps

import mysql.connector
from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    PersistenceError,
    ValidationError,
)
from ..staff.model import IdentityProvider, StaffContext

logger = logging.getLogger(__name__)


class SessionIdentityProvider(IdentityProvider):
    """Reads the staff identity the auth subsystem stored in the Flask session."""

    def current(self) -> StaffContext:
        instructor_id = session.get("instructor_id")
        return StaffContext(
            profile_id=int(session["user_id"]),
            role=Role(session.get("role", Role.INSTRUCTOR.value)),
            instructor_id=int(instructor_id) if instructor_id else None,
            locale=session.get("locale", "en"),
        )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def error_response(e: Exception):
    if isinstance(e, ValidationError):
        return jsonify({"error": str(e)}), 400
    if isinstance(e, AuthorizationError):
        return jsonify({"error": str(e)}), 403
    if isinstance(e, ConflictError):
        c = e.conflicting
        return (
            jsonify(
                {
                    "error": str(e),
                    "conflict": {
                        "lesson_id": c.lesson_id,
                        "start": c.session_date.isoformat(),
                        "end": c.end_time.isoformat(),
                    },
                }
            ),
            409,
        )
    if isinstance(e, (PersistenceError, mysql.connector.Error)):
        return jsonify({"error": str(e)}), 503
    if isinstance(e, DomainError):
        return jsonify({"error": str(e)}), 400
    logger.exception("Unhandled error")
    return jsonify({"error": "Internal error"}), 500
