from __future__ import annotations

from .model import Lesson


def lesson_to_dict(l: Lesson) -> dict:
    return {
        "lesson_id": l.lesson_id,
        "package_id": l.package_id,
        "instructor_id": l.instructor_id,
        "session_date": l.session_date.isoformat(),
        "end_time": l.end_time.isoformat(),
        "duration": str(l.duration),
        "status": l.status.value,
        "location": l.location or "",
        "summary": l.summary or "",
        "client_label": l.client_label or "",
    }
