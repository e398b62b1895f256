from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff role supplied by the identity provider."""

    ADMIN = "admin"
    INSTRUCTOR = "instructor"


class LessonStatus(str, Enum):
    PLANNED = "planned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PackageStatus(str, Enum):
    """Lifecycle of a training package (archived once training concludes)."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class PaymentStatus(str, Enum):
    """Only COMPLETED payments count towards the amount paid."""

    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentPlan(str, Enum):
    FULL = "full"
    INSTALLMENT = "installment"
    TOP_UP = "top_up"


class ViewMode(str, Enum):
    DAY = "day"
    WEEK = "week"


class ViewState(str, Enum):
    """States of one visible schedule view."""

    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"
    SUBMITTING = "SUBMITTING"
    ERROR = "ERROR"
