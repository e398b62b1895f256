from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid, before any I/O happens."""


class AuthorizationError(DomainError):
    """Raised when a staff member lacks permission for an action."""


class ConflictError(DomainError):
    """Raised when a lesson would overlap another lesson of the same instructor."""

    def __init__(self, conflicting: Any):
        self.conflicting = conflicting
        start = conflicting.session_date
        end = conflicting.end_time
        super().__init__(
            f"Instructor is already booked {start:%Y-%m-%d %H:%M}-{end:%H:%M} (lesson #{conflicting.lesson_id})"
        )


class PersistenceError(DomainError):
    """Raised when the store is unreachable or rejects a write.

    The message is surfaced verbatim to the user.
    """


class LedgerFetchError(PersistenceError):
    """Raised when the rows a ledger is computed from cannot be loaded."""


class StaleReadError(DomainError):
    """Raised when a schedule load was superseded by a newer one.

    Expected during navigation; it is discarded and never shown to the user.
    """
