from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from ..core.enums import Role


@dataclass(frozen=True)
class Instructor:
    instructor_id: int
    full_name: str
    profile_id: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class StaffContext:
    """Who is operating the schedule, passed explicitly instead of read from globals.

    instructor_id is the instructor record linked to the staff profile; admins
    may have none.
    """

    profile_id: int
    role: Role
    instructor_id: Optional[int] = None
    locale: str = "en"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class IdentityProvider(Protocol):
    """Boundary to the external authentication/role subsystem."""

    def current(self) -> StaffContext:
        raise NotImplementedError
