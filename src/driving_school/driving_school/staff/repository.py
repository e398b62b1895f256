from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Instructor


class InstructorRepository(Protocol):
    def list_active(self) -> Sequence[Instructor]:
        raise NotImplementedError

    def get_by_id(self, instructor_id: int) -> Optional[Instructor]:
        raise NotImplementedError
