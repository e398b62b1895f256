from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClientRef:
    """Identity handed to the external client dossier viewer."""

    client_id: int
    display_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
