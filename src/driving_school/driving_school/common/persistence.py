from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from ..core.exceptions import DomainError, PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """Re-raise store failures inside the block as PersistenceError; domain errors pass through."""
    try:
        yield
    except DomainError:
        raise
    except Exception as e:
        logger.warning("%s: %s", message, e)
        raise PersistenceError(str(e) or message) from e
