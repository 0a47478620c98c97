"""Random 64-bit article identities."""

import secrets
from typing import Callable

from help_system.config import UNIQUE_ID_MAX_ATTEMPTS
from help_system.core.exceptions import DuplicateKeyError

_SIGN_BIT = 1 << 63


def random_unique_id() -> int:
    """Draw a random signed 64-bit integer."""
    value = secrets.randbits(64)
    return value - (1 << 64) if value >= _SIGN_BIT else value


def fresh_unique_id(taken: Callable[[int], bool]) -> int:
    """Draw random IDs until one is not taken.

    Raises:
        DuplicateKeyError: If every attempt collided.
    """
    for _ in range(UNIQUE_ID_MAX_ATTEMPTS):
        candidate = random_unique_id()
        if not taken(candidate):
            return candidate
    raise DuplicateKeyError(
        f"No free unique ID after {UNIQUE_ID_MAX_ATTEMPTS} attempts"
    )
