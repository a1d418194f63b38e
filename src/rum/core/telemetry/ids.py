"""Identifier generation for sessions, salts and events."""

from __future__ import annotations

import random
import string
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler import Ticker

SEQUENCE_MAX = 999

_RUM_ID_CHARS = string.digits + string.ascii_uppercase + string.ascii_lowercase


class IDGenerator:
    """Millisecond timestamp plus a bounded per-generator sequence.

    Each call bumps a counter in ``[1, 999]`` (wrapping 999 back to 1) and
    returns ``int(f"{now_ms}{counter:03d}")``. Values are strictly increasing
    as long as fewer than 999 ids are drawn in the same millisecond. Ids from
    different generators may collide, and a wall clock stepping backwards
    produces smaller ids; neither is corrected.

    Args:
        ticker: Clock source shared with the rest of the client
    """

    def __init__(self, ticker: Ticker) -> None:
        self._ticker = ticker
        self._sequence = 0
        self._last_timestamp = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def last_timestamp(self) -> int:
        return self._last_timestamp

    def generate(self) -> int:
        self._sequence = self._sequence % SEQUENCE_MAX + 1
        self._last_timestamp = self._ticker.now()
        return int(f"{self._last_timestamp}{self._sequence:03d}")


def generate_rum_id(now_ms: int, rng: random.Random | None = None) -> str:
    """Build a pseudo-UUID client id prefixed with the current timestamp.

    The result has the RFC 4122 ``8-4-4-4-12`` shape with ``s`` in the version
    slot and the variant bits set on position 19. The leading characters are
    then overwritten by the digits of ``now_ms`` (the first dash included) so
    ids sort roughly by creation time.

    Args:
        now_ms: Current timestamp in milliseconds
        rng: Random source (defaults to the module-level generator)

    Returns:
        36-character client id
    """
    randrange = (rng or random).randrange
    chars: list[str] = []
    for i in range(36):
        if i in (8, 13, 18, 23):
            chars.append("-")
        elif i == 14:
            chars.append("s")
        elif i == 19:
            chars.append(_RUM_ID_CHARS[(randrange(16) & 0x3) | 0x8])
        else:
            chars.append(_RUM_ID_CHARS[randrange(16)])

    prefix = str(now_ms)
    chars[: len(prefix)] = prefix
    return "".join(chars)
