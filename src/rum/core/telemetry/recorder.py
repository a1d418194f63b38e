"""Process-wide record of transport errors.

Every client in the process reports transport-level failures here. Clients
built with ``debug=True`` also write each recorded error to this module's
logger at ERROR level.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100

_recorder: ErrorRecorder | None = None
_recorder_lock = threading.Lock()


@dataclass(frozen=True)
class RecordedError:
    """One recorded failure and when it happened (epoch seconds)."""

    error: BaseException
    source: str
    recorded_at: float


class ErrorRecorder:
    """Bounded, thread-safe ring of recent transport errors.

    Args:
        max_entries: Oldest entries are discarded beyond this size
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._entries: deque[RecordedError] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record(
        self, error: BaseException, *, source: str = "", debug: bool = False
    ) -> None:
        """Record ``error``.

        Args:
            error: The failure
            source: Who reported it, e.g. ``"host:port"``
            debug: Also log the error at ERROR level
        """
        with self._lock:
            self._entries.append(RecordedError(error, source, time.time()))

        if debug:
            logger.error("RUM error [%s]: %s", source or "unknown", error)

    def recent(self) -> list[RecordedError]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def get_error_recorder() -> ErrorRecorder:
    """Get the shared recorder, creating it on first use (thread-safe)."""
    global _recorder

    if _recorder is not None:
        return _recorder

    with _recorder_lock:
        if _recorder is None:
            _recorder = ErrorRecorder()
        return _recorder


def reset_error_recorder() -> None:
    """Drop the shared recorder (for testing only)."""
    global _recorder

    with _recorder_lock:
        _recorder = None
