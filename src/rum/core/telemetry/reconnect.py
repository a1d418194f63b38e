"""Reconnect state machine driven by the per-second ticker."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .scheduler import Ticker

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_INTERVAL_MS = 1000
DEFAULT_MAX_ATTEMPTS_PER_CYCLE = 1


class ReconnectPhase(str, Enum):
    """Where the controller stands between connections."""

    IDLE = "idle"
    BACKOFF = "backoff"
    CLOSED = "closed"


@dataclass
class ReconnectState:
    """Mutable bookkeeping for one client's reconnect cycle."""

    is_closed_by_user: bool = False
    attempt_count: int = 0
    pending_since: int = 0

    def clear(self) -> None:
        self.attempt_count = 0
        self.pending_since = 0


class ReconnectController:
    """Decides when a dropped connection is retried.

    Each unexpected disconnect counts one attempt. Once the count reaches
    ``max_attempts_per_cycle`` the controller fires ``reconnect`` straight
    away and resets the count; below the cap it parks in BACKOFF until a
    tick observes that ``interval_ms`` has elapsed. A successful connect
    resets the count. An explicit :meth:`close` is final: later ticks and
    disconnects are ignored.

    Args:
        ticker: Clock used to measure the backoff window
        reconnect: Invoked when a reconnect attempt should start
        auto_reconnect: When False, disconnects never schedule a retry
        interval_ms: Backoff window
        max_attempts_per_cycle: Attempts counted before reconnecting immediately
    """

    def __init__(
        self,
        ticker: Ticker,
        reconnect: Callable[[], None],
        *,
        auto_reconnect: bool = True,
        interval_ms: int = DEFAULT_RECONNECT_INTERVAL_MS,
        max_attempts_per_cycle: int = DEFAULT_MAX_ATTEMPTS_PER_CYCLE,
    ) -> None:
        self._ticker = ticker
        self._reconnect = reconnect
        self._auto_reconnect = auto_reconnect
        self._interval_ms = interval_ms
        self._max_attempts = max_attempts_per_cycle
        self.state = ReconnectState()
        self._phase = ReconnectPhase.IDLE

    @property
    def phase(self) -> ReconnectPhase:
        return self._phase

    @property
    def auto_reconnect(self) -> bool:
        return self._auto_reconnect

    def on_disconnect(self) -> bool:
        """Handle an unexpected connection loss.

        Returns:
            True if a reconnect was fired or scheduled
        """
        if self._phase is ReconnectPhase.CLOSED or not self._auto_reconnect:
            return False

        if self._phase is ReconnectPhase.BACKOFF:
            return True

        if self.state.attempt_count + 1 >= self._max_attempts:
            logger.debug(
                "Reconnecting immediately after %d attempt(s)",
                self.state.attempt_count + 1,
            )
            self.state.clear()
            self._reconnect()
            return True

        self.state.attempt_count += 1
        self.state.pending_since = self._ticker.now()
        self._phase = ReconnectPhase.BACKOFF
        logger.debug(
            "Reconnect scheduled in %dms (attempt %d)",
            self._interval_ms,
            self.state.attempt_count,
        )
        return True

    def on_tick(self) -> None:
        if self._phase is not ReconnectPhase.BACKOFF:
            return

        elapsed = self._ticker.now() - self.state.pending_since
        if elapsed < self._interval_ms:
            return

        logger.debug("Backoff elapsed after %dms, reconnecting", elapsed)
        self.state.clear()
        self._phase = ReconnectPhase.IDLE
        self._reconnect()

    def on_connected(self) -> None:
        self.state.is_closed_by_user = False
        self.state.clear()
        self._phase = ReconnectPhase.IDLE

    def close(self) -> None:
        self.state.is_closed_by_user = True
        self.state.clear()
        self._phase = ReconnectPhase.CLOSED
