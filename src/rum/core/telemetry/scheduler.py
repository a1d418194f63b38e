"""Once-per-second ticker shared by RUM clients.

Clients never talk to a process-wide singleton directly: they receive a
:class:`Ticker` at construction, subscribe to it and unsubscribe on destroy.
:func:`get_default_ticker` hands out the shared :class:`SecondTicker` when
the caller does not inject one.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]
Unsubscribe = Callable[[], None]

_default_ticker: SecondTicker | None = None
_default_ticker_lock = threading.Lock()


class Ticker(Protocol):
    """Clock and per-second callback source."""

    def now(self) -> int:
        """Current timestamp in milliseconds."""
        ...

    def on_every_second(self, callback: TickCallback) -> Unsubscribe:
        """Register ``callback``; the returned handle removes it."""
        ...


class SecondTicker:
    """Ticker backed by a daemon thread firing once per second.

    The thread starts with the first subscription and stops when the last
    subscriber leaves. A failing callback is logged and does not prevent the
    remaining callbacks from running.
    """

    def __init__(self, interval_seconds: float = 1.0) -> None:
        self._interval = interval_seconds
        self._callbacks: list[TickCallback] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def now(self) -> int:
        return time.time_ns() // 1_000_000

    def on_every_second(self, callback: TickCallback) -> Unsubscribe:
        with self._lock:
            self._callbacks.append(callback)
            if self._thread is None:
                self._stop = threading.Event()
                self._thread = threading.Thread(
                    target=self._run,
                    args=(self._stop,),
                    name="rum-ticker",
                    daemon=True,
                )
                self._thread.start()

        def unsubscribe() -> None:
            self._remove(callback)

        return unsubscribe

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def _remove(self, callback: TickCallback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                return
            if not self._callbacks and self._thread is not None:
                self._stop.set()
                self._thread = None

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self._interval):
            with self._lock:
                callbacks = list(self._callbacks)
            for callback in callbacks:
                try:
                    callback()
                except Exception:
                    logger.exception("Ticker callback failed")


def get_default_ticker() -> SecondTicker:
    """Get the process-wide ticker, creating it on first use (thread-safe)."""
    global _default_ticker

    if _default_ticker is not None:
        return _default_ticker

    with _default_ticker_lock:
        if _default_ticker is None:
            _default_ticker = SecondTicker()
        return _default_ticker
