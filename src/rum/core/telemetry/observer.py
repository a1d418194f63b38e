"""Lifecycle notifications for RUM client consumers."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ClientObserver:
    """Receives client lifecycle notifications.

    Subclass and override the hooks you care about; the defaults do nothing.
    Hooks may run on the ticker or transport thread.
    """

    def on_connect(self) -> None:
        """The transport is established."""

    def on_close(self, will_reconnect: bool) -> None:
        """The transport was lost or the client destroyed.

        Args:
            will_reconnect: A reconnect attempt was fired or scheduled
        """

    def on_error(self, error: BaseException) -> None:
        """A transport or dispatch error surfaced. Never fatal to the client."""


class ObserverGroup:
    """Explicit fan-out over registered observers.

    An observer raising is logged and does not stop delivery to the rest.
    """

    def __init__(self) -> None:
        self._observers: list[ClientObserver] = []

    def add(self, observer: ClientObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove(self, observer: ClientObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def clear(self) -> None:
        self._observers.clear()

    def __len__(self) -> int:
        return len(self._observers)

    def notify_connect(self) -> None:
        for observer in list(self._observers):
            try:
                observer.on_connect()
            except Exception:
                logger.exception("Observer %r failed in on_connect", observer)

    def notify_close(self, will_reconnect: bool) -> None:
        for observer in list(self._observers):
            try:
                observer.on_close(will_reconnect)
            except Exception:
                logger.exception("Observer %r failed in on_close", observer)

    def notify_error(self, error: BaseException) -> None:
        for observer in list(self._observers):
            try:
                observer.on_error(error)
            except Exception:
                logger.exception("Observer %r failed in on_error", observer)
