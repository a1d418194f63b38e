"""RUM client facade.

Composes identity, event building, payload signing, request dispatch and the
reconnect state machine on top of a caller-supplied transport.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any, Self

from ..errors import (
    RUMClientDestroyedError,
    RUMError,
    RUMParameterError,
    RUMTransportError,
)
from ..serialization import MsgpackCodec
from .attributes import Wire
from .config import DEFAULT_TIMEOUT_MS, RUMConfig
from .dispatcher import RequestDispatcher, SendCallback
from .events import EventBuilder, SessionIdentity
from .ids import IDGenerator
from .observer import ClientObserver, ObserverGroup
from .reconnect import ReconnectController, ReconnectPhase
from .recorder import ErrorRecorder, get_error_recorder
from .scheduler import get_default_ticker
from .signing import SigningPayloadAssembler
from .transport import HandshakeInfo

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

    from ..serialization import PayloadCodec
    from .scheduler import Ticker
    from .transport import Transport, TransportFactory

logger = logging.getLogger(__name__)

DEFAULT_CURVE = "secp256k1"
DEFAULT_STRENGTH = 128


class _TransportEvents:
    """Forwards transport notifications to the owning client."""

    def __init__(self, client: RUMClient) -> None:
        self._client = client

    def on_connect(self) -> None:
        self._client._handle_connect()

    def on_close(self) -> None:
        self._client._handle_close()

    def on_error(self, error: BaseException) -> None:
        self._client._handle_error(error)


class RUMClient:
    """Reports custom events to a RUM collector.

    The client validates its configuration up front, subscribes to the
    per-second ticker and builds its transport immediately; :meth:`connect`
    opens the connection. Unexpected disconnects are retried according to
    the configured reconnect policy, replaying the handshake parameters of
    the last successful connect. :meth:`destroy` is final.

    Example:
        >>> client = RUMClient(config, transport_factory=make_transport)
        >>> client.connect()
        >>> client.custom_event("error", {"page": "/checkout"}, callback=print)
        >>> client.destroy()
    """

    def __init__(
        self,
        config: RUMConfig,
        *,
        transport_factory: TransportFactory,
        ticker: Ticker | None = None,
        codec: PayloadCodec | None = None,
        observers: Iterable[ClientObserver] = (),
        recorder: ErrorRecorder | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Validated client configuration
            transport_factory: Builds the transport to the collector
            ticker: Clock and per-second callbacks (defaults to the shared ticker)
            codec: Payload codec (defaults to msgpack)
            observers: Lifecycle observers registered up front
            recorder: Error recorder (defaults to the process-wide one)
            tracer: Tracer for send spans
        """
        self._config = config
        self._ticker = ticker if ticker is not None else get_default_ticker()
        self._codec = codec if codec is not None else MsgpackCodec()
        self._recorder = (
            recorder if recorder is not None else get_error_recorder()
        )
        self._lock = threading.RLock()

        self._observers = ObserverGroup()
        for observer in observers:
            self._observers.add(observer)

        self._salt_generator = IDGenerator(self._ticker)
        self._event_generator = IDGenerator(self._ticker)
        self._identity = SessionIdentity(self._salt_generator, self._ticker)
        self._builder = EventBuilder(
            self._event_generator, self._identity, self._ticker
        )
        self._assembler = SigningPayloadAssembler(
            config.project_id, config.secret, self._builder, self._salt_generator
        )

        self._reconnect = ReconnectController(
            self._ticker,
            self._mark_reconnect_due,
            auto_reconnect=config.auto_reconnect,
            interval_ms=config.reconnect_interval_ms,
            max_attempts_per_cycle=config.max_attempts_per_cycle,
        )
        self._reconnect_due = False

        self._requested_handshake: HandshakeInfo | None = None
        self._handshake: HandshakeInfo | None = None
        self._connected = False
        self._destroyed = False

        self._transport: Transport | None = transport_factory(
            config.host, config.port, config.timeout_ms, _TransportEvents(self)
        )
        self._dispatcher = RequestDispatcher(
            lambda: self._transport,
            self._codec,
            config.project_id,
            tracer,
            host=config.host,
            port=config.port,
        )
        self._unsubscribe = self._ticker.on_every_second(self._on_tick)

        logger.debug(
            "RUM client created: project_id=%s, endpoint=%s, auto_reconnect=%s",
            config.project_id,
            config.endpoint,
            config.auto_reconnect,
        )

    @classmethod
    def from_options(
        cls,
        *,
        project_id: int,
        secret: str,
        host: str,
        port: int,
        transport_factory: TransportFactory,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        auto_reconnect: bool = True,
        debug: bool = False,
        **kwargs: Any,
    ) -> RUMClient:
        """Build a client from plain options.

        Raises:
            RUMConfigurationError: If an option is missing or out of range
        """
        config = RUMConfig(
            project_id=project_id,
            secret=secret,
            host=host,
            port=port,
            timeout_ms=timeout_ms,
            auto_reconnect=auto_reconnect,
            debug=debug,
        )
        return cls(config, transport_factory=transport_factory, **kwargs)

    @property
    def config(self) -> RUMConfig:
        return self._config

    @property
    def session(self) -> int:
        return self._identity.session

    @session.setter
    def session(self, value: int) -> None:
        with self._lock:
            self._identity.session = value

    @property
    def rum_id(self) -> str | None:
        return self._identity.rum_id

    @rum_id.setter
    def rum_id(self, value: str | None) -> None:
        with self._lock:
            self._identity.rum_id = value

    @property
    def handshake(self) -> HandshakeInfo | None:
        """Handshake parameters of the last successful connect."""
        return self._handshake

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def reconnect_phase(self) -> ReconnectPhase:
        return self._reconnect.phase

    @property
    def last_dropped_count(self) -> int:
        """Malformed entries dropped from the most recent batch."""
        return self._assembler.last_dropped_count

    def add_observer(self, observer: ClientObserver) -> None:
        self._observers.add(observer)

    def remove_observer(self, observer: ClientObserver) -> None:
        self._observers.remove(observer)

    def connect(
        self,
        peer_public_key: bytes | str | os.PathLike[str] | None = None,
        *,
        curve: str = DEFAULT_CURVE,
        strength: int = DEFAULT_STRENGTH,
        stream_mode: bool = False,
    ) -> None:
        """Open the connection to the collector.

        Args:
            peer_public_key: Collector public key as bytes, or a path to a
                key file read on a background thread. None connects without
                encryption, as does a key file that cannot be read.
            curve: Elliptic curve for the encrypted handshake
            strength: Key strength in bits
            stream_mode: Use stream encryption
        """
        if self._destroyed:
            self._handle_error(RUMClientDestroyedError())
            return

        options = {"curve": curve, "strength": strength, "stream_mode": stream_mode}

        if isinstance(peer_public_key, (str, os.PathLike)):
            loader = threading.Thread(
                target=self._load_key_and_connect,
                args=(Path(peer_public_key), options),
                name="rum-key-loader",
                daemon=True,
            )
            loader.start()
            return

        if peer_public_key is None:
            self._open(None)
        else:
            self._open(HandshakeInfo(peer_public_key=peer_public_key, **options))

    def custom_event(
        self,
        name: str,
        attrs: Mapping[str, Any],
        timeout_ms: int | None = None,
        callback: SendCallback | None = None,
    ) -> None:
        """Report a single event.

        Args:
            name: Event name
            attrs: Attribute map, values must be serializable by the codec
            timeout_ms: Request timeout, defaults to the configured timeout
            callback: Receives ``(error, data)`` exactly once
        """
        self.custom_events([{"ev": name, "attrs": attrs}], timeout_ms, callback)

    def custom_events(
        self,
        events: Iterable[Mapping[str, Any]],
        timeout_ms: int | None = None,
        callback: SendCallback | None = None,
    ) -> None:
        """Report a batch of events as one signed payload.

        Entries without an ``ev`` name and an ``attrs`` map are dropped. When
        nothing is left, ``callback`` receives a :class:`RUMParameterError`
        before this method returns and nothing is sent.

        Args:
            events: ``{"ev": name, "attrs": {...}}`` entries
            timeout_ms: Request timeout, defaults to the configured timeout
            callback: Receives ``(error, data)`` exactly once
        """
        if isinstance(events, (str, bytes, Mapping)) or not isinstance(
            events, Iterable
        ):
            _report(callback, RUMParameterError(detail="events must be a sequence"))
            return

        try:
            with self._lock:
                payload = self._assembler.assemble(events)
                dropped = self._assembler.last_dropped_count
        except (TypeError, ValueError) as e:
            _report(callback, RUMParameterError(detail=str(e)))
            return

        if payload is None:
            _report(callback, RUMParameterError(detail="no well-formed events"))
            return

        def on_result(error: BaseException | None, data: Any) -> None:
            if error is not None and _is_transport_failure(error):
                self._handle_error(error)
            if callback is not None:
                callback(error, data)

        self._dispatcher.send(
            Wire.METHOD_ADDS,
            payload,
            timeout_ms or self._config.timeout_ms,
            on_result,
            dropped_count=dropped,
        )

    def destroy(self) -> None:
        """Close the connection for good and detach from the ticker.

        Answers still in flight are delivered to their callbacks but no
        longer trigger reconnects or lifecycle notifications.
        """
        with self._lock:
            if self._destroyed:
                return
            self._destroyed = True
            self._connected = False
            self._reconnect_due = False
            self._reconnect.close()
            self._unsubscribe()
            self._identity.reset()
            transport, self._transport = self._transport, None

        if transport is not None:
            try:
                transport.close()
            except Exception:
                logger.exception("Error closing RUM transport")

        logger.info("RUM client destroyed: endpoint=%s", self._config.endpoint)
        self._observers.notify_close(False)
        self._observers.clear()

    def __enter__(self) -> Self:
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit, destroys the client."""
        self.destroy()

    def _load_key_and_connect(self, path: Path, options: dict[str, Any]) -> None:
        try:
            key = path.read_bytes()
        except OSError as e:
            logger.warning(
                "Cannot read peer public key %s, connecting without encryption",
                path,
            )
            self._handle_error(RUMTransportError("failed to read peer key", str(e)))
            self._open(None)
            return

        self._open(HandshakeInfo(peer_public_key=key, **options))

    def _open(self, handshake: HandshakeInfo | None) -> None:
        with self._lock:
            if self._destroyed or self._transport is None:
                return
            self._requested_handshake = handshake
            transport = self._transport

        logger.debug(
            "Connecting to %s (encrypted=%s)",
            self._config.endpoint,
            handshake is not None and handshake.encrypted,
        )
        try:
            transport.connect(handshake)
        except Exception as e:
            logger.debug("Transport connect raised", exc_info=True)
            self._handle_error(RUMTransportError("connect failed", str(e)))

    def _mark_reconnect_due(self) -> None:
        self._reconnect_due = True

    def _take_reconnect(self) -> tuple[bool, HandshakeInfo | None]:
        due, self._reconnect_due = self._reconnect_due, False
        return due, self._handshake or self._requested_handshake

    def _on_tick(self) -> None:
        with self._lock:
            if self._destroyed:
                return
            self._reconnect.on_tick()
            due, handshake = self._take_reconnect()

        if due:
            self._open(handshake)

    def _handle_connect(self) -> None:
        with self._lock:
            if self._destroyed:
                return
            self._connected = True
            self._handshake = self._requested_handshake
            self._reconnect.on_connected()

        logger.info("Connected to RUM collector %s", self._config.endpoint)
        self._observers.notify_connect()

    def _handle_close(self) -> None:
        with self._lock:
            if self._destroyed:
                return
            self._connected = False
            will_reconnect = self._reconnect.on_disconnect()
            due, handshake = self._take_reconnect()

        logger.info(
            "Connection to %s closed (will_reconnect=%s)",
            self._config.endpoint,
            will_reconnect,
        )
        self._observers.notify_close(will_reconnect)
        if due:
            self._open(handshake)

    def _handle_error(self, error: BaseException) -> None:
        self._recorder.record(
            error, source=self._config.endpoint, debug=self._config.debug
        )
        if self._destroyed:
            return
        self._observers.notify_error(error)


def _is_transport_failure(error: BaseException) -> bool:
    return isinstance(error, RUMTransportError) or not isinstance(error, RUMError)


def _report(callback: SendCallback | None, error: BaseException) -> None:
    if callback is None:
        return
    try:
        callback(error, None)
    except Exception:
        logger.exception("RUM send callback raised")
