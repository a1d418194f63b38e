"""Shared pytest fixtures for all tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Generator

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

    from rum.core.telemetry import (
        HandshakeInfo,
        Quest,
        RUMClient,
        RUMConfig,
        TransportListener,
    )
    from rum.core.telemetry.recorder import ErrorRecorder


class SpanCapture:
    """Helper to capture and analyze spans."""

    def __init__(self):
        self.exporter = InMemorySpanExporter()
        self.provider = TracerProvider()
        self.provider.add_span_processor(SimpleSpanProcessor(self.exporter))

    @property
    def tracer(self) -> "Tracer":
        return self.provider.get_tracer("tests")

    def get_spans(self):
        """Get all captured spans."""
        return self.exporter.get_finished_spans()

    def clear(self):
        """Clear captured spans."""
        self.exporter.clear()


@pytest.fixture(scope="session")
def span_capture() -> SpanCapture:
    """Fixture to capture spans - created once for entire test session."""
    return SpanCapture()


@pytest.fixture(autouse=True)
def clear_spans_between_tests(span_capture: SpanCapture):
    """Clear captured spans before each test."""
    span_capture.clear()
    yield


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RUM_* overrides from the developer's shell out of the tests."""
    for name in ("RUM_HOST", "RUM_PORT", "RUM_DEBUG"):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Collaborator fakes
# ============================================================================


class ManualTicker:
    """Ticker whose clock and ticks are driven by the test."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms
        self.callbacks: list[Callable[[], None]] = []

    def now(self) -> int:
        return self.now_ms

    def on_every_second(self, callback: Callable[[], None]) -> Callable[[], None]:
        self.callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return unsubscribe

    def advance(self, ms: int) -> None:
        self.now_ms += ms

    def tick(self, ms: int = 1000) -> None:
        """Advance the clock and fire every subscriber once."""
        self.advance(ms)
        for callback in list(self.callbacks):
            callback()


class FakeTransport:
    """In-memory transport recording everything the client asks of it."""

    def __init__(
        self,
        host: str,
        port: int,
        connect_timeout_ms: int,
        listener: "TransportListener",
        *,
        auto_connect: bool = False,
    ):
        self.host = host
        self.port = port
        self.connect_timeout_ms = connect_timeout_ms
        self.listener = listener
        self.auto_connect = auto_connect
        self.connects: list["HandshakeInfo | None"] = []
        self.quests: list[tuple["Quest", Callable[[Any], None], int]] = []
        self.closed = False

    def connect(self, handshake: "HandshakeInfo | None" = None) -> None:
        self.connects.append(handshake)
        if self.auto_connect:
            self.listener.on_connect()

    def send_quest(self, quest, callback, timeout_ms) -> None:
        self.quests.append((quest, callback, timeout_ms))

    def close(self) -> None:
        self.closed = True
        self.listener.on_close()

    # Test-side drivers

    def establish(self) -> None:
        self.listener.on_connect()

    def drop(self) -> None:
        self.listener.on_close()

    def fail(self, error: BaseException) -> None:
        self.listener.on_error(error)

    def answer(self, raw: Any, index: int = -1) -> None:
        _, callback, _ = self.quests[index]
        callback(raw)


class TransportRegistry:
    """Transport factory keeping a handle on every transport it builds."""

    def __init__(self, *, auto_connect: bool = False):
        self.auto_connect = auto_connect
        self.built: list[FakeTransport] = []

    def __call__(self, host, port, connect_timeout_ms, listener) -> FakeTransport:
        transport = FakeTransport(
            host, port, connect_timeout_ms, listener, auto_connect=self.auto_connect
        )
        self.built.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.built[-1]


class RecordingCallback:
    """Callable collecting ``(error, data)`` pairs."""

    def __init__(self):
        self.calls: list[tuple[BaseException | None, Any]] = []

    def __call__(self, error, data) -> None:
        self.calls.append((error, data))

    @property
    def error(self) -> BaseException | None:
        assert len(self.calls) == 1, self.calls
        return self.calls[0][0]

    @property
    def data(self) -> Any:
        assert len(self.calls) == 1, self.calls
        return self.calls[0][1]


# ============================================================================
# RUM-specific fixtures
# ============================================================================


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def transports() -> TransportRegistry:
    return TransportRegistry()


@pytest.fixture
def recorder() -> "ErrorRecorder":
    from rum.core.telemetry.recorder import ErrorRecorder

    return ErrorRecorder()


@pytest.fixture
def callback() -> RecordingCallback:
    return RecordingCallback()


@pytest.fixture
def rum_config() -> "RUMConfig":
    """Standard test configuration for client tests."""
    from rum.core.telemetry import RUMConfig

    return RUMConfig(
        project_id=41000015,
        secret="affc562c-8796-4714-b8ae-4b061ca48a6b",
        host="rum.test.local",
        port=13609,
        timeout_ms=5000,
    )


@pytest.fixture
def rum_client(
    rum_config: "RUMConfig",
    transports: TransportRegistry,
    ticker: ManualTicker,
    recorder: "ErrorRecorder",
    span_capture: SpanCapture,
) -> Generator["RUMClient", None, None]:
    """Fixture providing a RUMClient wired to fakes.

    Automatically destroys the client after each test.
    """
    from rum.core.telemetry import RUMClient

    client = RUMClient(
        rum_config,
        transport_factory=transports,
        ticker=ticker,
        recorder=recorder,
        tracer=span_capture.tracer,
    )
    yield client
    client.destroy()
