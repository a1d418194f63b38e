"""RUM telemetry client.

Reports custom user/application events to a RUM collector over a
persistent, reconnecting connection.

Quick Start:
    >>> from rum.core.telemetry import RUMClient, RUMConfig, ClientObserver
    >>>
    >>> class Printer(ClientObserver):
    ...     def on_close(self, will_reconnect):
    ...         print("closed, reconnecting:", will_reconnect)
    >>>
    >>> config = RUMConfig(
    ...     project_id=41000015,
    ...     secret="affc562c-8796-4714-b8ae-4b061ca48a6b",
    ...     host="rum.example.com",
    ...     port=13609,
    ... )
    >>> client = RUMClient(
    ...     config, transport_factory=make_transport, observers=[Printer()]
    ... )
    >>> client.connect()
    >>> client.custom_event("error", {"test": 123}, callback=on_sent)
    >>> client.custom_events(
    ...     [{"ev": "error", "attrs": {}}, {"ev": "info", "attrs": {}}],
    ...     callback=on_sent,
    ... )
    >>> client.destroy()
"""

from .client import RUMClient
from .config import RUMConfig
from .dispatcher import RequestDispatcher, classify
from .events import Event, EventBuilder, SessionIdentity, SigningPayload
from .ids import IDGenerator, generate_rum_id
from .observer import ClientObserver
from .reconnect import ReconnectController, ReconnectPhase, ReconnectState
from .recorder import ErrorRecorder, get_error_recorder
from .scheduler import SecondTicker, Ticker, get_default_ticker
from .signing import SigningPayloadAssembler, compute_signature
from .transport import (
    Answer,
    HandshakeInfo,
    MessageType,
    Quest,
    Transport,
    TransportFactory,
    TransportListener,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "RUMClient",
    "RUMConfig",
    "ClientObserver",
    # Building blocks
    "IDGenerator",
    "generate_rum_id",
    "SessionIdentity",
    "EventBuilder",
    "SigningPayloadAssembler",
    "compute_signature",
    "ReconnectController",
    "ReconnectPhase",
    "ReconnectState",
    "RequestDispatcher",
    "classify",
    # Records
    "Event",
    "SigningPayload",
    # Collaborator seams
    "Ticker",
    "SecondTicker",
    "get_default_ticker",
    "Transport",
    "TransportFactory",
    "TransportListener",
    "HandshakeInfo",
    "Quest",
    "Answer",
    "MessageType",
    # Diagnostics
    "ErrorRecorder",
    "get_error_recorder",
]
