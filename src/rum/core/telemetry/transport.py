"""Seams between the RUM client and the RPC transport it drives.

The transport owns sockets, handshake, encryption, framing and request
multiplexing. The client only needs the small surface declared here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Protocol

AnswerCallback = Callable[[Any], None]


class MessageType(IntEnum):
    """Frame kinds of the RPC protocol."""

    ONEWAY = 0
    TWOWAY = 1
    ANSWER = 2


@dataclass(frozen=True)
class HandshakeInfo:
    """Parameters of a negotiated encrypted connection.

    Args:
        peer_public_key: Collector public key, None for a plain connection
        curve: Elliptic curve name
        strength: Symmetric key strength in bits (128 or 256)
        stream_mode: Stream encryption instead of per-package encryption
    """

    peer_public_key: bytes | None = None
    curve: str = "secp256k1"
    strength: int = 128
    stream_mode: bool = False

    @property
    def encrypted(self) -> bool:
        return self.peer_public_key is not None


@dataclass(frozen=True)
class Quest:
    """An outbound request: method tag, encoded body and frame flag."""

    method: str
    payload: bytes
    flag: int = 1


@dataclass(frozen=True)
class Answer:
    """A raw answer handed back by the transport.

    Args:
        payload: Encoded body, None when the frame carried none
        mtype: Frame kind
        status: Answer status, non-zero marks a server-reported error
    """

    payload: bytes | None = None
    mtype: MessageType = MessageType.ANSWER
    status: int = 0

    @property
    def is_error(self) -> bool:
        return self.mtype == MessageType.ANSWER and self.status != 0


class TransportListener(Protocol):
    """Lifecycle notifications a transport delivers to its owner."""

    def on_connect(self) -> None: ...

    def on_close(self) -> None: ...

    def on_error(self, error: BaseException) -> None: ...


class Transport(Protocol):
    """Connection to the collector."""

    def connect(self, handshake: HandshakeInfo | None = None) -> None:
        """Open the connection, encrypted when ``handshake`` says so."""
        ...

    def send_quest(
        self, quest: Quest, callback: AnswerCallback, timeout_ms: int
    ) -> None:
        """Send ``quest``.

        ``callback`` later receives an :class:`Answer` or an exception.
        """
        ...

    def close(self) -> None: ...


class TransportFactory(Protocol):
    """Builds the transport for one client."""

    def __call__(
        self,
        host: str,
        port: int,
        connect_timeout_ms: int,
        listener: TransportListener,
    ) -> Transport: ...
