"""Event records, client identity and the builder that stamps them."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .attributes import Wire
from .ids import IDGenerator, generate_rum_id

if TYPE_CHECKING:
    from .scheduler import Ticker


class Event(BaseModel):
    """One reported occurrence, as sent to the collector."""

    name: str = Field(..., alias="ev")
    session_id: int = Field(..., alias="sid")
    client_id: str = Field(..., alias="rid")
    timestamp: int = Field(..., alias="ts")
    event_id: int = Field(..., alias="eid")
    source: str = Field(Wire.SOURCE, alias="source")
    attrs: dict[str, Any] = Field(default_factory=dict, alias="attrs")

    model_config = ConfigDict(
        validate_by_name=True, validate_by_alias=True, frozen=True
    )


class SigningPayload(BaseModel):
    """A signed batch of events submitted with a single ``adds`` request."""

    project_id: int = Field(..., alias="pid")
    signature: str = Field(..., alias="sign")
    salt: int = Field(..., alias="salt")
    events: list[Event] = Field(..., alias="events")

    model_config = ConfigDict(
        validate_by_name=True, validate_by_alias=True, frozen=True
    )

    def to_wire(self) -> dict[str, Any]:
        """Mapping keyed by wire names, ready for the payload codec."""
        return self.model_dump(by_alias=True)


class SessionIdentity:
    """Session id and client id shared by every event of a client.

    A default session id is drawn from ``generator`` up front. Both values
    are filled lazily by :meth:`resolve` and stay fixed until :meth:`reset`
    or an explicit assignment.
    """

    def __init__(self, generator: IDGenerator, ticker: Ticker) -> None:
        self._ticker = ticker
        self.init_session = generator.generate()
        self.session: int = 0
        self.rum_id: str | None = None

    def resolve(self) -> tuple[int, str]:
        if not self.session:
            self.session = self.init_session
        if not self.rum_id:
            self.rum_id = generate_rum_id(self._ticker.now())
        return self.session, self.rum_id

    def reset(self) -> None:
        self.session = 0
        self.rum_id = None


class EventBuilder:
    """Stamps time, event id and identity onto a name and attribute map."""

    def __init__(
        self,
        generator: IDGenerator,
        identity: SessionIdentity,
        ticker: Ticker,
    ) -> None:
        self._generator = generator
        self._identity = identity
        self._ticker = ticker

    def build(self, name: str, attrs: Mapping[str, Any]) -> Event:
        """Build one event.

        Args:
            name: Event name
            attrs: Attribute map, forwarded verbatim

        Returns:
            Immutable event record

        Raises:
            TypeError: If ``attrs`` is not a mapping
        """
        if not isinstance(attrs, Mapping):
            raise TypeError(f"attrs must be a mapping, got {type(attrs).__name__}")

        session_id, client_id = self._identity.resolve()
        return Event(
            name=name,
            session_id=session_id,
            client_id=client_id,
            timestamp=self._ticker.now() // 1000,
            event_id=self._generator.generate(),
            source=Wire.SOURCE,
            attrs=dict(attrs),
        )
