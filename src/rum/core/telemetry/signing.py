"""Batching events into a signed collector payload."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .events import EventBuilder, SigningPayload
from .ids import IDGenerator

logger = logging.getLogger(__name__)


def compute_signature(project_id: int, secret: str, salt: int) -> str:
    """Uppercase hex MD5 of ``"{project_id}:{secret}:{salt}"``."""
    digest = hashlib.md5(f"{project_id}:{secret}:{salt}".encode("utf-8"))
    return digest.hexdigest().upper()


class SigningPayloadAssembler:
    """Builds one :class:`SigningPayload` per submission.

    Raw entries are mappings carrying an ``ev`` name and an ``attrs`` map.
    Anything else is dropped without raising; the number dropped by the last
    call is kept in :attr:`last_dropped_count`. A fresh salt is drawn for
    every payload, so signatures are never reused.
    """

    def __init__(
        self,
        project_id: int,
        secret: str,
        builder: EventBuilder,
        salt_generator: IDGenerator,
    ) -> None:
        self._project_id = project_id
        self._secret = secret
        self._builder = builder
        self._salt_generator = salt_generator
        self.last_dropped_count = 0

    def assemble(
        self, raw_events: Iterable[Mapping[str, Any]]
    ) -> SigningPayload | None:
        """Assemble a signed payload.

        Args:
            raw_events: Sequence of ``{"ev": name, "attrs": {...}}`` entries

        Returns:
            Signed payload, or None when no entry was well formed
        """
        events = []
        dropped = 0
        for raw in raw_events:
            if not _is_well_formed(raw):
                dropped += 1
                continue
            events.append(self._builder.build(raw["ev"], raw["attrs"]))

        self.last_dropped_count = dropped
        if dropped:
            logger.debug("Dropped %d malformed event(s) from batch", dropped)

        if not events:
            return None

        salt = self._salt_generator.generate()
        return SigningPayload(
            project_id=self._project_id,
            signature=compute_signature(self._project_id, self._secret, salt),
            salt=salt,
            events=events,
        )


def _is_well_formed(raw: Any) -> bool:
    return (
        isinstance(raw, Mapping)
        and isinstance(raw.get("ev"), str)
        and "attrs" in raw
        and isinstance(raw["attrs"], Mapping)
    )
