"""Msgpack serialization for collector payloads.

The collector speaks msgpack with 64-bit integers. Event attributes are an
open mapping, so anything msgpack cannot pack natively goes through
:func:`serialize_defaults` first.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Protocol
from zoneinfo import ZoneInfo

import msgpack
from pydantic import BaseModel


class PayloadCodec(Protocol):
    """Turns a payload mapping into bytes and back."""

    def encode(self, payload: Mapping[str, Any]) -> bytes: ...

    def decode(self, data: bytes) -> Any: ...


def serialize_defaults(
    obj: Any,
) -> dict[str, Any] | list[Any] | str | int | float | bool | bytes | None:
    """Convert Python objects msgpack cannot pack into packable values.

    Intended as the ``default`` hook of :func:`msgpack.packb`:

    - Pydantic models: dict from ``model_dump(by_alias=True)``
    - Dataclasses: dict from ``asdict()``
    - Enums: the enum value (recursively serialized)
    - datetime: ISO format string
    - timezone/ZoneInfo: timezone name
    - sets and frozensets: lists
    - anything else: ``str(obj)``

    Examples:
        >>> import msgpack
        >>> from datetime import datetime
        >>> packed = msgpack.packb(datetime(2024, 1, 15), default=serialize_defaults)
        >>> msgpack.unpackb(packed)
        '2024-01-15T00:00:00'
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True, exclude_none=True, mode="json")

    if isinstance(obj, type) and issubclass(obj, BaseModel):
        return {
            "__class__": obj.__name__,
            "__module__": obj.__module__,
        }

    if hasattr(obj, "to_dict") and not isinstance(obj, type):
        return obj.to_dict()

    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)

    if isinstance(obj, Enum):
        return serialize_defaults(obj.value)

    if isinstance(obj, (set, frozenset)):
        return list(obj)

    if isinstance(obj, datetime):
        return obj.isoformat()

    if isinstance(obj, (timezone, ZoneInfo)):
        return obj.tzname(None)

    if obj is None or isinstance(obj, (bool, int, float, str, bytes, list, dict)):
        return obj

    return str(obj)


class MsgpackCodec:
    """Default :class:`PayloadCodec` used by the RUM client."""

    def encode(self, payload: Mapping[str, Any]) -> bytes:
        """Pack ``payload`` into a msgpack buffer.

        Raises:
            TypeError: If a value cannot be packed even after
                :func:`serialize_defaults`
        """
        return msgpack.packb(payload, default=serialize_defaults, use_bin_type=True)

    def decode(self, data: bytes) -> Any:
        """Unpack a msgpack buffer.

        Raises:
            ValueError: If ``data`` is not valid msgpack
        """
        return msgpack.unpackb(data, raw=False, strict_map_key=False)
