"""Serialization utilities for converting payloads to the collector wire format."""

from .msgpack import MsgpackCodec, PayloadCodec, serialize_defaults

__all__ = ["MsgpackCodec", "PayloadCodec", "serialize_defaults"]
