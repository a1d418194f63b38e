"""Wire constants and span attribute names for the RUM client.

Usage:
    from rum.core.telemetry.attributes import Attr, Wire

    span.set_attribute(Attr.Rum.METHOD, Wire.METHOD_ADDS)
"""

from __future__ import annotations


class Wire:
    """Values the collector protocol fixes."""

    METHOD_ADDS = "adds"
    QUEST_FLAG = 1
    SOURCE = "python"


class Attr:
    """Span attribute namespace.

    Organized by domain for clarity and discoverability.
    """

    class Rum:
        """Attributes describing one submission to the collector."""

        METHOD = "rum.method"
        PROJECT_ID = "rum.project_id"
        EVENT_COUNT = "rum.event_count"
        DROPPED_COUNT = "rum.dropped_count"
        SALT = "rum.salt"
        TIMEOUT_MS = "rum.timeout_ms"

    class Connection:
        """Attributes describing the collector endpoint."""

        HOST = "server.address"
        PORT = "server.port"

    class Error:
        """Error attributes."""

        TYPE = "error.type"
        CATEGORY = "rum.error.category"
