"""RUM client configuration module."""

from __future__ import annotations

import os
from dataclasses import dataclass

from ..errors import RUMConfigurationError
from .reconnect import DEFAULT_MAX_ATTEMPTS_PER_CYCLE, DEFAULT_RECONNECT_INTERVAL_MS

DEFAULT_TIMEOUT_MS = 5000

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RUMConfig:
    """Configuration for a RUM client.

    Environment variable overrides (applied when set):
    - RUM_HOST
    - RUM_PORT
    - RUM_DEBUG ("1", "true", "yes" or "on" enable debug logging)

    Args:
        project_id: Collector project id, positive
        secret: Project secret used to sign payloads
        host: Collector host
        port: Collector port, positive
        timeout_ms: Default request and connect timeout in milliseconds
        auto_reconnect: Re-establish dropped connections
        debug: Log every recorded transport error
        reconnect_interval_ms: Backoff window between reconnect cycles
        max_attempts_per_cycle: Disconnects counted before reconnecting immediately

    Raises:
        RUMConfigurationError: If a value is missing or out of range
    """

    project_id: int
    secret: str
    host: str
    port: int
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    auto_reconnect: bool = True
    debug: bool = False
    reconnect_interval_ms: int = DEFAULT_RECONNECT_INTERVAL_MS
    max_attempts_per_cycle: int = DEFAULT_MAX_ATTEMPTS_PER_CYCLE

    def __post_init__(self) -> None:
        """Resolve configuration from environment variables and validate."""
        if env_host := os.getenv("RUM_HOST"):
            object.__setattr__(self, "host", env_host)

        if env_port := os.getenv("RUM_PORT"):
            try:
                object.__setattr__(self, "port", int(env_port))
            except ValueError:
                raise RUMConfigurationError(
                    "RUM_PORT must be an integer", env_port
                ) from None

        if env_debug := os.getenv("RUM_DEBUG"):
            object.__setattr__(self, "debug", env_debug.lower() in _TRUTHY)

        self._validate()

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            RUMConfigurationError: If configuration is invalid
        """
        if not _is_positive_int(self.project_id):
            raise RUMConfigurationError(
                "project_id must be a positive integer", repr(self.project_id)
            )

        if not isinstance(self.secret, str) or not self.secret:
            raise RUMConfigurationError("secret must be a non-empty string")

        if not isinstance(self.host, str) or not self.host:
            raise RUMConfigurationError("host must be a non-empty string")

        if not _is_positive_int(self.port):
            raise RUMConfigurationError(
                "port must be a positive integer", repr(self.port)
            )

        if not _is_positive_int(self.timeout_ms):
            raise RUMConfigurationError(
                "timeout_ms must be a positive integer", repr(self.timeout_ms)
            )

        if not _is_positive_int(self.reconnect_interval_ms):
            raise RUMConfigurationError(
                "reconnect_interval_ms must be a positive integer",
                repr(self.reconnect_interval_ms),
            )

        if not _is_positive_int(self.max_attempts_per_cycle):
            raise RUMConfigurationError(
                "max_attempts_per_cycle must be a positive integer",
                repr(self.max_attempts_per_cycle),
            )


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
