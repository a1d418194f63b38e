"""RUM client exceptions."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Where in the client a failure originated."""

    CONFIGURATION = "Configuration"
    PARAMETER = "Parameter"
    TRANSPORT = "Transport"
    PROTOCOL = "Protocol"


class RUMError(Exception):
    """Base class for every error surfaced by the RUM client.

    Args:
        category: Failure category
        message: Short human readable description
        detail: Optional extra context appended to ``str(err)``
    """

    category: ErrorCategory
    message: str
    detail: str

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        detail: str = "",
    ) -> None:
        self.category = category
        self.message = message
        self.detail = detail
        super().__init__(f"{message}: {detail}" if detail else message)


class RUMConfigurationError(RUMError, ValueError):
    """Invalid or missing client configuration."""

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(ErrorCategory.CONFIGURATION, message, detail)


class RUMParameterError(RUMError):
    """Empty or malformed event batch handed to the client."""

    def __init__(self, message: str = "param error", detail: str = "") -> None:
        super().__init__(ErrorCategory.PARAMETER, message, detail)


class RUMTransportError(RUMError):
    """Connection failure, timeout or undecodable answer."""

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(ErrorCategory.TRANSPORT, message, detail)


class RUMClientDestroyedError(RUMTransportError):
    """Send attempted after the client dropped its transport."""

    def __init__(self) -> None:
        super().__init__("client has been destroyed")


class RUMEmptyResponseError(RUMTransportError):
    """The collector answered without a body."""

    def __init__(self) -> None:
        super().__init__("empty response")


class RUMAnswerError(RUMError):
    """The collector reported an application error as a ``code``/``ex`` pair."""

    code: Any
    ex: Any

    def __init__(self, code: Any, ex: Any) -> None:
        self.code = code
        self.ex = ex
        super().__init__(ErrorCategory.PROTOCOL, f"code: {code}, ex: {ex}")
