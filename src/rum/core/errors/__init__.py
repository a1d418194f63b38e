"""RUM client exceptions module.

This module exposes the error taxonomy shared by every client component.
"""

from .errors import (
    ErrorCategory,
    RUMAnswerError,
    RUMClientDestroyedError,
    RUMConfigurationError,
    RUMEmptyResponseError,
    RUMError,
    RUMParameterError,
    RUMTransportError,
)

__all__ = [
    "ErrorCategory",
    "RUMError",
    "RUMConfigurationError",
    "RUMParameterError",
    "RUMTransportError",
    "RUMClientDestroyedError",
    "RUMEmptyResponseError",
    "RUMAnswerError",
]
