# akibaflow/errors.py
from __future__ import annotations

from typing import List, Optional


class AkibaFlowError(Exception):
    """Base class for every error raised by the client."""


class TransportError(AkibaFlowError):
    """No response reached the client (DNS, refused connection, reset...)."""

    def __init__(self, message: str = "Network request failed") -> None:
        super().__init__(message)


class DecodeError(AkibaFlowError):
    """A successful response did not match the expected contract."""


class FormError(AkibaFlowError):
    """Form input rejected before any request is made."""


class NotAuthenticatedError(AkibaFlowError):
    def __init__(self, message: str = "Please log in first") -> None:
        super().__init__(message)


class ApiError(AkibaFlowError):
    """Non-2xx response from the API.

    ``message`` is the first validation message the server returned, or its
    string ``detail``, or the HTTP reason phrase.
    """

    def __init__(self, status_code: int, message: str, details: Optional[List] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details or []

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    def __str__(self) -> str:
        return self.message


class ConfigError(AkibaFlowError):
    """Invalid configuration value."""
