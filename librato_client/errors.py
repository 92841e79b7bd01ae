"""Exceptions raised by the Librato client."""

from typing import Optional


class LibratoError(Exception):
    """Base class for all client errors."""


class ConfigurationError(LibratoError):
    """Raised when the client is built without usable credentials."""


class ValidationError(LibratoError, ValueError):
    """Raised when an operation is given a missing or malformed argument."""


class TransportError(LibratoError):
    """Raised when the metrics API answers with a non-2xx status."""

    def __init__(self, status_code: int, method: str, url: str, body: Optional[str] = None):
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body
        super().__init__(f"{method} {url} failed with HTTP {status_code}")
