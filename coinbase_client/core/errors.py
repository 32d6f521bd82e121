from __future__ import annotations


class BaseError(Exception):
    """Common wrapper that preserves the original exception."""

    def __init__(self, message: str, original: Exception | None = None):
        super().__init__(message)
        self.original = original


class ExchangeError(BaseError):
    """Generic failure of a single REST call."""


class TransportError(ExchangeError):
    """Network layer failure (connection, TLS, timeout)."""


class DecodeError(ExchangeError):
    """Raised when a response body does not match the expected shape."""


class StatusError(ExchangeError):
    """Non-2xx response; carries the HTTP code and the exchange message."""

    def __init__(self, code: int, message: str, original: Exception | None = None):
        super().__init__(f"status code: {code}, message: {message}", original)
        self.code = code
        self.message = message


class CredentialError(BaseError):
    """Raised when the configured API secret is not valid base64."""


class ValidationError(BaseError):
    """Raised when order, report or query input is rejected before sending."""
