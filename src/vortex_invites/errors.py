"""
Vortex Errors

Exception hierarchy shared by JWT generation, webhook handling and the
API client. Everything raised by this package derives from ``VortexError``.
"""

from typing import Any, Optional


class VortexError(Exception):
    """Base class for all Vortex SDK errors."""

    pass


class MalformedApiKeyError(VortexError, ValueError):
    """Raised when the API key is not of the form ``VRTX.{encodedId}.{key}``."""

    pass


class InvalidInputError(VortexError, ValueError):
    """Raised when a caller-supplied user or request is missing required fields."""

    pass


class SigningError(VortexError):
    """Raised when the HMAC primitive fails while deriving a key or signing."""

    pass


class VortexWebhookSignatureError(VortexError):
    """Raised when webhook signature verification fails."""

    pass


class WebhookPayloadError(VortexError, ValueError):
    """Raised when a correctly signed webhook body cannot be decoded into an event."""

    pass


class VortexApiError(VortexError):
    """
    Raised when a request to the Vortex API fails.

    ``status_code`` is ``None`` when no response was received at all
    (connection refused, timeout, ...).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[Any] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def __repr__(self) -> str:
        return f"VortexApiError(status_code={self.status_code!r}, message={self.message!r})"
