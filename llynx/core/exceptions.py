"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class LlynxError(Exception):
    """Base exception for llynx."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(LlynxError):
    """Malformed or missing request fields."""

    pass


class AuthenticationError(LlynxError):
    """A session is required but the caller has none."""

    pass


class NotFoundError(LlynxError):
    """Resource not found or not owned by the caller."""

    pass


class DuplicateError(LlynxError):
    """Duplicate resource detected."""

    pass


class BackendUnavailableError(LlynxError):
    """The requested backend is not configured (e.g. missing remote credential)."""

    pass


class UpstreamError(LlynxError):
    """Upstream model backend unreachable, non-2xx, or failed mid-stream."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message, details=details)
        self.status_code = status_code


class PersistenceError(LlynxError):
    """Storage failure. Logged, never surfaced to the client."""

    pass
