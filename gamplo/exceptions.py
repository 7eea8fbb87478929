"""
Custom exceptions for the Gamplo client.
"""

from typing import Optional


class GamploError(Exception):
    """Base exception for all Gamplo errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class ValidationError(GamploError):
    """Invalid arguments, rejected before any network activity."""
    pass


class NotAuthenticatedError(ValidationError):
    """No session is available; authenticate() has not succeeded yet."""

    def __init__(self, message: str = "Not authenticated. Please call authenticate() first."):
        super().__init__(message)


class AuthenticationError(GamploError):
    """Failed to exchange a token for a session."""
    pass


class TransportError(GamploError):
    """Request failed: non-success status, network error or timeout."""
    pass


class ParseError(GamploError):
    """A stream event line could not be decoded."""
    pass


class ConnectionCancelledError(GamploError):
    """The connection was cancelled by an explicit disconnect."""

    def __init__(self, message: str = "Connection aborted"):
        super().__init__(message)
