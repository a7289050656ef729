"""
Error kinds raised by the client.

NetworkError and ApiError cover every remote failure. The UI layer catches
EstagiosError at each action, shows a notification and keeps running.
"""

from __future__ import annotations

from typing import Optional


class EstagiosError(Exception):
    """Base class for all client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkError(EstagiosError):
    """The request could not complete (DNS, connection, timeout)."""


class ApiError(EstagiosError):
    """The request completed but the server reported a failure."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class AuthError(ApiError):
    """401/403 from the API. The stored session has already been cleared."""


class PermissionDeniedError(EstagiosError):
    """The current user is not the advisor of the record being graded."""


class ValidationError(EstagiosError):
    """Basic presence checks on data coming from the API."""
