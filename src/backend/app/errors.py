"""Ploi panel error hierarchy.

All errors inherit from PanelError. The Ploi client raises AuthError,
ResourceError and NetworkError internally and converts them to notifications
at its boundary; NotFoundError is raised by the panel routers. The global
exception handler in main.py renders any PanelError that escapes a route as
structured JSON with a request_id.
"""

from enum import Enum


class ErrorKind(str, Enum):
    AUTH = "auth"
    RESOURCE = "resource"
    NETWORK = "network"
    NOT_FOUND = "not_found"


class PanelError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class AuthError(PanelError):
    """The Ploi API rejected the configured API key."""

    status_code = 401
    code = "INVALID_API_KEY"
    kind = ErrorKind.AUTH


class ResourceError(PanelError):
    """The Ploi API refused an action with a 422 and an explanatory message."""

    status_code = 422
    code = "ACTION_REJECTED"
    kind = ErrorKind.RESOURCE


class NetworkError(PanelError):
    status_code = 502
    code = "UPSTREAM_ERROR"
    kind = ErrorKind.NETWORK


class NotFoundError(PanelError):
    status_code = 404
    code = "NOT_FOUND"
    kind = ErrorKind.NOT_FOUND
