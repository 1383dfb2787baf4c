"""Todoist client exceptions."""

from typing import Optional


class TodoistError(Exception):
    """Base exception for all Todoist client errors."""

    pass


class ConfigurationError(TodoistError):
    """Raised when required credentials or settings are missing or invalid."""

    pass


class RequestBuildError(TodoistError):
    """Raised when a request cannot be built from its method, URL or body."""

    pass


class TransportError(TodoistError):
    """Raised when a request cannot complete (connection failure, timeout)."""

    pass


class APIError(TodoistError):
    """Raised when the Todoist API answers with anything but HTTP 200."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BodyReadError(TodoistError):
    """Raised when a response body cannot be fully read."""

    pass


class DecodeError(TodoistError):
    """Raised when a response body is not the JSON shape we expect."""

    pass
