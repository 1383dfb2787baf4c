"""Todoist REST API client module."""

from .client import TodoistClient
from .exceptions import (
    APIError,
    BodyReadError,
    ConfigurationError,
    DecodeError,
    RequestBuildError,
    TodoistError,
    TransportError,
)
from .models import DueObject, Project, Task

__all__ = [
    "TodoistClient",
    "Project",
    "Task",
    "DueObject",
    "TodoistError",
    "ConfigurationError",
    "RequestBuildError",
    "TransportError",
    "APIError",
    "BodyReadError",
    "DecodeError",
]
