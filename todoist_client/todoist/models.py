"""
Todoist REST API data models.

These models are immutable snapshots of server state, built only from
API responses. Missing or null fields take their zero value; fields
present with the wrong JSON type are rejected with ValueError.
"""

from dataclasses import dataclass, field
import datetime as dt
import re
from typing import Any, Optional

# YYYY-MM-DDTHH:MM:SS[.fraction](Z|+HH:MM|-HH:MM)
_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d{1,6})?([Zz]|[+-]\d{2}:\d{2})"
)


def _as_int(value: Any, key: str) -> int:
    # bool is an int subclass but never a valid id/count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field '{key}' must be an integer, got {value!r}")
    return value


def _get_int(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    return _as_int(value, key)


def _get_optional_int(data: dict, key: str) -> Optional[int]:
    if data.get(key) is None:
        return None
    return _get_int(data, key)


def _get_str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string, got {value!r}")
    return value


def _get_bool(data: dict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field '{key}' must be a boolean, got {value!r}")
    return value


def _require_object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class DueObject:
    """
    Due date descriptor attached to a task.

    Attributes:
        string: Human-readable due date as entered by the user
        date: Date-only value (YYYY-MM-DD)
        recurring: Whether the due date repeats
        datetime: RFC 3339 due time, empty string when the task has no time
        timezone: Timezone name for the due time, if any
    """
    string: str = ""
    date: str = ""
    recurring: bool = False
    datetime: str = ""
    timezone: str = ""

    @property
    def has_time(self) -> bool:
        """Check if this due date carries a time of day."""
        return self.datetime != ""

    def parse_datetime(self) -> Optional[dt.datetime]:
        """
        Parse the due time into an aware datetime.

        Returns:
            None when the task has no due time

        Raises:
            ValueError: If the value is not an RFC 3339 timestamp with an offset
        """
        if not self.has_time:
            return None

        if not _RFC3339_RE.fullmatch(self.datetime):
            raise ValueError(f"due datetime is not RFC 3339: {self.datetime!r}")

        value = self.datetime.replace("z", "Z").replace("Z", "+00:00")
        return dt.datetime.fromisoformat(value.replace("t", "T"))

    @classmethod
    def from_api_response(cls, data: Optional[dict]) -> "DueObject":
        """Create DueObject from Todoist API response."""
        if data is None:
            return cls()
        data = _require_object(data, "due")
        return cls(
            string=_get_str(data, "string"),
            date=_get_str(data, "date"),
            recurring=_get_bool(data, "recurring"),
            datetime=_get_str(data, "datetime"),
            timezone=_get_str(data, "timezone"),
        )


@dataclass(frozen=True)
class Project:
    """
    Represents a Todoist project.

    Attributes:
        id: Unique project ID
        name: Project display name
        color: Color code
        order: Position among sibling projects
        comment_count: Number of project comments
        shared: Whether the project is shared with collaborators
        favorite: Whether the project is marked as favorite
        sync_id: Identifier used for shared project sync
        inbox_project: Whether this is the user's inbox
        url: Link to the project in the Todoist web app
    """
    id: int
    name: str
    color: int = 0
    order: int = 0
    comment_count: int = 0
    shared: bool = False
    favorite: bool = False
    sync_id: int = 0
    inbox_project: bool = False
    url: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "Project":
        """Create Project from Todoist API response."""
        data = _require_object(data, "project")
        return cls(
            id=_get_int(data, "id"),
            name=_get_str(data, "name"),
            color=_get_int(data, "color"),
            order=_get_int(data, "order"),
            comment_count=_get_int(data, "comment_count"),
            shared=_get_bool(data, "shared"),
            # API spelling
            favorite=_get_bool(data, "favourite"),
            sync_id=_get_int(data, "sync_id"),
            inbox_project=_get_bool(data, "inbox_project"),
            url=_get_str(data, "url"),
        )


@dataclass(frozen=True)
class Task:
    """
    Represents an active Todoist task.

    The due descriptor is always present; a task without a due date
    carries an empty DueObject.
    """
    id: int
    project_id: int
    content: str
    section_id: Optional[int] = None
    description: str = ""
    completed: bool = False
    label_ids: tuple[int, ...] = ()
    parent_id: Optional[int] = None
    order: int = 0
    priority: int = 0
    due: DueObject = field(default_factory=DueObject)
    url: str = ""
    comment_count: int = 0
    assignee: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "Task":
        """Create Task from Todoist API response."""
        data = _require_object(data, "task")

        label_ids = data.get("label_ids")
        if label_ids is None:
            label_ids = []
        if not isinstance(label_ids, list):
            raise ValueError(f"field 'label_ids' must be a list, got {label_ids!r}")

        return cls(
            id=_get_int(data, "id"),
            project_id=_get_int(data, "project_id"),
            content=_get_str(data, "content"),
            section_id=_get_optional_int(data, "section_id"),
            description=_get_str(data, "description"),
            completed=_get_bool(data, "completed"),
            label_ids=tuple(_as_int(label_id, "label_ids") for label_id in label_ids),
            parent_id=_get_optional_int(data, "parent_id"),
            order=_get_int(data, "order"),
            priority=_get_int(data, "priority"),
            due=DueObject.from_api_response(data.get("due")),
            url=_get_str(data, "url"),
            comment_count=_get_int(data, "comment_count"),
            assignee=_get_int(data, "assignee"),
        )
