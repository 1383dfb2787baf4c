"""
Upcoming task computation.

Picks the inbox out of a project listing and works out how many minutes
remain until each timed task is due.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..todoist.models import Project, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpcomingTask:
    """
    A task with a parsed due time.

    Attributes:
        task: The task as fetched from Todoist
        due_at: Aware due datetime
        minutes_remaining: Rounded minutes until due, negative when overdue
    """
    task: Task
    due_at: datetime
    minutes_remaining: int

    @property
    def is_overdue(self) -> bool:
        return self.minutes_remaining < 0


def find_inbox(projects: Iterable[Project]) -> Optional[Project]:
    """Return the project flagged as the inbox, or None."""
    for project in projects:
        if project.inbox_project:
            return project
    return None


def compute_upcoming(
    tasks: Iterable[Task],
    now: Optional[datetime] = None,
) -> list[UpcomingTask]:
    """
    Compute minutes until due for every task with a due time.

    Tasks without a due time are skipped. Tasks whose due time cannot be
    parsed are logged and skipped.

    Args:
        tasks: Tasks to inspect, order is preserved
        now: Aware reference time, defaults to the current UTC time

    Returns:
        List of UpcomingTask objects

    Raises:
        ValueError: If now is a naive datetime
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None or now.utcoffset() is None:
        raise ValueError(f"now must be timezone-aware, got {now!r}")

    upcoming = []
    for task in tasks:
        if not task.due.has_time:
            continue

        try:
            due_at = task.due.parse_datetime()
        except ValueError as e:
            logger.warning(f"Can't parse due time of task {task.id} ({task.content}): {e}")
            continue

        minutes = round((due_at - now).total_seconds() / 60)
        upcoming.append(UpcomingTask(task=task, due_at=due_at, minutes_remaining=minutes))

    return upcoming
