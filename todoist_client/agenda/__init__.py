"""Helpers for reporting upcoming tasks."""

from .upcoming import UpcomingTask, compute_upcoming, find_inbox

__all__ = ["UpcomingTask", "compute_upcoming", "find_inbox"]
