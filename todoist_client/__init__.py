"""Minimal client for the Todoist REST API."""

__version__ = "0.1.0"
