"""
Pytest configuration and shared fixtures.

Provides a fake HTTP transport and test data for Todoist API testing.
"""

import io
import json
import socket
import threading
from typing import Callable, Optional

import pytest
import requests
from requests.adapters import BaseAdapter

from todoist_client.todoist.client import TodoistClient
from todoist_client.todoist.models import DueObject, Project, Task


# ============================================================================
# Fake Transport
# ============================================================================

class FailingBody(io.RawIOBase):
    """Response body that breaks after the headers arrived."""

    def read(self, size=-1):
        raise OSError("connection reset while reading body")


class RecordingAdapter(BaseAdapter):
    """
    Transport adapter that records prepared requests and answers them
    with a canned response, or raises a canned exception.
    """

    def __init__(
        self,
        status_code: int = 200,
        body: bytes = b"[]",
        error: Optional[Exception] = None,
        raw_factory: Optional[Callable[[], io.IOBase]] = None,
    ):
        super().__init__()
        self.status_code = status_code
        self.body = body
        self.error = error
        self.raw_factory = raw_factory
        self.requests: list[requests.PreparedRequest] = []
        self.timeouts: list = []
        self.responses: list[requests.Response] = []
        self.closed = False

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error

        response = requests.Response()
        response.status_code = self.status_code
        response.url = request.url
        response.request = request
        response.raw = self.raw_factory() if self.raw_factory else io.BytesIO(self.body)
        self.responses.append(response)
        return response

    def close(self):
        self.closed = True

    @property
    def last_request(self) -> requests.PreparedRequest:
        return self.requests[-1]


@pytest.fixture
def serve_once():
    """
    Start a one-shot HTTP server on localhost.

    The handler receives the accepted socket, after the request has been
    read, and a stop event set at teardown. Returns the server URL.
    """
    servers = []

    def _serve(handler: Callable[[socket.socket, threading.Event], None]) -> str:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        stop = threading.Event()

        def run():
            try:
                conn, _ = listener.accept()
            except OSError:
                return
            with conn:
                conn.recv(65536)
                try:
                    handler(conn, stop)
                except OSError:
                    # Client went away
                    pass

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        servers.append((listener, stop, thread))
        return f"http://127.0.0.1:{listener.getsockname()[1]}/"

    yield _serve

    for listener, stop, thread in servers:
        stop.set()
        listener.close()
        thread.join(timeout=2)


@pytest.fixture
def failing_body() -> type:
    """Raw body class whose reads fail."""
    return FailingBody


@pytest.fixture
def make_client() -> Callable[..., tuple[TodoistClient, RecordingAdapter]]:
    """Build a client whose session talks to a RecordingAdapter."""

    def _make(status_code: int = 200, body=b"[]", **kwargs):
        if not isinstance(body, bytes):
            body = json.dumps(body).encode()
        adapter = RecordingAdapter(status_code=status_code, body=body, **kwargs)
        client = TodoistClient(client_id="client-id", client_secret="client-secret")
        client._session.mount("https://", adapter)
        client._session.mount("http://", adapter)
        return client, adapter

    return _make


# ============================================================================
# Model Fixtures
# ============================================================================

@pytest.fixture
def sample_project() -> Project:
    """Create a sample inbox project."""
    return Project(
        id=2203306141,
        name="Inbox",
        color=48,
        order=0,
        inbox_project=True,
        url="https://todoist.com/showProject?id=2203306141",
    )


@pytest.fixture
def sample_task() -> Task:
    """Create a sample task with a due time."""
    return Task(
        id=2995104339,
        project_id=2203306141,
        content="Buy milk",
        due=DueObject(
            string="Jan 1 2030 12:00",
            date="2030-01-01",
            datetime="2030-01-01T12:00:00Z",
            timezone="Europe/Moscow",
        ),
    )


# ============================================================================
# API Response Fixtures
# ============================================================================

@pytest.fixture
def project_response() -> dict:
    """Sample Todoist API project response."""
    return {
        "id": 2203306141,
        "color": 47,
        "name": "Shopping List",
        "comment_count": 10,
        "shared": False,
        "favourite": True,
        "sync_id": 0,
        "order": 1,
        "url": "https://todoist.com/showProject?id=2203306141",
        "inbox_project": False,
    }


@pytest.fixture
def task_response() -> dict:
    """Sample Todoist API task response."""
    return {
        "id": 2995104339,
        "assignee": 2671362,
        "comment_count": 10,
        "completed": False,
        "content": "Buy Milk",
        "description": "",
        "due": {
            "date": "2016-09-01",
            "datetime": "2016-09-01T11:00:00Z",
            "recurring": False,
            "string": "tomorrow at 12",
            "timezone": "Europe/Moscow",
        },
        "label_ids": [2156154810, 2156154820, 2156154826],
        "order": 1,
        "priority": 1,
        "project_id": 2203306141,
        "section_id": 7025,
        "parent_id": 2995104589,
        "url": "https://todoist.com/showTask?id=2995104339",
    }


@pytest.fixture
def mock_env(monkeypatch, tmp_path):
    """Set a complete Todoist environment and isolate from any local .env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TODOIST_CLIENT_ID", "test_client")
    monkeypatch.setenv("TODOIST_CLIENT_SECRET", "test_secret")
    monkeypatch.setenv("TODOIST_ACCESS_TOKEN", "test_token")
    monkeypatch.setenv("TODOIST_TIMEOUT", "3.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
