"""
Todoist REST API client.

Handles bearer authentication, response decoding and error handling for
the Todoist REST v1 API. Access tokens and the client secret are passed
in by the caller and never logged.
"""

import json
import logging
import socket
import threading
import time
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import urlencode

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import (
    APIError,
    BodyReadError,
    ConfigurationError,
    DecodeError,
    RequestBuildError,
    TransportError,
)
from .models import Project, Task

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CHUNK_SIZE = 8192

# Raised by requests while preparing a request, before anything is sent
_REQUEST_BUILD_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)


def _shutdown_socket(response: requests.Response) -> None:
    """Shut down the socket under a streamed response to unblock its reader."""
    connection = getattr(response.raw, "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        # Already closed by the reader
        logger.debug(f"Socket shutdown after deadline failed: {e}")


class TodoistClient:
    """
    Client for the Todoist REST API.

    Handles:
    - Bearer authentication with a caller-supplied access token
    - OAuth authorization URL construction and code exchange
    - Decoding of projects and tasks into immutable records

    Every call is a single attempt: nothing is retried, cached or paginated.

    Usage:
        client = TodoistClient(client_id="...", client_secret="...")

        for project in client.get_projects(access_token):
            for task in client.get_tasks_by_project(access_token, project.id):
                print(task.content)
    """

    # API endpoints
    PROJECTS_ENDPOINT = "https://api.todoist.com/rest/v1/projects"
    TASKS_ENDPOINT = "https://api.todoist.com/rest/v1/tasks"
    AUTHORIZE_ENDPOINT = "https://todoist.com/oauth/authorize"
    ACCESS_TOKEN_ENDPOINT = "https://todoist.com/oauth/access_token"

    DEFAULT_SCOPE = "data:read"
    DEFAULT_STATE = "state"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout: float = 5.0,
    ):
        """
        Initialize Todoist client.

        Args:
            client_id: OAuth application client ID
            client_secret: OAuth application client secret (never logged)
            timeout: Default request timeout in seconds

        Raises:
            ConfigurationError: If either credential is empty
        """
        if not client_id:
            raise ConfigurationError("Todoist client_id is required")
        if not client_secret:
            raise ConfigurationError("Todoist client_secret is required")

        self.client_id = client_id
        self._client_secret = client_secret  # Private, never logged
        self.timeout = timeout

        # Single attempt per call
        self._session = requests.Session()
        adapter = HTTPAdapter(max_retries=Retry(total=0, read=False))
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self._session.headers.update({"Accept": "application/json"})

        logger.debug(f"Todoist client initialized (timeout={self.timeout}s)")

    def __repr__(self) -> str:
        """Never expose the client secret in repr."""
        return f"TodoistClient(client_id='{self.client_id}')"

    def get_authorization_request_url(
        self,
        state: str = DEFAULT_STATE,
        scope: str = DEFAULT_SCOPE,
    ) -> str:
        """
        Build the OAuth consent URL for this application.

        No network call is made. The default state is a fixed token;
        pass a fresh random value per authorization request and check it
        on the redirect.

        Args:
            state: Value echoed back on the OAuth redirect
            scope: Comma separated Todoist scopes

        Returns:
            Authorization URL to open in a browser
        """
        query = urlencode(
            {"client_id": self.client_id, "scope": scope, "state": state},
            safe=":,",
        )
        return f"{self.AUTHORIZE_ENDPOINT}?{query}"

    def _do_request(
        self,
        access_token: Optional[str],
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Make one request to the Todoist API and return the raw body.

        Args:
            access_token: Bearer token; None sends no Authorization header
            method: HTTP method
            endpoint: Absolute endpoint URL
            params: Query parameters
            data: Form body
            timeout: Overrides the client timeout for this call

        Returns:
            Response body bytes of a 200 response

        Raises:
            RequestBuildError: If the request cannot be built
            TransportError: If the request cannot complete
            APIError: If the status code is not 200
            BodyReadError: If the body cannot be fully read
        """
        headers = {}
        if access_token is not None:
            headers["Authorization"] = f"Bearer {access_token}"

        if timeout is None:
            timeout = self.timeout
        deadline = time.monotonic() + timeout

        try:
            response = self._session.request(
                method=method,
                url=endpoint,
                headers=headers,
                params=params,
                data=data,
                timeout=timeout,
                stream=True,
            )
        except _REQUEST_BUILD_ERRORS as e:
            error_msg = f"Invalid Todoist request {method} {endpoint!r}: {e}"
            logger.error(error_msg)
            raise RequestBuildError(error_msg) from e
        except requests.exceptions.RequestException as e:
            error_msg = f"Todoist request {method} {endpoint} failed: {e}"
            logger.error(error_msg)
            raise TransportError(error_msg) from e
        except ValueError as e:
            # http.client rejects malformed methods at send time
            error_msg = f"Invalid Todoist request {method!r} {endpoint!r}: {e}"
            logger.error(error_msg)
            raise RequestBuildError(error_msg) from e

        with response:
            if response.status_code != 200:
                error_msg = f"Todoist API error: got {response.status_code} for {method} {endpoint}"
                logger.error(error_msg)
                raise APIError(error_msg, status_code=response.status_code)

            return self._read_body(response, deadline, timeout, f"{method} {endpoint}")

    def _read_body(
        self,
        response: requests.Response,
        deadline: float,
        timeout: float,
        what: str,
    ) -> bytes:
        """
        Drain a streamed response body before the call deadline.

        requests applies its timeout to each socket read, so a server
        trickling bytes could hold the call open indefinitely. A watchdog
        shuts the socket down at the deadline, which unblocks the read.

        Raises:
            TransportError: If the deadline passes or a read times out
            BodyReadError: If the body cannot be fully read
        """
        aborted = threading.Event()

        def _abort() -> None:
            aborted.set()
            _shutdown_socket(response)

        watchdog = threading.Timer(max(deadline - time.monotonic(), 0.0), _abort)
        watchdog.daemon = True
        watchdog.start()

        chunks = []
        error: Optional[Exception] = None
        try:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                chunks.append(chunk)
                if time.monotonic() >= deadline:
                    aborted.set()
                    break
        except (requests.exceptions.RequestException, OSError) as e:
            error = e
        finally:
            watchdog.cancel()

        # iter_content reports read timeouts as ConnectionError
        if aborted.is_set() or isinstance(
            error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
        ):
            error_msg = f"Todoist request {what} exceeded its {timeout}s timeout"
            logger.error(error_msg)
            raise TransportError(error_msg) from error

        if error is not None:
            error_msg = f"Failed to read Todoist response body: {error}"
            logger.error(error_msg)
            raise BodyReadError(error_msg) from error

        return b"".join(chunks)

    def _decode_list(
        self,
        body: bytes,
        factory: Callable[[Any], T],
        what: str,
    ) -> list[T]:
        """Decode a JSON array body into records built by factory."""
        try:
            payload = json.loads(body)
            if not isinstance(payload, list):
                raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
            return [factory(item) for item in payload]
        except (ValueError, TypeError) as e:
            error_msg = f"Unable to decode Todoist {what} response: {e}"
            logger.error(error_msg)
            raise DecodeError(error_msg) from e

    def get_projects(
        self,
        access_token: str,
        timeout: Optional[float] = None,
    ) -> list[Project]:
        """
        Fetch all projects visible to the token.

        Args:
            access_token: Bearer token (never logged)
            timeout: Overrides the client timeout for this call

        Returns:
            List of Project objects
        """
        logger.debug("Fetching projects...")

        body = self._do_request(
            access_token, "GET", self.PROJECTS_ENDPOINT, timeout=timeout,
        )
        projects = self._decode_list(body, Project.from_api_response, "projects")

        logger.debug(f"Found {len(projects)} projects")
        return projects

    def get_tasks_with_params(
        self,
        access_token: str,
        params: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> list[Task]:
        """
        Fetch active tasks matching the given query filters.

        Args:
            access_token: Bearer token (never logged)
            params: Query filters passed through to the tasks endpoint
            timeout: Overrides the client timeout for this call

        Returns:
            List of Task objects
        """
        logger.debug(f"Fetching tasks (filters: {params})")

        body = self._do_request(
            access_token, "GET", self.TASKS_ENDPOINT, params=params, timeout=timeout,
        )
        tasks = self._decode_list(body, Task.from_api_response, "tasks")

        logger.debug(f"Found {len(tasks)} tasks")
        return tasks

    def get_tasks(
        self,
        access_token: str,
        timeout: Optional[float] = None,
    ) -> list[Task]:
        """Fetch all active tasks."""
        return self.get_tasks_with_params(access_token, timeout=timeout)

    def get_tasks_by_project(
        self,
        access_token: str,
        project_id: int,
        timeout: Optional[float] = None,
    ) -> list[Task]:
        """
        Fetch active tasks of one project.

        A project the token cannot access yields an empty list, exactly
        like a project without tasks.
        """
        return self.get_tasks_with_params(
            access_token,
            params={"project_id": int(project_id)},
            timeout=timeout,
        )

    def exchange_code(
        self,
        code: str,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Exchange an OAuth authorization code for an access token.

        The token is returned to the caller and not kept by the client.

        Args:
            code: Code received on the OAuth redirect
            timeout: Overrides the client timeout for this call

        Returns:
            Access token string

        Raises:
            DecodeError: If the response carries no access token
        """
        logger.info("Exchanging authorization code for access token...")

        body = self._do_request(
            None,
            "POST",
            self.ACCESS_TOKEN_ENDPOINT,
            data={
                "client_id": self.client_id,
                "client_secret": self._client_secret,
                "code": code,
            },
            timeout=timeout,
        )

        try:
            payload = json.loads(body)
            token = payload["access_token"]
        except (ValueError, TypeError, KeyError) as e:
            error_msg = f"Unable to decode Todoist token response: {e!r}"
            logger.error(error_msg)
            raise DecodeError(error_msg) from e

        if not isinstance(token, str) or not token:
            raise DecodeError("Todoist token response has an empty access_token")

        logger.info("Access token obtained")
        return token

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
        logger.debug("Todoist client session closed")

    def __enter__(self) -> "TodoistClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
