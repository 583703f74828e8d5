"""
Workdeck API Client — Bearer-authenticated calls to the Workdeck REST API.

Pipeline (per call):
    1. Require a bearer token (AuthenticationError before any I/O otherwise)
    2. Execute via httpx.AsyncClient (one pooled client per WorkdeckClient)
    3. Map non-2xx statuses to typed errors (401/403/404/other)
    4. Unwrap the ``{"result": ...}`` envelope when present
    5. Log the call (stdlib logger + optional structured FileLogger entry)

Endpoints:
    GET  /queries/users
    GET  /queries/projects-summary
    GET  /queries/offices
    GET  /queries/me
    POST /commands/sync/create-task
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from workdeck_planner.engine.config import DEFAULT_BASE_URL, ApiConfig
from workdeck_planner.engine.errors import (
    AccessDeniedError,
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    WorkdeckError,
)
from workdeck_planner.engine.logging import FileLogger, log_api_call
from workdeck_planner.records import TaskAssignment

logger = logging.getLogger("workdeck_planner.client")

USERS_PATH = "/queries/users"
PROJECTS_PATH = "/queries/projects-summary"
OFFICES_PATH = "/queries/offices"
ME_PATH = "/queries/me"
CREATE_TASK_PATH = "/commands/sync/create-task"

DEFAULT_IMPORTANCE = 2


def unwrap_result(payload: Any) -> Any:
    """Return ``payload["result"]`` when the envelope carries one, else the payload."""
    if isinstance(payload, dict) and payload.get("result"):
        return payload["result"]
    return payload


def build_create_task_body(assignment: TaskAssignment) -> Dict[str, Any]:
    """
    Build the create-task command body.

    Hours are sent as strings; the single participant owns the task at 100%.
    """
    hours = str(assignment.estimated_hours)
    return {
        "name": assignment.name,
        "project": {"id": assignment.project_id},
        "plannedHours": hours,
        "importance": assignment.priority or DEFAULT_IMPORTANCE,
        "participants": [
            {
                "user": {"id": assignment.user_id},
                "isOwner": True,
                "plannedHours": hours,
                "percentage": 100,
            }
        ],
    }


class WorkdeckClient:
    """
    Async client for the Workdeck API.

    Usage:
        async with WorkdeckClient(token, base_url="https://test-api.workdeck.com") as client:
            users = await client.fetch_users()

    A custom ``transport`` (e.g. ``httpx.MockTransport``) can be injected.
    """

    def __init__(
        self,
        token: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        file_logger: Optional[FileLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token = (token or "").strip()
        self._base_url = base_url.rstrip("/")
        self._file_logger = file_logger
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        token: Optional[str],
        config: ApiConfig,
        file_logger: Optional[FileLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "WorkdeckClient":
        return cls(
            token,
            base_url=config.base_url,
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
            file_logger=file_logger,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def __aenter__(self) -> "WorkdeckClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -----------------------------------------------------------------------
    # Core call
    # -----------------------------------------------------------------------

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Issue an authenticated request and return the (unwrapped) JSON result.

        Raises:
            AuthenticationError: no token, or HTTP 401.
            AccessDeniedError: HTTP 403.
            NotFoundError: HTTP 404.
            ApiError: any other non-2xx status, or a non-JSON body.
            NetworkError: transport failure, redirect loop, undecodable body
                or an unusable URL.
        """
        method = method.upper()
        if not self._token:
            raise AuthenticationError(
                "No authentication token available",
                endpoint=endpoint,
                method=method,
            )

        request_headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }
        if headers:
            request_headers.update(headers)

        start = time.monotonic()
        try:
            response = await self._client.request(
                method,
                endpoint,
                headers=request_headers,
                json=json,
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            duration_ms = (time.monotonic() - start) * 1000
            self._log_call(method, endpoint, None, duration_ms, error=str(e) or type(e).__name__)
            raise NetworkError(
                f"Network error calling {endpoint}: {e}",
                endpoint=endpoint,
                method=method,
            ) from e

        duration_ms = (time.monotonic() - start) * 1000

        if not response.is_success:
            error = self._error_for(response, endpoint, method)
            self._log_call(method, endpoint, response.status_code, duration_ms, error=error.message)
            raise error

        try:
            payload = response.json()
        except ValueError as e:
            self._log_call(method, endpoint, response.status_code, duration_ms, error="Invalid JSON")
            raise ApiError(
                f"API Error: {response.status_code} invalid JSON response",
                endpoint=endpoint,
                method=method,
                status_code=response.status_code,
                status_text=response.reason_phrase,
            ) from e

        self._log_call(method, endpoint, response.status_code, duration_ms)
        return unwrap_result(payload)

    @staticmethod
    def _error_for(response: httpx.Response, endpoint: str, method: str) -> WorkdeckError:
        status = response.status_code
        context = {"endpoint": endpoint, "method": method, "status_code": status}
        if status == 401:
            return AuthenticationError(**context)
        if status == 403:
            return AccessDeniedError(**context)
        if status == 404:
            return NotFoundError(**context)
        return ApiError.from_status(
            status,
            response.reason_phrase,
            endpoint=endpoint,
            method=method,
        )

    def _log_call(
        self,
        method: str,
        endpoint: str,
        status_code: Optional[int],
        duration_ms: float,
        error: Optional[str] = None,
    ) -> None:
        if error:
            logger.error(f"{method} {endpoint} failed ({status_code}): {error}")
        else:
            logger.info(f"{method} {endpoint} → {status_code} in {duration_ms:.0f}ms")

        if self._file_logger is not None:
            self._file_logger.write(
                log_api_call(
                    method=method,
                    path=endpoint,
                    status_code=status_code,
                    duration_ms=duration_ms,
                    success=error is None,
                    error=error,
                )
            )

    # -----------------------------------------------------------------------
    # Read operations
    # -----------------------------------------------------------------------

    async def _fetch(self, endpoint: str, label: str) -> Any:
        try:
            return await self.call(endpoint)
        except WorkdeckError as e:
            logger.error(f"Error fetching {label}: {e}")
            raise

    async def fetch_users(self) -> List[Dict[str, Any]]:
        return await self._fetch(USERS_PATH, "users")

    async def fetch_projects(self) -> List[Dict[str, Any]]:
        return await self._fetch(PROJECTS_PATH, "projects")

    async def fetch_offices(self) -> List[Dict[str, Any]]:
        return await self._fetch(OFFICES_PATH, "offices")

    async def fetch_current_user(self) -> Dict[str, Any]:
        return await self._fetch(ME_PATH, "current user")

    # -----------------------------------------------------------------------
    # Write operation
    # -----------------------------------------------------------------------

    async def create_task(self, assignment: TaskAssignment) -> Any:
        """POST a create-task command. The caller is responsible for reloading."""
        body = build_create_task_body(assignment)
        try:
            response = await self.call(CREATE_TASK_PATH, method="POST", json=body)
        except WorkdeckError as e:
            logger.error(f"Error creating task in Workdeck: {e}")
            raise
        logger.info(f"Task '{assignment.name}' created in Workdeck for user {assignment.user_id}")
        return response
