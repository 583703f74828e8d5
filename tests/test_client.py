"""Unit tests for workdeck_planner.client — HTTP calls against httpx.MockTransport."""

import json

import httpx
import pytest

from workdeck_planner.client import (
    CREATE_TASK_PATH,
    USERS_PATH,
    WorkdeckClient,
    build_create_task_body,
    unwrap_result,
)
from workdeck_planner.engine.config import ApiConfig
from workdeck_planner.engine.errors import (
    AccessDeniedError,
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
)
from workdeck_planner.engine.logging import FileLogger
from workdeck_planner.records import TaskAssignment

BASE_URL = "https://api.workdeck.test"


def _client(handler, token="tok-123", **kwargs) -> WorkdeckClient:
    return WorkdeckClient(token, base_url=BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


class TestUnwrapResult:

    def test_envelope(self):
        assert unwrap_result({"result": [1, 2]}) == [1, 2]

    def test_bare_payload(self):
        assert unwrap_result([1, 2]) == [1, 2]

    def test_empty_result_keeps_envelope(self):
        assert unwrap_result({"result": []}) == {"result": []}


class TestCreateTaskBody:

    def test_body_shape(self):
        assignment = TaskAssignment(name="Design", project_id="p1", estimated_hours=20, user_id="u1")
        assert build_create_task_body(assignment) == {
            "name": "Design",
            "project": {"id": "p1"},
            "plannedHours": "20",
            "importance": 2,
            "participants": [
                {"user": {"id": "u1"}, "isOwner": True, "plannedHours": "20", "percentage": 100}
            ],
        }

    def test_priority_used_as_importance(self):
        assignment = TaskAssignment(name="x", project_id="p1", estimated_hours=1, priority=3, user_id="u1")
        assert build_create_task_body(assignment)["importance"] == 3


class TestWorkdeckClient:

    def test_from_config(self):
        client = WorkdeckClient.from_config("tok", ApiConfig(base_url="https://x.test/"))
        assert client.base_url == "https://x.test"
        assert client.has_token is True

    @pytest.mark.asyncio
    async def test_fetch_users_sends_bearer_and_unwraps(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["content_type"] = request.headers["Content-Type"]
            return httpx.Response(200, json={"result": [{"id": "u1"}]})

        async with _client(handler) as client:
            users = await client.fetch_users()

        assert users == [{"id": "u1"}]
        assert seen["url"] == f"{BASE_URL}{USERS_PATH}"
        assert seen["auth"] == "Bearer tok-123"
        assert seen["content_type"] == "application/json"

    @pytest.mark.asyncio
    async def test_endpoints(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json=[])

        async with _client(handler) as client:
            await client.fetch_projects()
            await client.fetch_offices()
            await client.fetch_current_user()

        assert paths == ["/queries/projects-summary", "/queries/offices", "/queries/me"]

    @pytest.mark.asyncio
    async def test_missing_token_fails_before_io(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with _client(handler, token="  ") as client:
            with pytest.raises(AuthenticationError) as exc_info:
                await client.fetch_users()
        assert exc_info.value.message == "No authentication token available"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error_cls",
        [(401, AuthenticationError), (403, AccessDeniedError), (404, NotFoundError)],
    )
    async def test_status_mapping(self, status, error_cls):
        async with _client(lambda request: httpx.Response(status)) as client:
            with pytest.raises(error_cls) as exc_info:
                await client.fetch_users()
        assert exc_info.value.endpoint == USERS_PATH

    @pytest.mark.asyncio
    async def test_other_status_is_api_error(self):
        async with _client(lambda request: httpx.Response(500)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.fetch_offices()
        assert exc_info.value.message == "API Error: 500 Internal Server Error"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_invalid_json_is_api_error(self):
        async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(ApiError):
                await client.fetch_users()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "make_error",
        [
            lambda request: httpx.ConnectError("connection refused", request=request),
            lambda request: httpx.DecodingError("bad gzip stream", request=request),
            lambda request: httpx.InvalidURL("bad url"),
        ],
    )
    async def test_request_failures_are_network_errors(self, make_error):
        def handler(request: httpx.Request) -> httpx.Response:
            raise make_error(request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError):
                await client.fetch_users()

    @pytest.mark.asyncio
    async def test_redirect_loop_is_network_error(self, tmp_path):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": str(request.url)})

        file_logger = FileLogger(str(tmp_path))
        async with _client(handler, file_logger=file_logger) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.fetch_users()

        assert exc_info.value.context["endpoint"] == USERS_PATH
        entries = file_logger.query("api_calls")
        assert entries[-1]["success"] is False

    @pytest.mark.asyncio
    async def test_create_task_posts_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"result": {"id": "t1"}})

        assignment = TaskAssignment(name="Write docs", project_id="p1", estimated_hours=20, user_id="u1")
        async with _client(handler) as client:
            result = await client.create_task(assignment)

        assert result == {"id": "t1"}
        assert seen["method"] == "POST"
        assert seen["path"] == CREATE_TASK_PATH
        assert seen["body"]["plannedHours"] == "20"
        assert seen["body"]["participants"][0]["percentage"] == 100
        assert seen["body"]["participants"][0]["user"] == {"id": "u1"}

    @pytest.mark.asyncio
    async def test_calls_written_to_file_logger(self, tmp_path):
        file_logger = FileLogger(log_dir=str(tmp_path))
        handler = lambda request: httpx.Response(403 if request.url.path == "/queries/me" else 200, json=[])

        async with _client(handler, file_logger=file_logger) as client:
            await client.fetch_users()
            with pytest.raises(AccessDeniedError):
                await client.fetch_current_user()

        entries = file_logger.query("api_calls")
        assert [e["success"] for e in entries] == [True, False]
        assert entries[1]["status_code"] == 403
        assert entries[1]["path"] == "/queries/me"
