"""
Workdeck Planner Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from workdeck_planner.records import RawOffice, RawProject, RawUser, parse_records


# ---------------------------------------------------------------------------
# Environment setup: no real config file, env overrides or global logger
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Reset global singletons and Workdeck env vars between tests."""
    import workdeck_planner.engine.config as cfg_mod
    import workdeck_planner.engine.logging as log_mod

    for var in ("WORKDECK_BASE_URL", "WORKDECK_ENV", "WORKDECK_SECRET_KEY"):
        monkeypatch.delenv(var, raising=False)
    cfg_mod._config = None
    log_mod._file_logger = None


@pytest.fixture
def now() -> datetime:
    """Fixed clock: Monday 2026-10-19, midnight UTC."""
    return datetime(2026, 10, 19, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Raw API payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def offices_payload() -> List[Dict[str, Any]]:
    return [
        {
            "id": "o1",
            "name": "Madrid",
            "timeTables": [
                {"isMain": False, "dayHours": "6"},
                {"isMain": True, "dayHours": "8"},
            ],
        },
        {"id": "o2", "name": "Remote Hub", "timeTables": []},
    ]


@pytest.fixture
def users_payload() -> List[Dict[str, Any]]:
    return [
        {
            "id": "u1",
            "firstName": "Ana",
            "lastName": "García",
            "department": "Engineering",
            "office": {"id": "o1", "name": "Madrid"},
            "rol": "Developer",
        },
        {
            "id": "u2",
            "firstName": "Ben",
            "lastName": "Ode",
            "department": {"name": "Design"},
            "office": "o2",
        },
        # No name: becomes "Unknown User" and is dropped
        {"id": "u3", "department": "Engineering"},
    ]


@pytest.fixture
def projects_payload() -> List[Dict[str, Any]]:
    return [
        {
            "id": "p1",
            "name": "Apollo",
            "code": "APO",
            "plannedHours": "120",
            "startDate": "2026-10-05T00:00:00Z",
            "endDate": "2026-12-14T00:00:00Z",
            "members": [{"user": {"id": "u1"}}],
            "activities": [
                {
                    "name": "Build",
                    "availableHours": 80,
                    "tasks": [{"name": "API", "participants": [{"user": {"id": "u1"}}]}],
                }
            ],
        },
        {
            "id": "p2",
            "name": "Borealis",
            "availableHours": 600,
            "isDraft": True,
            "activities": [
                {"name": "Research", "tasks": [{"name": "Spike", "participants": [{"user": {"id": "u2"}}]}]}
            ],
        },
        {
            "id": "p3",
            "name": "Legacy",
            "plannedHours": 32,
            "startDate": "2026-01-05T00:00:00Z",
            "endDate": "2026-03-02T00:00:00Z",
            "members": [{"user": {"id": "u1"}}],
        },
    ]


@pytest.fixture
def me_payload() -> Dict[str, Any]:
    return {"id": "u1", "firstName": "Ana", "lastName": "García"}


@pytest.fixture
def raw_users(users_payload) -> List[RawUser]:
    return parse_records(RawUser, users_payload)


@pytest.fixture
def raw_projects(projects_payload) -> List[RawProject]:
    return parse_records(RawProject, projects_payload)


@pytest.fixture
def raw_offices(offices_payload) -> List[RawOffice]:
    return parse_records(RawOffice, offices_payload)


# ---------------------------------------------------------------------------
# Fake API client for controller tests
# ---------------------------------------------------------------------------

class FakeWorkdeckClient:
    """In-memory stand-in for WorkdeckClient; ``errors`` maps method name → exception."""

    def __init__(self, users, projects, offices, me=None, errors: Optional[Dict[str, Exception]] = None):
        self.users = users
        self.projects = projects
        self.offices = offices
        self.me = me
        self.errors = errors or {}
        self.calls: List[str] = []
        self.created: List[Any] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def _answer(self, name: str, value: Any) -> Any:
        self.calls.append(name)
        if name in self.errors:
            raise self.errors[name]
        return value

    async def fetch_users(self):
        return await self._answer("fetch_users", self.users)

    async def fetch_projects(self):
        return await self._answer("fetch_projects", self.projects)

    async def fetch_offices(self):
        return await self._answer("fetch_offices", self.offices)

    async def fetch_current_user(self):
        return await self._answer("fetch_current_user", self.me)

    async def create_task(self, assignment):
        result = await self._answer("create_task", {"id": "t-new"})
        self.created.append(assignment)
        return result


@pytest.fixture
def fake_client(users_payload, projects_payload, offices_payload, me_payload) -> FakeWorkdeckClient:
    return FakeWorkdeckClient(users_payload, projects_payload, offices_payload, me=me_payload)


@pytest.fixture
def client_factory(fake_client):
    """Factory that always hands out ``fake_client`` and records the tokens it got."""
    tokens: List[str] = []

    def factory(token: str) -> FakeWorkdeckClient:
        tokens.append(token)
        return fake_client

    factory.tokens = tokens
    return factory
