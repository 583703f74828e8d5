"""Workdeck API client."""

from .workdeck_client import (
    CREATE_TASK_PATH,
    ME_PATH,
    OFFICES_PATH,
    PROJECTS_PATH,
    USERS_PATH,
    WorkdeckClient,
    build_create_task_body,
    unwrap_result,
)

__all__ = [
    "CREATE_TASK_PATH",
    "ME_PATH",
    "OFFICES_PATH",
    "PROJECTS_PATH",
    "USERS_PATH",
    "WorkdeckClient",
    "build_create_task_body",
    "unwrap_result",
]
