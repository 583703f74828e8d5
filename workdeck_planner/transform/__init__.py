"""Raw Workdeck records → dashboard view models."""

from .team import (
    DEFAULT_WEEKLY_CAPACITY,
    FALLBACK_DEPARTMENT,
    PROJECT_PALETTE,
    UNKNOWN_USER,
    assign_projects_to_users,
    avatar_for_user,
    build_task,
    build_team_member,
    collect_departments,
    filter_valid_members,
    project_color,
    project_duration_weeks,
    project_options,
    projects_for_user,
    resolve_weekly_capacity,
    string_hash,
    transform_team,
)

__all__ = [
    "DEFAULT_WEEKLY_CAPACITY",
    "FALLBACK_DEPARTMENT",
    "PROJECT_PALETTE",
    "UNKNOWN_USER",
    "assign_projects_to_users",
    "avatar_for_user",
    "build_task",
    "build_team_member",
    "collect_departments",
    "filter_valid_members",
    "project_color",
    "project_duration_weeks",
    "project_options",
    "projects_for_user",
    "resolve_weekly_capacity",
    "string_hash",
    "transform_team",
]
