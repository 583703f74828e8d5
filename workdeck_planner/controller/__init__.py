"""Dashboard controller — load lifecycle, filtering, selection, task assignment."""

from .dashboard import (
    ALL_DEPARTMENTS,
    TOKEN_REQUIRED_MESSAGE,
    DashboardController,
    LoadPhase,
    date_range_label,
    fetch_snapshot,
    remaining_hours,
    task_progress,
    utilization_level,
)

__all__ = [
    "ALL_DEPARTMENTS",
    "TOKEN_REQUIRED_MESSAGE",
    "DashboardController",
    "LoadPhase",
    "date_range_label",
    "fetch_snapshot",
    "remaining_hours",
    "task_progress",
    "utilization_level",
]
