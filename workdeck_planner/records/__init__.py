"""Workdeck Planner Records. Raw API records and derived view models."""

from .workdeck import (
    RawActivity,
    RawActivityTask,
    RawMember,
    RawOffice,
    RawParticipant,
    RawProject,
    RawRef,
    RawTimetable,
    RawUser,
    parse_records,
)
from .planner import (
    DashboardSnapshot,
    ProjectOption,
    Task,
    TaskAssignment,
    TaskDetail,
    TeamMember,
)

__all__ = [
    "RawActivity",
    "RawActivityTask",
    "RawMember",
    "RawOffice",
    "RawParticipant",
    "RawProject",
    "RawRef",
    "RawTimetable",
    "RawUser",
    "parse_records",
    "DashboardSnapshot",
    "ProjectOption",
    "Task",
    "TaskAssignment",
    "TaskDetail",
    "TeamMember",
]
