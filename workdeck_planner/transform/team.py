"""
View-Model Transformer — Raw Workdeck records → TeamMember / Task.

One pass per load:
    1. assign_projects_to_users   — which projects each user works on
    2. resolve_weekly_capacity    — office main timetable day hours × 5
    3. build_task                 — per project: weekly target, status, weeks
    4. build_team_member          — scheduled hours and utilization
    5. filter_valid_members       — drop nameless / "Unknown User" members

Missing or malformed optional data never raises here; it resolves to the
constants below.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from workdeck_planner.records import (
    ProjectOption,
    RawOffice,
    RawProject,
    RawUser,
    Task,
    TeamMember,
)

DEFAULT_WEEKLY_CAPACITY = 40.0
WORKING_DAYS_PER_WEEK = 5
MAX_TARGET_SHARE = 0.6
DEFAULT_DURATION_WEEKS = 12
DEFAULT_START_WEEK = -4
DEFAULT_END_WEEK = 20
LONG_TERM_HOURS = 200
LONG_TERM_WEEKS = 12
WEEKS_PER_MONTH = 4.33
MONTHS_PER_YEAR = 12

UNKNOWN_USER = "Unknown User"
DEFAULT_DEPARTMENT = "Unknown"
FALLBACK_DEPARTMENT = "General"
DEFAULT_ROLE = "Team Member"
DEFAULT_OFFICE = "Remote"
DEFAULT_PROJECT_NAME = "Unnamed Project"
DEFAULT_ACTIVITY_NAME = "General Work"
DEFAULT_TASK_NAME = "Project Tasks"
DEFAULT_AVATAR = "👤"

PROJECT_PALETTE = (
    "purple", "blue", "green", "red",
    "yellow", "indigo", "pink", "teal",
    "orange", "cyan", "lime", "violet",
)
AVATAR_PALETTE = ("👨‍💻", "👩‍💻", "👨‍🔬", "👩‍🔬", "👨‍💼", "👩‍💼", "👨‍🎨", "👩‍🎨")

# Mon-Fri plus the first two days of the following week
WORK_PATTERN = (True, True, True, True, True, False, False, True, True)

_WEEK = timedelta(days=7)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def string_hash(text: str) -> int:
    """
    32-bit shift-subtract hash (``h = (h << 5) - h + unit``) over UTF-16 code
    units, returned as a signed 32-bit integer.
    """
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def palette_pick(key: str, palette: Sequence[str]) -> str:
    return palette[abs(string_hash(key)) % len(palette)]


def project_color(project_id: object) -> str:
    """Stable colour tag for a project id."""
    return palette_pick(str(project_id), PROJECT_PALETTE)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero (``round()`` would round them to even)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _as_utc(now: Optional[datetime]) -> datetime:
    """Current time when ``now`` is None; naive values are taken as UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _weeks_between(start: datetime, end: datetime) -> float:
    return (end - start) / _WEEK


def project_slug(project: RawProject) -> str:
    if project.name:
        return re.sub(r"\s+", "-", project.name.lower())
    return f"project-{project.id}"


def avatar_for_user(user: RawUser) -> str:
    """The user's own avatar, else a glyph chosen by name hash, else 👤."""
    if user.avatar:
        return user.avatar
    name = user.display_name
    if name:
        return palette_pick(name, AVATAR_PALETTE)
    return DEFAULT_AVATAR


# ---------------------------------------------------------------------------
# Capacity
# ---------------------------------------------------------------------------

def resolve_weekly_capacity(user: RawUser, offices: Sequence[RawOffice]) -> float:
    """
    Weekly hours from the user's office main timetable (``dayHours × 5``).

    Falls back to the first timetable when none is flagged main, and to
    DEFAULT_WEEKLY_CAPACITY when the office or its day hours are missing.
    """
    office_id = user.office.id if user.office else None
    if not office_id or not offices:
        return DEFAULT_WEEKLY_CAPACITY

    office = next((o for o in offices if o.id == office_id), None)
    if office is None or not office.time_tables:
        return DEFAULT_WEEKLY_CAPACITY

    main = next((tt for tt in office.time_tables if tt.is_main), office.time_tables[0])
    if not main.day_hours:
        return DEFAULT_WEEKLY_CAPACITY
    return main.day_hours * WORKING_DAYS_PER_WEEK


# ---------------------------------------------------------------------------
# Project-derived values
# ---------------------------------------------------------------------------

def project_duration_weeks(project: RawProject) -> int:
    if project.start_date and project.end_date:
        return math.ceil(_weeks_between(project.start_date, project.end_date))
    return DEFAULT_DURATION_WEEKS


def project_status(project: RawProject, now: Optional[datetime] = None) -> str:
    now = _as_utc(now)
    if project.is_draft:
        return "planned"
    if project.end_date and project.end_date < now:
        return "completed"
    if project.start_date and project.start_date > now:
        return "planned"
    return "in-progress"


def week_offset(date: Optional[datetime], default: int, now: Optional[datetime] = None) -> int:
    """Whole weeks from now to ``date`` (floored), or ``default`` if unknown."""
    if date is None:
        return default
    return math.floor(_weeks_between(_as_utc(now), date))


def is_long_term(total_hours: float, duration_weeks: int) -> bool:
    return total_hours > LONG_TERM_HOURS or duration_weeks > LONG_TERM_WEEKS


def duration_label(duration_weeks: int) -> str:
    months = math.ceil(duration_weeks / WEEKS_PER_MONTH)
    if months > 1:
        return f"{months} months"
    if duration_weeks > 1:
        return f"{duration_weeks} weeks"
    return "TBD"


def target_weekly_hours(total_hours: float, duration_weeks: int) -> float:
    """Uncapped hours per week needed to burn the project budget."""
    return total_hours / duration_weeks if duration_weeks > 0 else 0.0


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_task(
    project: RawProject,
    index: int,
    weekly_capacity: float,
    *,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Derive the Task a user holds on ``project`` (``index`` is its position)."""
    now = _as_utc(now)
    total_hours = project.total_hours
    duration_weeks = project_duration_weeks(project)
    capped = min(
        target_weekly_hours(total_hours, duration_weeks),
        weekly_capacity * MAX_TARGET_SHARE,
    )

    first_activity = project.activities[0] if project.activities else None
    first_task = first_activity.tasks[0] if first_activity and first_activity.tasks else None

    return Task(
        id=f"{user_id or ''}-{project.id or ''}-{index}",
        project=project.name or DEFAULT_PROJECT_NAME,
        project_id=project.id,
        project_slug=project_slug(project),
        activity=(first_activity.name if first_activity else None) or DEFAULT_ACTIVITY_NAME,
        task=(first_task.name if first_task else None) or project.code or DEFAULT_TASK_NAME,
        color=project_color(project.id or index),
        estimated_hours=total_hours,
        actual_hours=0.0,
        total_activity_hours=(first_activity.available_hours if first_activity else None) or total_hours,
        total_project_hours=total_hours,
        velocity=0.0,
        status=project_status(project, now),
        start_week=week_offset(project.start_date, DEFAULT_START_WEEK, now),
        end_week=week_offset(project.end_date, DEFAULT_END_WEEK, now),
        pattern=list(WORK_PATTERN),
        is_long_term=is_long_term(total_hours, duration_weeks),
        target_hours_per_week=capped,
        duration=duration_label(duration_weeks),
        monthly_hours=[capped] * MONTHS_PER_YEAR,
    )


def build_team_member(
    user: RawUser,
    projects_for_user: Sequence[RawProject],
    offices: Sequence[RawOffice],
    now: Optional[datetime] = None,
) -> TeamMember:
    capacity = resolve_weekly_capacity(user, offices)
    tasks = [
        build_task(project, index, capacity, user_id=user.id, now=now)
        for index, project in enumerate(projects_for_user)
    ]
    scheduled = round_half_up(sum(t.target_hours_per_week for t in tasks), 1)
    utilization = int(round_half_up(scheduled / capacity * 100)) if capacity > 0 else 0

    return TeamMember(
        id=user.id,
        name=user.display_name or UNKNOWN_USER,
        avatar=avatar_for_user(user),
        department=user.department or DEFAULT_DEPARTMENT,
        capacity=capacity,
        scheduled=scheduled,
        utilization=utilization,
        role=user.rol or DEFAULT_ROLE,
        office=(user.office.name if user.office else None) or DEFAULT_OFFICE,
        tasks=tasks,
    )


# ---------------------------------------------------------------------------
# Association and team-level passes
# ---------------------------------------------------------------------------

def _involves_user(project: RawProject, user_id: str) -> bool:
    if any(m.user and m.user.id == user_id for m in project.members):
        return True
    return any(
        p.user and p.user.id == user_id
        for activity in project.activities
        for task in activity.tasks
        for p in task.participants
    )


def projects_for_user(user: RawUser, projects: Iterable[RawProject]) -> List[RawProject]:
    """Projects where the user is a member or a task participant (each once)."""
    if not user.id:
        return []
    return [p for p in projects if _involves_user(p, user.id)]


def assign_projects_to_users(
    users: Sequence[RawUser],
    projects: Sequence[RawProject],
) -> Dict[Optional[str], List[RawProject]]:
    return {user.id: projects_for_user(user, projects) for user in users}


def collect_departments(users: Iterable[RawUser]) -> List[str]:
    """Unique non-blank departments in first-seen order; ["General"] if none."""
    departments: List[str] = []
    for user in users:
        dept = user.department
        if dept and dept.strip() and dept not in departments:
            departments.append(dept)
    return departments or [FALLBACK_DEPARTMENT]


def is_valid_member(member: TeamMember) -> bool:
    return bool(member.name.strip()) and member.name != UNKNOWN_USER


def filter_valid_members(members: Iterable[TeamMember]) -> List[TeamMember]:
    return [m for m in members if is_valid_member(m)]


def transform_team(
    users: Sequence[RawUser],
    projects: Sequence[RawProject],
    offices: Sequence[RawOffice],
    now: Optional[datetime] = None,
) -> List[TeamMember]:
    """Full pass: every user → TeamMember, invalid members dropped."""
    now = _as_utc(now)
    members = [
        build_team_member(user, projects_for_user(user, projects), offices, now)
        for user in users
    ]
    return filter_valid_members(members)


def project_options(projects: Iterable[RawProject]) -> List[ProjectOption]:
    """Selectable projects for the assignment form, labelled 'Name (CODE)'."""
    options: List[ProjectOption] = []
    for project in projects:
        if not project.id:
            continue
        label = project.name or DEFAULT_PROJECT_NAME
        if project.code:
            label = f"{label} ({project.code})"
        options.append(ProjectOption(id=project.id, label=label))
    return options
