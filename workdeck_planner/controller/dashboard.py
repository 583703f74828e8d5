"""
Dashboard Controller — load state machine and view state for the planner.

Phases:
    AWAITING_TOKEN → LOADING → READY | FAILED

    AWAITING_TOKEN  no token yet (or the user asked to replace it)
    LOADING         users / projects / offices fetched concurrently
    READY           team data available; filtering and selection are local
    FAILED          a required fetch failed; retry or update the token

Loads are not cancelled when superseded: whichever finishes last writes its
result.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from workdeck_planner.client import WorkdeckClient
from workdeck_planner.engine.errors import WorkdeckError
from workdeck_planner.engine.logging import (
    FileLogger,
    LogEntry,
    log_dashboard_load,
    log_task_created,
)
from workdeck_planner.engine.token_store import TokenStore
from workdeck_planner.records import (
    DashboardSnapshot,
    ProjectOption,
    RawOffice,
    RawProject,
    RawUser,
    Task,
    TaskAssignment,
    TaskDetail,
    TeamMember,
    parse_records,
)
from workdeck_planner.transform import collect_departments, project_options, transform_team

logger = logging.getLogger("workdeck_planner.controller")

TOKEN_REQUIRED_MESSAGE = "Authentication token required. Please set your Workdeck token."
ALL_DEPARTMENTS = "all"
VIEWS = ("week", "month", "quarter", "year")

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

ClientFactory = Callable[[str], WorkdeckClient]


class LoadPhase(str, Enum):
    AWAITING_TOKEN = "awaiting_token"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

async def _fetch_current_user_or_none(client: WorkdeckClient) -> Optional[Dict[str, Any]]:
    try:
        return await client.fetch_current_user()
    except WorkdeckError as e:
        logger.debug(f"Current user not available: {e}")
        return None


async def fetch_snapshot(client: WorkdeckClient, now: Optional[datetime] = None) -> DashboardSnapshot:
    """
    Fetch everything the dashboard needs and transform it.

    Users, projects and offices are required (first failure propagates);
    the current user is best-effort.
    """
    users_raw, projects_raw, offices_raw, me = await asyncio.gather(
        client.fetch_users(),
        client.fetch_projects(),
        client.fetch_offices(),
        _fetch_current_user_or_none(client),
    )

    users = parse_records(RawUser, users_raw)
    projects = parse_records(RawProject, projects_raw)
    offices = parse_records(RawOffice, offices_raw)
    me_records = parse_records(RawUser, [me]) if isinstance(me, dict) else []
    current_user_id = me_records[0].id if me_records else None

    logger.info(
        f"Workdeck data loaded: {len(users)} users, {len(projects)} projects, "
        f"{len(offices)} offices, current user {current_user_id or 'not available'}"
    )

    members = transform_team(users, projects, offices, now=now)
    logger.info(f"Transformed team data: {len(members)} valid members")

    return DashboardSnapshot(
        members=members,
        departments=collect_departments(users),
        projects=project_options(projects),
        current_user_id=current_user_id,
        synced_at=now or datetime.now(timezone.utc),
    )


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def utilization_level(utilization: float) -> str:
    """over (>100), high (>85), low (<60), else normal."""
    if utilization > 100:
        return "over"
    if utilization > 85:
        return "high"
    if utilization < 60:
        return "low"
    return "normal"


def remaining_hours(task: Task) -> float:
    return max(0.0, task.estimated_hours - task.actual_hours)


def task_progress(task: Task) -> int:
    """Percent of the estimate already booked."""
    return round(task.actual_hours / max(task.estimated_hours, 1) * 100)


def date_range_label(view: str, today: date, week_offset: int = 0) -> str:
    """Header label for the selected calendar view."""
    if view == "year":
        return str(today.year)
    if view == "quarter":
        quarter = (today.month - 1) // 3 + 1
        months = "-".join(_MONTH_NAMES[m][:3] for m in range((quarter - 1) * 3, quarter * 3))
        return f"Q{quarter} {today.year} ({months})"
    if view == "month":
        return f"{_MONTH_NAMES[today.month - 1]} {today.year}"

    # Weeks start on Sunday
    start = today - timedelta(days=(today.weekday() + 1) % 7) + timedelta(weeks=week_offset)
    end = start + timedelta(days=6)
    if start.year != end.year:
        label = f"{start:%b} {start.day}, {start.year} - {end:%b} {end.day}, {end.year}"
    elif start.month != end.month:
        label = f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"
    else:
        label = f"{start:%b} {start.day}-{end.day}, {end.year}"
    if week_offset:
        label += f" ({week_offset:+d})"
    return label


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class DashboardController:
    """
    Holds the dashboard state and runs loads / task creation.

    Usage:
        controller = DashboardController(
            client_factory=lambda token: WorkdeckClient(token),
            token_store=TokenStore("~/.workdeck/storage.json"),
        )
        await controller.start()
        controller.set_department("Engineering")
        controller.visible_members
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        token: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        file_logger: Optional[FileLogger] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._client_factory = client_factory
        self._token_store = token_store
        self._file_logger = file_logger
        self._clock = clock

        if token is None and token_store is not None:
            token = token_store.load()
        self.token: str = (token or "").strip()

        self.phase: LoadPhase = LoadPhase.AWAITING_TOKEN
        self.error: Optional[str] = None
        self.alert: Optional[str] = None

        self.members: List[TeamMember] = []
        self.departments: List[str] = []
        self.projects: List[ProjectOption] = []
        self.current_user_id: Optional[str] = None
        self.last_sync: Optional[datetime] = None

        self.selected_department: str = ALL_DEPARTMENTS
        self.selected_view: str = "week"
        self.week_offset: int = 0
        self.show_task_details: bool = True
        self.selected_task: Optional[TaskDetail] = None
        self.assignment_member: Optional[TeamMember] = None

    # -----------------------------------------------------------------------
    # Token / load lifecycle
    # -----------------------------------------------------------------------

    async def start(self) -> LoadPhase:
        """Mount: load if a token is present, otherwise ask for one."""
        if not self.token:
            self.phase = LoadPhase.AWAITING_TOKEN
            self.error = TOKEN_REQUIRED_MESSAGE
            return self.phase
        return await self.load()

    async def load(self) -> LoadPhase:
        if not self.token:
            self.phase = LoadPhase.AWAITING_TOKEN
            self.error = TOKEN_REQUIRED_MESSAGE
            return self.phase

        self.phase = LoadPhase.LOADING
        self.error = None
        logger.info("Loading Workdeck data...")
        start = time.monotonic()

        try:
            async with self._client_factory(self.token) as client:
                snapshot = await fetch_snapshot(client, now=self._clock())
        except WorkdeckError as e:
            logger.error(f"Error loading Workdeck data: {e}")
            self.phase = LoadPhase.FAILED
            self.error = e.message
            self._log(log_dashboard_load(
                phase=self.phase.value,
                duration_ms=(time.monotonic() - start) * 1000,
                error=e.message,
            ))
            return self.phase

        self._apply_snapshot(snapshot)
        self.phase = LoadPhase.READY
        self._log(log_dashboard_load(
            phase=self.phase.value,
            duration_ms=(time.monotonic() - start) * 1000,
            members=len(self.members),
            projects=len(self.projects),
            current_user_id=self.current_user_id,
        ))
        return self.phase

    def _apply_snapshot(self, snapshot: DashboardSnapshot) -> None:
        self.members = snapshot.members
        self.departments = snapshot.departments
        self.projects = snapshot.projects
        self.current_user_id = snapshot.current_user_id
        self.last_sync = snapshot.synced_at
        if self.selected_task is not None:
            self.selected_task = self._find_task_detail(self.selected_task.task.id)

    async def refresh(self) -> LoadPhase:
        return await self.load()

    async def retry(self) -> LoadPhase:
        return await self.load()

    def request_token_update(self) -> None:
        """Show the token form again (from FAILED or READY)."""
        self.phase = LoadPhase.AWAITING_TOKEN

    async def submit_token(self, token: str) -> LoadPhase:
        """Store a new token and load with it. Blank input is ignored."""
        token = (token or "").strip()
        if not token:
            return self.phase
        if self._token_store is not None:
            self._token_store.save(token)
        self.token = token
        self.error = None
        return await self.load()

    # -----------------------------------------------------------------------
    # Filtering and navigation (no refetch)
    # -----------------------------------------------------------------------

    def set_department(self, department: str) -> None:
        self.selected_department = department or ALL_DEPARTMENTS

    @property
    def visible_members(self) -> List[TeamMember]:
        if self.selected_department == ALL_DEPARTMENTS:
            return list(self.members)
        return [m for m in self.members if m.department == self.selected_department]

    def set_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"view must be one of {', '.join(VIEWS)}, got '{view}'")
        self.selected_view = view

    def toggle_task_details(self) -> bool:
        self.show_task_details = not self.show_task_details
        return self.show_task_details

    def previous_week(self) -> int:
        self.week_offset -= 1
        return self.week_offset

    def next_week(self) -> int:
        self.week_offset += 1
        return self.week_offset

    def go_to_today(self) -> int:
        self.week_offset = 0
        return self.week_offset

    def date_range_label(self, today: Optional[date] = None) -> str:
        return date_range_label(self.selected_view, today or self._clock().date(), self.week_offset)

    # -----------------------------------------------------------------------
    # Task detail
    # -----------------------------------------------------------------------

    def _find_task_detail(self, task_id: str) -> Optional[TaskDetail]:
        for member in self.members:
            for task in member.tasks:
                if task.id == task_id:
                    return TaskDetail(
                        task=task,
                        member_name=member.name,
                        member_department=member.department,
                        member_role=member.role,
                    )
        return None

    def select_task(self, task_id: str) -> Optional[TaskDetail]:
        self.selected_task = self._find_task_detail(task_id)
        return self.selected_task

    def clear_selected_task(self) -> None:
        self.selected_task = None

    # -----------------------------------------------------------------------
    # Task assignment
    # -----------------------------------------------------------------------

    def open_assignment(self, member_id: str) -> Optional[TeamMember]:
        self.assignment_member = next((m for m in self.members if m.id == member_id), None)
        return self.assignment_member

    def cancel_assignment(self) -> None:
        self.assignment_member = None

    def dismiss_alert(self) -> None:
        self.alert = None

    async def submit_task_assignment(self, assignment: TaskAssignment) -> bool:
        """
        Create the task in Workdeck for the member being assigned, then reload.

        On failure the alert is set and team data is left as it was.
        """
        if assignment.user_id is None and self.assignment_member is not None:
            assignment = assignment.model_copy(update={"user_id": self.assignment_member.id})
        if not assignment.user_id:
            self.alert = "Error creating task: no team member selected"
            logger.warning("Task assignment submitted without a team member")
            return False

        try:
            async with self._client_factory(self.token) as client:
                await client.create_task(assignment)
        except WorkdeckError as e:
            self.alert = f"Error creating task: {e.message}"
            self._log(log_task_created(
                user_id=str(assignment.user_id),
                project_id=assignment.project_id,
                name=assignment.name,
                planned_hours=str(assignment.estimated_hours),
                success=False,
                error=e.message,
            ))
            return False

        self._log(log_task_created(
            user_id=str(assignment.user_id),
            project_id=assignment.project_id,
            name=assignment.name,
            planned_hours=str(assignment.estimated_hours),
            success=True,
        ))
        self.assignment_member = None
        await self.load()
        return True

    # -----------------------------------------------------------------------
    # Plain-data state
    # -----------------------------------------------------------------------

    def dump_state(self) -> Dict[str, Any]:
        """
        Everything but the token as JSON-friendly values.

        Selections are stored by id and resolved again by ``restore_state``,
        so a restored controller behaves exactly like the one dumped.
        """
        return {
            "phase": self.phase.value,
            "error": self.error or "",
            "alert": self.alert or "",
            "members": [m.model_dump() for m in self.members],
            "departments": list(self.departments),
            "projects": [p.model_dump() for p in self.projects],
            "current_user_id": self.current_user_id or "",
            "last_sync": self.last_sync.isoformat() if self.last_sync else "",
            "selected_department": self.selected_department,
            "selected_view": self.selected_view,
            "week_offset": self.week_offset,
            "show_task_details": self.show_task_details,
            "selected_task_id": self.selected_task.task.id if self.selected_task else "",
            "assignment_member_id": (self.assignment_member.id or "") if self.assignment_member else "",
        }

    def restore_state(self, state: Dict[str, Any]) -> None:
        """Load a ``dump_state`` result back. Missing keys keep their defaults."""
        self.phase = LoadPhase(state.get("phase") or LoadPhase.AWAITING_TOKEN.value)
        self.error = state.get("error") or None
        self.alert = state.get("alert") or None

        self.members = [TeamMember.model_validate(m) for m in state.get("members") or []]
        self.departments = list(state.get("departments") or [])
        self.projects = [ProjectOption.model_validate(p) for p in state.get("projects") or []]
        self.current_user_id = state.get("current_user_id") or None
        last_sync = state.get("last_sync")
        self.last_sync = datetime.fromisoformat(last_sync) if last_sync else None

        self.selected_department = state.get("selected_department") or ALL_DEPARTMENTS
        view = state.get("selected_view")
        self.selected_view = view if view in VIEWS else "week"
        self.week_offset = int(state.get("week_offset") or 0)
        self.show_task_details = bool(state.get("show_task_details", True))

        task_id = state.get("selected_task_id")
        self.selected_task = self._find_task_detail(task_id) if task_id else None
        member_id = state.get("assignment_member_id")
        if member_id:
            self.open_assignment(member_id)
        else:
            self.assignment_member = None

    # -----------------------------------------------------------------------

    def _log(self, entry: LogEntry) -> None:
        if self._file_logger is not None:
            self._file_logger.write(entry)
