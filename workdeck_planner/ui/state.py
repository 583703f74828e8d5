"""
Workdeck Planner — Reflex State for the resource-planner page.

The token lives in the browser's localStorage under ``workdeck_token``.
Each event restores a short-lived DashboardController from the vars below,
runs the operation on it and copies ``dump_state()`` back, so every rule
(filtering, selection, assignment) is the controller's.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import reflex as rx
from pydantic import ValidationError

from workdeck_planner.client import WorkdeckClient
from workdeck_planner.controller import (
    ALL_DEPARTMENTS,
    DashboardController,
    LoadPhase,
    utilization_level,
)
from workdeck_planner.engine.config import TOKEN_STORAGE_KEY, get_config
from workdeck_planner.engine.logging import get_file_logger
from workdeck_planner.records import TaskAssignment

logger = logging.getLogger("workdeck_planner.ui.state")

# Vars mirrored one-to-one from DashboardController.dump_state()
_CONTROLLER_FIELDS = (
    "phase",
    "error",
    "alert",
    "members",
    "departments",
    "projects",
    "current_user_id",
    "last_sync",
    "selected_department",
    "selected_view",
    "week_offset",
    "show_task_details",
    "selected_task_id",
    "assignment_member_id",
)


def _client_factory(token: str) -> WorkdeckClient:
    return WorkdeckClient.from_config(token, get_config().api, file_logger=get_file_logger())


class PlannerState(rx.State):
    """
    Resource planner page state.

    Manages:
    - Token entry (localStorage-backed)
    - Load phase, error message, last sync
    - Team data, department filter, calendar view
    - Task detail and task assignment dialogs
    """

    auth_token: str = rx.LocalStorage("", name=TOKEN_STORAGE_KEY)

    # Controller state
    phase: str = LoadPhase.AWAITING_TOKEN.value
    error: str = ""
    alert: str = ""
    members: List[Dict[str, Any]] = []
    departments: List[str] = []
    projects: List[Dict[str, str]] = []
    current_user_id: str = ""
    last_sync: str = ""
    selected_department: str = ALL_DEPARTMENTS
    selected_view: str = "week"
    week_offset: int = 0
    show_task_details: bool = True
    selected_task_id: str = ""
    assignment_member_id: str = ""

    # Derived from the controller after each event
    visible_members: List[Dict[str, Any]] = []
    date_label: str = ""
    last_sync_label: str = ""
    selected_task: Dict[str, Any] = {}
    assignment_member: Dict[str, Any] = {}

    @rx.var
    def base_url(self) -> str:
        return get_config().api.base_url

    @rx.var
    def department_options(self) -> List[str]:
        return [ALL_DEPARTMENTS, *self.departments]

    @rx.var
    def has_selected_task(self) -> bool:
        return bool(self.selected_task)

    @rx.var
    def is_assigning(self) -> bool:
        return bool(self.assignment_member)

    # -----------------------------------------------------------------------
    # Controller round-trip
    # -----------------------------------------------------------------------

    def _controller(self) -> DashboardController:
        controller = DashboardController(
            client_factory=_client_factory,
            token=self.auth_token,
            file_logger=get_file_logger(),
        )
        controller.restore_state({name: self.get_value(name) for name in _CONTROLLER_FIELDS})
        return controller

    def _sync_from(self, controller: DashboardController) -> None:
        for name, value in controller.dump_state().items():
            setattr(self, name, value)

        self.visible_members = [
            {**m.model_dump(), "level": utilization_level(m.utilization)}
            for m in controller.visible_members
        ]
        self.date_label = controller.date_range_label()
        self.last_sync_label = controller.last_sync.strftime("%H:%M:%S") if controller.last_sync else ""

        detail = controller.selected_task
        self.selected_task = (
            {
                **detail.task.model_dump(),
                "member_name": detail.member_name,
                "member_department": detail.member_department,
                "member_role": detail.member_role,
            }
            if detail
            else {}
        )
        member = controller.assignment_member
        self.assignment_member = member.model_dump() if member else {}

    def _apply(self, operation: str, *args: Any) -> DashboardController:
        """Run a synchronous controller operation and copy its state back."""
        controller = self._controller()
        getattr(controller, operation)(*args)
        self._sync_from(controller)
        return controller

    # -----------------------------------------------------------------------
    # Load lifecycle
    # -----------------------------------------------------------------------

    async def on_mount(self):
        controller = self._controller()
        if controller.token:
            self.phase = LoadPhase.LOADING.value
            yield
        await controller.start()
        self._sync_from(controller)

    async def load(self):
        self.phase = LoadPhase.LOADING.value
        self.error = ""
        yield
        controller = self._controller()
        await controller.load()
        self._sync_from(controller)

    async def submit_token(self, form_data: dict):
        token = (form_data.get("token") or "").strip()
        if not token:
            return
        self.auth_token = token
        self.phase = LoadPhase.LOADING.value
        self.error = ""
        yield
        controller = self._controller()
        await controller.submit_token(token)
        self._sync_from(controller)

    def request_token_update(self) -> None:
        self._apply("request_token_update")

    # -----------------------------------------------------------------------
    # Filters and navigation
    # -----------------------------------------------------------------------

    def set_department(self, department: str) -> None:
        self._apply("set_department", department)

    def set_view(self, view: str):
        try:
            self._apply("set_view", view)
        except ValueError as e:
            return rx.window_alert(str(e))

    def toggle_task_details(self) -> None:
        self._apply("toggle_task_details")

    def previous_week(self) -> None:
        self._apply("previous_week")

    def next_week(self) -> None:
        self._apply("next_week")

    def go_to_today(self) -> None:
        self._apply("go_to_today")

    # -----------------------------------------------------------------------
    # Dialogs
    # -----------------------------------------------------------------------

    def select_task(self, task_id: str) -> None:
        self._apply("select_task", task_id)

    def clear_selected_task(self) -> None:
        self._apply("clear_selected_task")

    def open_assignment(self, member_id: str) -> None:
        self._apply("open_assignment", member_id)

    def cancel_assignment(self) -> None:
        self._apply("cancel_assignment")

    async def submit_task_assignment(self, form_data: dict):
        try:
            assignment = TaskAssignment(
                name=form_data.get("task_name", ""),
                project_id=form_data.get("project", ""),
                estimated_hours=form_data.get("estimated_hours") or 0,
                priority=form_data.get("priority") or 2,
            )
        except ValidationError as e:
            return rx.window_alert(f"Error creating task: {e.errors()[0]['msg']}")

        controller = self._controller()
        created = await controller.submit_task_assignment(assignment)
        alert = controller.alert
        controller.dismiss_alert()
        self._sync_from(controller)
        if not created:
            logger.warning(alert)
            return rx.window_alert(alert or "Error creating task")
