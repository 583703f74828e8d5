"""
Workdeck Planner — Resource planner page

Route: /
Full-page states: token entry, loading, connection error, dashboard.
"""

import reflex as rx

from workdeck_planner.ui.state import PlannerState


def planner_page() -> rx.Component:
    """Single page; which panel shows is driven by PlannerState.phase."""
    return rx.box(
        rx.match(
            PlannerState.phase,
            ("awaiting_token", _token_panel()),
            ("loading", _loading_panel()),
            ("failed", _error_panel()),
            _dashboard(),
        ),
        _task_detail_dialog(),
        _assignment_dialog(),
        on_mount=PlannerState.on_mount,
        min_height="100vh",
    )


# ---------------------------------------------------------------------------
# Full-page states
# ---------------------------------------------------------------------------

def _token_panel() -> rx.Component:
    return rx.center(
        rx.card(
            rx.vstack(
                rx.icon("key", size=32),
                rx.heading("Workdeck Authentication", size="5"),
                rx.text("Enter your Workdeck API token to access live data", color="gray", size="2"),
                rx.form(
                    rx.vstack(
                        rx.input(
                            placeholder="Enter your bearer token...",
                            name="token",
                            type="password",
                            required=True,
                            width="100%",
                        ),
                        rx.cond(
                            PlannerState.error != "",
                            rx.callout(PlannerState.error, icon="triangle_alert", color_scheme="red", size="1"),
                        ),
                        rx.button("Connect to Workdeck", type="submit", width="100%"),
                        spacing="3",
                        width="100%",
                    ),
                    on_submit=PlannerState.submit_token,
                    reset_on_submit=True,
                    width="100%",
                ),
                spacing="4",
                align="center",
                width="100%",
            ),
            width="420px",
        ),
        min_height="100vh",
    )


def _loading_panel() -> rx.Component:
    return rx.center(
        rx.vstack(
            rx.spinner(size="3"),
            rx.heading("Loading Workdeck Data...", size="4"),
            rx.text("Fetching users, projects, and scheduling information", color="gray"),
            rx.text(f"Connecting to: {PlannerState.base_url}", size="1", color="gray"),
            align="center",
        ),
        min_height="100vh",
    )


def _error_panel() -> rx.Component:
    return rx.center(
        rx.vstack(
            rx.icon("triangle_alert", size=40, color="red"),
            rx.heading("Connection Error", size="4"),
            rx.text(PlannerState.error, color="gray"),
            rx.hstack(
                rx.button(rx.icon("refresh_cw", size=14), "Retry", on_click=PlannerState.load),
                rx.button(
                    rx.icon("key", size=14),
                    "Update Token",
                    variant="outline",
                    on_click=PlannerState.request_token_update,
                ),
                spacing="3",
            ),
            align="center",
        ),
        min_height="100vh",
    )


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

def _dashboard() -> rx.Component:
    return rx.vstack(
        _header(),
        rx.divider(),
        rx.cond(
            PlannerState.visible_members.length() == 0,
            rx.center(
                rx.vstack(
                    rx.icon("users", size=40, color="gray"),
                    rx.heading("No Team Members Found", size="4"),
                    rx.button("Refresh", on_click=PlannerState.load),
                    align="center",
                ),
                padding="8",
                width="100%",
            ),
            rx.vstack(
                rx.foreach(PlannerState.visible_members, _member_card),
                spacing="4",
                width="100%",
            ),
        ),
        spacing="4",
        padding="6",
        width="100%",
    )


def _header() -> rx.Component:
    return rx.hstack(
        rx.heading("Workdeck Resource Planner", size="5"),
        rx.badge(PlannerState.date_label),
        rx.spacer(),
        rx.cond(
            PlannerState.last_sync_label != "",
            rx.text(f"Last sync {PlannerState.last_sync_label}", size="1", color="gray"),
        ),
        rx.icon_button(rx.icon("key"), variant="outline", on_click=PlannerState.request_token_update),
        rx.icon_button(rx.icon("refresh_cw"), variant="outline", on_click=PlannerState.load),
        rx.hstack(
            rx.button("◀", variant="outline", on_click=PlannerState.previous_week),
            rx.button("Today", variant="outline", on_click=PlannerState.go_to_today),
            rx.button("▶", variant="outline", on_click=PlannerState.next_week),
            spacing="1",
        ),
        rx.button(
            rx.cond(PlannerState.show_task_details, "Hide Tasks", "Show Tasks"),
            variant="outline",
            on_click=PlannerState.toggle_task_details,
        ),
        rx.select(
            ["week", "month", "quarter", "year"],
            value=PlannerState.selected_view,
            on_change=PlannerState.set_view,
        ),
        rx.select(
            PlannerState.department_options,
            value=PlannerState.selected_department,
            on_change=PlannerState.set_department,
        ),
        width="100%",
        align="center",
        spacing="3",
    )


def _member_card(member: rx.Var) -> rx.Component:
    return rx.card(
        rx.vstack(
            rx.hstack(
                rx.text(member["avatar"], size="6"),
                rx.vstack(
                    rx.text(member["name"], weight="bold"),
                    rx.text(
                        f"{member['role']} • {member['department']}",
                        size="1",
                        color="gray",
                    ),
                    rx.text(
                        f"{member['office']} • {member['scheduled']}h scheduled / {member['capacity']}h capacity",
                        size="1",
                        color="gray",
                    ),
                    spacing="0",
                ),
                rx.spacer(),
                rx.button("Assign Task", size="1", on_click=PlannerState.open_assignment(member["id"])),
                rx.badge(
                    f"{member['utilization']}%",
                    color_scheme=rx.match(
                        member["level"],
                        ("over", "red"),
                        ("high", "orange"),
                        ("low", "blue"),
                        "green",
                    ),
                ),
                width="100%",
                align="center",
            ),
            rx.cond(
                PlannerState.show_task_details,
                rx.vstack(
                    rx.foreach(member["tasks"].to(list[dict]), _task_row),
                    spacing="2",
                    width="100%",
                ),
            ),
            width="100%",
        ),
        width="100%",
    )


def _task_row(task: rx.Var) -> rx.Component:
    return rx.hstack(
        rx.badge(task["project"], color_scheme=task["color"]),
        rx.text(f"{task['activity']} • {task['task']}", size="2"),
        rx.cond(task["is_long_term"], rx.badge("Long-term", variant="outline")),
        rx.spacer(),
        rx.text(f"{task['target_hours_per_week']}h/week • {task['duration']}", size="1"),
        rx.badge(task["status"], variant="soft"),
        on_click=PlannerState.select_task(task["id"]),
        cursor="pointer",
        width="100%",
        padding="2",
        border_radius="6px",
        _hover={"background": "var(--gray-3)"},
    )


# ---------------------------------------------------------------------------
# Dialogs
# ---------------------------------------------------------------------------

def _task_detail_dialog() -> rx.Component:
    task = PlannerState.selected_task
    return rx.dialog.root(
        rx.dialog.content(
            rx.dialog.title(task["project"]),
            rx.text(f"{task['activity']} • {task['task']}", color="gray"),
            rx.text(
                f"Assigned to {task['member_name']} ({task['member_department']})",
                size="1",
                color="gray",
            ),
            rx.divider(),
            rx.text(f"Target: {task['target_hours_per_week']}h/week"),
            rx.text(f"Duration: {task['duration']}"),
            rx.text(f"Project total: {task['total_project_hours']}h"),
            rx.badge(task["status"]),
            rx.hstack(
                rx.button("Close", variant="outline", on_click=PlannerState.clear_selected_task),
                justify="end",
                width="100%",
            ),
        ),
        open=PlannerState.has_selected_task,
    )


def _assignment_dialog() -> rx.Component:
    member = PlannerState.assignment_member
    return rx.dialog.root(
        rx.dialog.content(
            rx.dialog.title(f"Create Task for {member['name']}"),
            rx.form(
                rx.vstack(
                    rx.input(placeholder="Enter descriptive task name", name="task_name", required=True),
                    rx.select.root(
                        rx.select.trigger(placeholder="Select Project"),
                        rx.select.content(
                            rx.foreach(
                                PlannerState.projects,
                                lambda p: rx.select.item(p["label"], value=p["id"]),
                            ),
                        ),
                        name="project",
                        required=True,
                    ),
                    rx.input(
                        placeholder="40",
                        name="estimated_hours",
                        type="number",
                        min=1,
                        max=1000,
                        required=True,
                    ),
                    rx.select(["1", "2", "3"], name="priority", default_value="2"),
                    rx.text(f"{member['utilization']}% utilized", size="1", color="gray"),
                    rx.hstack(
                        rx.button("Cancel", variant="outline", type="button", on_click=PlannerState.cancel_assignment),
                        rx.button("Create Task", type="submit"),
                        justify="end",
                        width="100%",
                    ),
                    spacing="3",
                    width="100%",
                ),
                on_submit=PlannerState.submit_task_assignment,
                width="100%",
            ),
        ),
        open=PlannerState.is_assigning,
    )
