"""Planner view models — what the dashboard renders, derived from raw Workdeck records."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

TaskStatus = Literal["planned", "in-progress", "completed"]


class Task(BaseModel):
    """
    One project assignment of a team member, with its weekly-hour target.

    ``target_hours_per_week`` is already capped at 60% of the member's
    weekly capacity.
    """

    id: str = Field(description="'{user_id}-{project_id}-{index}'")
    project: str
    project_id: Optional[str] = None
    project_slug: str
    activity: str
    task: str
    color: str
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    total_activity_hours: float = 0.0
    total_project_hours: float = 0.0
    velocity: float = 0.0
    status: TaskStatus = "in-progress"
    start_week: int = -4
    end_week: int = 20
    pattern: List[bool] = Field(default_factory=list)
    is_long_term: bool = False
    target_hours_per_week: float = 0.0
    duration: str = "TBD"
    monthly_hours: List[float] = Field(default_factory=list)


class TeamMember(BaseModel):
    """A user with their weekly capacity, scheduled load and tasks."""

    id: Optional[str] = None
    name: str
    avatar: str
    department: str
    capacity: float
    scheduled: float
    utilization: int
    role: str
    office: str
    tasks: List[Task] = Field(default_factory=list)


class TaskDetail(BaseModel):
    """A task selected for the detail view, with its owner's context."""

    task: Task
    member_name: str
    member_department: str
    member_role: str


class TaskAssignment(BaseModel):
    """Form input for creating a task in Workdeck for a team member."""

    name: str = Field(min_length=1, max_length=200)
    project_id: str = Field(min_length=1)
    estimated_hours: int = Field(ge=1, le=1000)
    priority: int = Field(default=2, ge=1, le=3)
    user_id: Optional[str] = None


class ProjectOption(BaseModel):
    """A project selectable in the task-assignment form."""

    id: str
    label: str


class DashboardSnapshot(BaseModel):
    """Result of one successful load."""

    members: List[TeamMember] = Field(default_factory=list)
    departments: List[str] = Field(default_factory=list)
    projects: List[ProjectOption] = Field(default_factory=list)
    current_user_id: Optional[str] = None
    synced_at: datetime
