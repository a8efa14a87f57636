"""Update models for store operations."""

from datetime import datetime

from pydantic import BaseModel

from planner.domain.objective import ObjectiveCategory


class WeekRangeCorrection(BaseModel):
    """Full canonical patch for a drifted week range record."""

    id: str
    start_date: datetime
    end_date: datetime


class TaskUpdate(BaseModel):
    """Partial update payload for a task; unset fields are left untouched."""

    title: str | None = None
    assignee: str | None = None
    completed: bool | None = None
    position: int | None = None


class ObjectiveUpdate(BaseModel):
    """Partial update payload for an objective; unset fields are left untouched.

    Progress and position are not editable here: progress follows the tasks
    and positions change through reordering.
    """

    title: str | None = None
    is_urgent: bool | None = None
    is_important: bool | None = None
    category: ObjectiveCategory | None = None
    complexity: str | None = None
    criticality: str | None = None
    assignees: list[str] | None = None
    target_completion_date: datetime | None = None
