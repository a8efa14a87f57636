"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting store
dictionaries into typed objects with validation.
"""

from pydantic import BaseModel, Field

from planner.domain.objective import Objective, ObjectiveCategory, Task
from planner.domain.week import WeekIdentity, WeekRange


class ReconciliationReport(BaseModel):
    """Outcome of one week reconciliation pass."""

    checked: int = 0
    corrected: list[str] = Field(default_factory=list, description="Canonical ids written by the pass")
    created: list[str] = Field(default_factory=list, description="Week ids created by the pass")
    skipped: list[str] = Field(default_factory=list, description="Record ids left as-is after a conflict or failure")

    @property
    def changed(self) -> bool:
        return bool(self.corrected or self.created)


class CategoryGroup(BaseModel):
    """Objectives of one Eisenhower category, in display order."""

    category: ObjectiveCategory
    name: str
    objectives: list[Objective]


class WeekView(BaseModel):
    """Objectives of a product for one week, grouped for display."""

    product_id: str
    identity: WeekIdentity
    week: WeekRange
    groups: list[CategoryGroup]
    progress: int
    share_token: str = Field(..., description="Shared-plan token naming this week")


class SharedPlanView(BaseModel):
    """Plan resolved from a shared-plan token."""

    product_id: str
    token: str
    resolved_from_token: bool = Field(..., description="False when the token could not be parsed")
    week: WeekRange
    objectives: list[Objective]
    progress: int


class MemberStats(BaseModel):
    """Task counts for one assignee."""

    total: int = 0
    completed: int = 0


class WeekStatistics(BaseModel):
    """Aggregate completion statistics of a product week."""

    total_objectives: int
    total_tasks: int
    completed_tasks: int
    global_progress: int
    member_stats: dict[str, MemberStats]


class PlanTask(Task):
    """Task annotated with its objective for per-assignee plans."""

    objective_title: str


class Plan(BaseModel):
    """Tasks of one assignee across a week's objectives."""

    assignee_id: str
    tasks: list[PlanTask]
    completed_tasks: int
    total_tasks: int
    progress: int
