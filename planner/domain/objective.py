"""Objective and task domain models and enums."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ObjectiveCategory(StrEnum):
    """Eisenhower classification of an objective."""

    URGENT_IMPORTANT = "urgent-important"
    IMPORTANT_NOT_URGENT = "important-not-urgent"
    URGENT_NOT_IMPORTANT = "urgent-not-important"
    NOT_URGENT_NOT_IMPORTANT = "not-urgent-not-important"


class Flag(BaseModel):
    """Attention marker raised on an objective."""

    is_flagged: bool = False
    description: str = ""


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID from the store")
    objective_id: str = Field(..., description="Parent objective ID")
    title: str = Field(default="", description="Task title")
    assignee: str | None = Field(default=None, description="Assigned member ID")
    complexity: str | None = Field(default=None, description="Complexity level")
    criticality: str | None = Field(default=None, description="Criticality level")
    completed: bool = Field(default=False, description="Whether the task is done")
    position: int = Field(default=0, description="Display order within the objective")


class Objective(BaseModel):
    """Objective data transfer object."""

    id: str = Field(..., description="Unique objective ID from the store")
    product_id: str = Field(..., description="Owning product ID")
    week_id: str = Field(..., description="Week key the objective is planned for")
    title: str = Field(..., description="Objective title")
    tasks: list[Task] = Field(default_factory=list, description="Tasks, loaded separately from the objective")
    progress: int = Field(default=0, description="Derived completion percentage")
    position: int = Field(default=0, description="Display order within the week")
    is_urgent: bool | None = Field(default=None)
    is_important: bool | None = Field(default=None)
    category: ObjectiveCategory | None = Field(default=None, description="Explicit category, wins over flags")
    complexity: str | None = Field(default=None)
    criticality: str | None = Field(default=None)
    assignees: list[str] = Field(default_factory=list, description="Member IDs")
    target_completion_date: datetime | None = Field(default=None)
    flag: Flag | None = Field(default=None)

    @field_validator("category", "target_completion_date", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        """Treat empty stored values as unset."""
        return v or None

    @field_validator("assignees", mode="before")
    @classmethod
    def none_as_empty_list(cls, v: Any) -> Any:
        """Stored objectives may carry no assignee list."""
        return v if v is not None else []


class Product(BaseModel):
    """Product the objectives are planned for."""

    id: str
    name: str


class Member(BaseModel):
    """Team member tasks are assigned to."""

    id: str
    name: str
    role: str = ""
    avatar: str = ""
    initials: str = ""
