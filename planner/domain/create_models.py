"""Pydantic models for creating records in the store."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from planner.domain.objective import ObjectiveCategory


class WeekRangeCreate(BaseModel):
    """Pydantic model for creating a week range record."""

    id: str = Field(..., description="Canonical week key")
    start_date: datetime = Field(..., description="Monday 00:00")
    end_date: datetime = Field(..., description="Sunday 23:59:59.999")
    label: str = Field(..., description="Human-readable label")

    @model_validator(mode="after")
    def validate_boundaries(self) -> "WeekRangeCreate":
        """Validate that the week ends after it starts."""
        if self.end_date <= self.start_date:
            msg = "Week end must be after week start"
            raise ValueError(msg)
        return self


class ObjectiveCreate(BaseModel):
    """Pydantic model for creating an objective record."""

    product_id: str = Field(..., description="Owning product ID")
    week_id: str = Field(..., description="Week key")
    title: str = Field(..., description="Objective title")
    is_urgent: bool | None = Field(default=None)
    is_important: bool | None = Field(default=None)
    category: ObjectiveCategory | None = Field(default=None)
    complexity: str | None = Field(default=None)
    criticality: str | None = Field(default=None)
    assignees: list[str] = Field(default_factory=list)
    target_completion_date: datetime | None = Field(default=None)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is not blank."""
        if not v.strip():
            msg = "Objective title must not be empty"
            raise ValueError(msg)
        return v.strip()


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    objective_id: str = Field(..., description="Parent objective ID")
    title: str = Field(..., description="Task title")
    assignee: str | None = Field(default=None)
    complexity: str | None = Field(default=None)
    criticality: str | None = Field(default=None)
    position: int | None = Field(default=None, description="Explicit position, appended last when omitted")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is not blank."""
        if not v.strip():
            msg = "Task title must not be empty"
            raise ValueError(msg)
        return v.strip()


class ProductCreate(BaseModel):
    """Pydantic model for creating a product record."""

    name: str = Field(..., description="Product name, unique")


class MemberCreate(BaseModel):
    """Pydantic model for creating a team member record."""

    name: str = Field(..., description="Display name")
    role: str = Field(default="")
    avatar: str = Field(default="", description="Avatar URL")
