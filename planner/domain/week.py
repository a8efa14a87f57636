"""Week domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WeekIdentity(BaseModel):
    """Canonical identity of a Monday-start week, computed on demand and never stored."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Week key, e.g. 'week-2025-3-24'")
    start: datetime = Field(..., description="Monday 00:00 of the week")
    end: datetime = Field(..., description="Sunday 23:59:59.999 of the week")


class DateRange(BaseModel):
    """Boundary pair supplied from outside, e.g. parsed from a shared-plan token."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime


class WeekRange(BaseModel):
    """Week record persisted in the week_ranges collection."""

    id: str = Field(..., description="Week key, expected to match the canonical id of start_date")
    start_date: datetime = Field(..., description="Stored week start")
    end_date: datetime = Field(..., description="Stored week end")
    label: str = Field(default="", description="Human-readable label")
