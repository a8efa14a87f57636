"""Domain models and DTOs."""

from planner.domain.create_models import MemberCreate, ObjectiveCreate, ProductCreate, TaskCreate, WeekRangeCreate
from planner.domain.objective import Flag, Member, Objective, ObjectiveCategory, Product, Task
from planner.domain.update_models import ObjectiveUpdate, TaskUpdate, WeekRangeCorrection
from planner.domain.week import DateRange, WeekIdentity, WeekRange


__all__ = [
    "DateRange",
    "Flag",
    "Member",
    "MemberCreate",
    "Objective",
    "ObjectiveCategory",
    "ObjectiveCreate",
    "ObjectiveUpdate",
    "Product",
    "ProductCreate",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "WeekIdentity",
    "WeekRange",
    "WeekRangeCorrection",
    "WeekRangeCreate",
]
