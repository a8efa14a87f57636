"""Eisenhower categorization and task-completion progress for objectives."""

from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

from planner.core.config import constants
from planner.domain.objective import ObjectiveCategory


# Fixed display order of the categories
CATEGORY_ORDER: tuple[ObjectiveCategory, ...] = (
    ObjectiveCategory.URGENT_IMPORTANT,
    ObjectiveCategory.IMPORTANT_NOT_URGENT,
    ObjectiveCategory.URGENT_NOT_IMPORTANT,
    ObjectiveCategory.NOT_URGENT_NOT_IMPORTANT,
)

_DISPLAY_NAMES = {
    ObjectiveCategory.URGENT_IMPORTANT: "Urgent & Important",
    ObjectiveCategory.IMPORTANT_NOT_URGENT: "Important (Non Urgent)",
    ObjectiveCategory.URGENT_NOT_IMPORTANT: "Urgent (Non Important)",
    ObjectiveCategory.NOT_URGENT_NOT_IMPORTANT: "Standard",
}


class Categorizable(Protocol):
    category: ObjectiveCategory | None
    is_urgent: bool | None
    is_important: bool | None


class Completable(Protocol):
    completed: bool


T = TypeVar("T", bound=Categorizable)


def category_of(objective: Categorizable) -> ObjectiveCategory:
    """Category of an objective; an explicit category wins over the urgency/importance flags."""
    if objective.category:
        return ObjectiveCategory(objective.category)

    if objective.is_urgent and objective.is_important:
        return ObjectiveCategory.URGENT_IMPORTANT
    if objective.is_important:
        return ObjectiveCategory.IMPORTANT_NOT_URGENT
    if objective.is_urgent:
        return ObjectiveCategory.URGENT_NOT_IMPORTANT
    return ObjectiveCategory.NOT_URGENT_NOT_IMPORTANT


def ratio_percent(completed: int, total: int) -> int:
    """Completion percentage rounded half-up, 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    # Integer form of floor(100 * completed / total + 0.5)
    return (2 * constants.PROGRESS_MAX * completed + total) // (2 * total)


def progress_of(tasks: Sequence[Completable]) -> int:
    """Percentage of completed tasks in [0, 100]."""
    completed = sum(1 for task in tasks if task.completed)
    return ratio_percent(completed, len(tasks))


def group_by_category(objectives: Iterable[T]) -> dict[ObjectiveCategory, list[T]]:
    """Partition objectives by category, keeping input order inside each category.

    The returned dict always holds all four categories in display order.
    """
    grouped: dict[ObjectiveCategory, list[T]] = {category: [] for category in CATEGORY_ORDER}
    for objective in objectives:
        grouped[category_of(objective)].append(objective)
    return grouped


def category_display_name(category: ObjectiveCategory) -> str:
    """Label shown for a category."""
    return _DISPLAY_NAMES[category]
