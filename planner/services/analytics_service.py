"""Analytics service for week statistics and per-assignee plans."""

import logging

from planner.core.eisenhower import ratio_percent
from planner.core.logging import span
from planner.models.service_models import MemberStats, Plan, PlanTask, WeekStatistics
from planner.services import objective_service


logger = logging.getLogger(__name__)


async def get_statistics(product_id: str, week_id: str) -> WeekStatistics:
    """Get completion statistics of a product week.

    Args:
        product_id: Product ID
        week_id: Week key

    Returns:
        WeekStatistics with totals, global progress and per-member counts
    """
    with span("analytics_service.get_statistics"):
        objectives = await objective_service.get_objectives(product_id, week_id)

        tasks = [task for objective in objectives for task in objective.tasks]
        completed = sum(1 for task in tasks if task.completed)

        member_stats: dict[str, MemberStats] = {}
        for task in tasks:
            if not task.assignee:
                continue
            stats = member_stats.setdefault(task.assignee, MemberStats())
            stats.total += 1
            if task.completed:
                stats.completed += 1

        return WeekStatistics(
            total_objectives=len(objectives),
            total_tasks=len(tasks),
            completed_tasks=completed,
            global_progress=ratio_percent(completed, len(tasks)),
            member_stats=member_stats,
        )


async def get_plans(product_id: str, week_id: str) -> list[Plan]:
    """Group a week's tasks by assignee, in order of first appearance.

    Unassigned tasks are not part of any plan.
    """
    with span("analytics_service.get_plans"):
        objectives = await objective_service.get_objectives(product_id, week_id)

        tasks_by_assignee: dict[str, list[PlanTask]] = {}
        for objective in objectives:
            for task in objective.tasks:
                if not task.assignee:
                    continue
                tasks_by_assignee.setdefault(task.assignee, []).append(
                    PlanTask(**task.model_dump(), objective_title=objective.title)
                )

        plans = []
        for assignee_id, tasks in tasks_by_assignee.items():
            completed = sum(1 for task in tasks if task.completed)
            plans.append(
                Plan(
                    assignee_id=assignee_id,
                    tasks=tasks,
                    completed_tasks=completed,
                    total_tasks=len(tasks),
                    progress=ratio_percent(completed, len(tasks)),
                )
            )

        logger.info("Built %d plans for product %s and week %s", len(plans), product_id, week_id)
        return plans
