"""Objective and task service: store access, progress upkeep and week views."""

import logging
from datetime import date, datetime
from typing import Any

from planner.core import db_client
from planner.core.eisenhower import category_display_name, group_by_category, progress_of
from planner.core.logging import span
from planner.core.shared_range import format_shared_range
from planner.core.week_identity import week_identity_of
from planner.domain.create_models import ObjectiveCreate, TaskCreate
from planner.domain.objective import Objective, Task
from planner.domain.update_models import ObjectiveUpdate, TaskUpdate
from planner.models.service_models import CategoryGroup, SharedPlanView, WeekView
from planner.services import week_range_service


logger = logging.getLogger(__name__)

OBJECTIVES = "objectives"
TASKS = "tasks"


async def get_tasks_for_objective(objective_id: str) -> list[Task]:
    """Get the tasks of an objective ordered by position."""
    records = await db_client.list_all_records(
        collection=TASKS,
        filter_query=f'objective_id = "{db_client.sanitize_param(objective_id)}"',
        sort="position",
    )
    return [Task(**record) for record in records]


async def _with_tasks(record: dict[str, Any]) -> Objective:
    """Build an objective with its tasks and progress derived from them."""
    tasks = await get_tasks_for_objective(record["id"])
    return Objective(**{**record, "tasks": tasks, "progress": progress_of(tasks)})


async def get_objectives(product_id: str, week_id: str) -> list[Objective]:
    """Get the objectives of a product week ordered by position, each with its tasks.

    Args:
        product_id: Product ID
        week_id: Week key (exact match, no date fallback)

    Returns:
        Objectives with tasks loaded and progress recomputed
    """
    with span("objective_service.get_objectives"):
        filter_query = (
            f'product_id = "{db_client.sanitize_param(product_id)}" '
            f'&& week_id = "{db_client.sanitize_param(week_id)}"'
        )
        records = await db_client.list_all_records(collection=OBJECTIVES, filter_query=filter_query, sort="position")

        objectives = [await _with_tasks(record) for record in records]
        logger.info("Found %d objectives for product %s and week %s", len(objectives), product_id, week_id)
        return objectives


async def get_objective_by_id(objective_id: str) -> Objective | None:
    """Get an objective with its tasks, or None when it does not exist."""
    try:
        record = await db_client.get_record(collection=OBJECTIVES, record_id=objective_id)
    except db_client.RecordNotFoundError:
        return None
    return await _with_tasks(record)


async def _next_position(collection: str, filter_query: str) -> int:
    records = await db_client.list_records(
        collection=collection,
        filter_query=filter_query,
        per_page=1,
        sort="-position",
    )
    return (records[0].get("position") or 0) + 1 if records else 0


async def create_objective(objective: ObjectiveCreate) -> Objective:
    """Create an objective placed after the existing objectives of its week."""
    with span("objective_service.create_objective"):
        position = await _next_position(
            OBJECTIVES,
            f'product_id = "{db_client.sanitize_param(objective.product_id)}" '
            f'&& week_id = "{db_client.sanitize_param(objective.week_id)}"',
        )
        data = {**objective.model_dump(), "progress": 0, "position": position}
        record = await db_client.create_record(collection=OBJECTIVES, data=data)
        logger.info("Created objective '%s' for week %s", objective.title, objective.week_id)
        return Objective(**record)


async def update_objective_progress(objective_id: str) -> int:
    """Recompute an objective's progress from its current tasks and persist it."""
    tasks = await get_tasks_for_objective(objective_id)
    progress = progress_of(tasks)
    await db_client.update_record(collection=OBJECTIVES, record_id=objective_id, data={"progress": progress})
    return progress


async def create_task(task: TaskCreate) -> Task:
    """Create a task, appended last unless a position is given, and refresh the objective's progress."""
    with span("objective_service.create_task"):
        position = task.position
        if position is None:
            position = await _next_position(
                TASKS, f'objective_id = "{db_client.sanitize_param(task.objective_id)}"'
            )

        data = {**task.model_dump(), "position": position, "completed": False}
        record = await db_client.create_record(collection=TASKS, data=data)
        await update_objective_progress(task.objective_id)
        return Task(**record)


async def update_task(task_id: str, patch: TaskUpdate) -> Task:
    """Apply a partial update to a task, refreshing progress when completion changes.

    Raises:
        db_client.RecordNotFoundError: If the task does not exist
        ValueError: If the patch is empty
    """
    data = patch.model_dump(exclude_none=True)
    record = await db_client.update_record(collection=TASKS, record_id=task_id, data=data)
    task = Task(**record)
    if patch.completed is not None:
        await update_objective_progress(task.objective_id)
    return task


async def delete_task(task_id: str) -> None:
    """Delete a task and refresh its objective's progress."""
    record = await db_client.get_record(collection=TASKS, record_id=task_id)
    await db_client.delete_record(collection=TASKS, record_id=task_id)
    await update_objective_progress(record["objective_id"])


async def update_objective(objective_id: str, patch: ObjectiveUpdate) -> Objective:
    """Apply a partial update to an objective and return it with its tasks.

    Raises:
        db_client.RecordNotFoundError: If the objective does not exist
        ValueError: If the patch is empty
    """
    data = patch.model_dump(exclude_none=True)
    record = await db_client.update_record(collection=OBJECTIVES, record_id=objective_id, data=data)
    return await _with_tasks(record)


async def delete_objective(objective_id: str) -> int:
    """Delete an objective together with all of its tasks.

    The objective goes first, so a failure part way leaves at most tasks no
    view can reach.

    Returns:
        Number of tasks deleted
    """
    with span("objective_service.delete_objective"):
        await db_client.delete_record(collection=OBJECTIVES, record_id=objective_id)
        deleted = await db_client.delete_records(
            collection=TASKS,
            filter_query=f'objective_id = "{db_client.sanitize_param(objective_id)}"',
        )
        logger.info("Deleted objective %s and %d tasks", objective_id, deleted)
        return deleted


async def _reorder(collection: str, ordered_ids: list[str]) -> None:
    if len(set(ordered_ids)) != len(ordered_ids):
        msg = "Each id may appear only once in an ordering"
        raise ValueError(msg)
    for position, record_id in enumerate(ordered_ids):
        await db_client.update_record(collection=collection, record_id=record_id, data={"position": position})


async def update_objective_positions(ordered_ids: list[str]) -> None:
    """Store a drag-and-drop order: each objective's position becomes its index in ordered_ids."""
    await _reorder(OBJECTIVES, ordered_ids)


async def update_task_positions(ordered_ids: list[str]) -> None:
    """Store a drag-and-drop order: each task's position becomes its index in ordered_ids."""
    await _reorder(TASKS, ordered_ids)


async def toggle_task(task_id: str) -> Objective:
    """Flip a task's completion and return its objective with the recomputed progress.

    The progress is derived from the task list read back after the toggle was
    persisted. When the progress write fails the task is written back to its
    previous state before the error propagates, so the stored progress always
    matches the stored tasks.

    Raises:
        db_client.RecordNotFoundError: If the task or its objective does not exist
        db_client.PartialWriteError: If the progress write and the task rollback both failed
        db_client.DatabaseError: If a store write fails
    """
    with span("objective_service.toggle_task"):
        record = await db_client.get_record(collection=TASKS, record_id=task_id)
        task = Task(**record)

        await db_client.update_record(collection=TASKS, record_id=task_id, data={"completed": not task.completed})

        try:
            tasks = await get_tasks_for_objective(task.objective_id)
            progress = progress_of(tasks)
            objective = await db_client.update_record(
                collection=OBJECTIVES,
                record_id=task.objective_id,
                data={"progress": progress},
            )
        except db_client.DatabaseError:
            logger.warning("Progress write failed for objective %s, rolling back task %s", task.objective_id, task_id)
            try:
                await db_client.update_record(collection=TASKS, record_id=task_id, data={"completed": task.completed})
            except db_client.DatabaseError as rollback_error:
                logger.exception("Rollback of task %s failed", task_id)
                msg = f"Task {task_id} was toggled but objective {task.objective_id} progress was not updated"
                raise db_client.PartialWriteError(msg) from rollback_error
            raise

        logger.info(
            "Toggled task %s to %s (objective %s at %d%%)",
            task_id,
            not task.completed,
            task.objective_id,
            progress,
        )
        return Objective(**{**objective, "tasks": tasks, "progress": progress})


async def flag_objective(objective_id: str, description: str) -> Objective:
    """Raise a flag on an objective."""
    record = await db_client.update_record(
        collection=OBJECTIVES,
        record_id=objective_id,
        data={"flag": {"is_flagged": True, "description": description}},
    )
    return Objective(**record)


async def unflag_objective(objective_id: str) -> Objective:
    """Clear an objective's flag."""
    record = await db_client.update_record(
        collection=OBJECTIVES,
        record_id=objective_id,
        data={"flag": {"is_flagged": False, "description": ""}},
    )
    return Objective(**record)


async def clone_objective(objective_id: str, target_week_id: str) -> Objective:
    """Copy an objective and its tasks into another week.

    The copy starts at 0% with every task open; a flag is carried over only when raised.

    Raises:
        db_client.RecordNotFoundError: If the source objective does not exist
    """
    with span("objective_service.clone_objective"):
        source = await get_objective_by_id(objective_id)
        if source is None:
            raise db_client.RecordNotFoundError(f"Record not found in {OBJECTIVES}: {objective_id}")

        position = await _next_position(
            OBJECTIVES,
            f'product_id = "{db_client.sanitize_param(source.product_id)}" '
            f'&& week_id = "{db_client.sanitize_param(target_week_id)}"',
        )
        data = source.model_dump(exclude={"id", "tasks", "flag"})
        data.update({"week_id": target_week_id, "progress": 0, "position": position})
        if source.flag and source.flag.is_flagged:
            data["flag"] = source.flag.model_dump()

        clone = await db_client.create_record(collection=OBJECTIVES, data=data)

        for index, task in enumerate(source.tasks):
            task_data = task.model_dump(exclude={"id"})
            task_data.update({"objective_id": clone["id"], "position": index, "completed": False})
            await db_client.create_record(collection=TASKS, data=task_data)

        logger.info("Cloned objective %s into week %s as %s", objective_id, target_week_id, clone["id"])
        return await _with_tasks(clone)


def _week_progress(objectives: list[Objective]) -> int:
    return progress_of([task for objective in objectives for task in objective.tasks])


async def get_week_view(product_id: str, value: date | datetime | str) -> WeekView:
    """Objectives of the week containing value, grouped by Eisenhower category.

    Raises:
        InvalidDateError: If value is not a usable date
    """
    identity = week_identity_of(value)

    with span("objective_service.get_week_view"):
        week = await week_range_service.ensure_week_exists(identity.start)
        objectives = await get_objectives(product_id, identity.id)

        groups = [
            CategoryGroup(category=category, name=category_display_name(category), objectives=members)
            for category, members in group_by_category(objectives).items()
        ]
        return WeekView(
            product_id=product_id,
            identity=identity,
            week=week,
            groups=groups,
            progress=_week_progress(objectives),
            share_token=format_shared_range(identity.start, identity.end),
        )


async def get_shared_plan(product_id: str, token: str, members: list[str] | None = None) -> SharedPlanView:
    """Objectives of the week named by a shared-plan token.

    Args:
        product_id: Product ID
        token: "DD-MM-YYYY--to--DD-MM-YYYY"; unreadable tokens show the current week
        members: When given, only tasks assigned to these members are kept
    """
    with span("objective_service.get_shared_plan"):
        week, resolved = await week_range_service.resolve_shared_week(token)
        objectives = await get_objectives(product_id, week.id)

        if members:
            wanted = set(members)
            filtered = []
            for objective in objectives:
                tasks = [task for task in objective.tasks if task.assignee in wanted]
                if tasks:
                    filtered.append(objective.model_copy(update={"tasks": tasks, "progress": progress_of(tasks)}))
            objectives = filtered

        return SharedPlanView(
            product_id=product_id,
            token=token,
            resolved_from_token=resolved,
            week=week,
            objectives=objectives,
            progress=_week_progress(objectives),
        )
