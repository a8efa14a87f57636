"""HTTP endpoints for weeks, objectives, shared plans and analytics."""

import logging
from collections.abc import Awaitable, Callable
from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from planner.core import db_client
from planner.core.config import constants
from planner.core.errors import InvalidDateError, classify_error_with_response
from planner.core.week_identity import current_week_identity, week_identity_of, week_range_from_id
from planner.domain.create_models import MemberCreate, ProductCreate
from planner.domain.objective import Member, Objective, Product
from planner.domain.update_models import ObjectiveUpdate
from planner.domain.week import WeekIdentity, WeekRange
from planner.models.service_models import (
    Plan,
    ReconciliationReport,
    SharedPlanView,
    WeekStatistics,
    WeekView,
)
from planner.services import analytics_service, catalog_service, objective_service, week_range_service
from planner.services.week_context import WeekContext


router = APIRouter(prefix="/api", tags=["planner"])
logger = logging.getLogger(__name__)


def _error_response(exception: Exception, status_code: int) -> JSONResponse:
    """Render a structured error for the client."""
    error = classify_error_with_response(exception)
    return JSONResponse(content=error.model_dump(mode="json"), status_code=status_code)


def get_week_context(request: Request) -> WeekContext:
    """Week selection held by the running app."""
    return request.app.state.week_context


@router.get("/weeks")
async def list_weeks() -> list[WeekRange]:
    """Stored weeks, newest first."""
    return await week_range_service.get_week_ranges()


@router.get("/weeks/current")
async def get_current_week() -> WeekIdentity:
    """Identity of the current week."""
    return current_week_identity()


@router.get("/weeks/identity", response_model=WeekIdentity)
async def get_week_identity(value: str = Query(..., alias="date")) -> WeekIdentity | JSONResponse:
    """Identity of the week containing a YYYY-MM-DD date."""
    try:
        return week_identity_of(value)
    except InvalidDateError as e:
        return _error_response(e, constants.HTTP_UNPROCESSABLE)


@router.post("/weeks/reconcile")
async def reconcile_weeks() -> ReconciliationReport:
    """Run a reconciliation pass on demand."""
    return await week_range_service.reconcile_week_ranges()


@router.get("/weeks/selected")
async def get_selected_week(context: WeekContext = Depends(get_week_context)) -> WeekIdentity:
    """Week currently selected in the planner."""
    return context.week


@router.put("/weeks/selected", response_model=WeekIdentity)
async def select_week(
    value: str = Query(..., alias="date"),
    context: WeekContext = Depends(get_week_context),
) -> WeekIdentity | JSONResponse:
    """Select the week containing date; subscribers of the context are notified."""
    try:
        return context.select_date(value)
    except InvalidDateError as e:
        return _error_response(e, constants.HTTP_UNPROCESSABLE)


@router.get("/weeks/{week_id}/boundaries", response_model=WeekIdentity)
async def get_week_boundaries(week_id: str) -> WeekIdentity | JSONResponse:
    """Monday-to-Sunday boundaries of a week key, padded legacy keys included."""
    try:
        return week_range_from_id(week_id)
    except InvalidDateError as e:
        return _error_response(e, constants.HTTP_UNPROCESSABLE)


@router.get("/objectives/{product_id}/{week_id}")
async def list_objectives(product_id: str, week_id: str) -> list[Objective]:
    """Objectives of a product week, with their tasks."""
    return await objective_service.get_objectives(product_id, week_id)


@router.patch("/objectives/{objective_id}", response_model=Objective)
async def update_objective(objective_id: str, patch: ObjectiveUpdate) -> Objective | JSONResponse:
    """Edit an objective's fields; progress and position are not editable here."""
    if not patch.model_dump(exclude_none=True):
        return JSONResponse(content={"detail": "Empty update"}, status_code=constants.HTTP_UNPROCESSABLE)
    try:
        return await objective_service.update_objective(objective_id, patch)
    except db_client.RecordNotFoundError as e:
        return _error_response(e, constants.HTTP_NOT_FOUND)


@router.delete("/objectives/{objective_id}")
async def delete_objective(objective_id: str) -> JSONResponse:
    """Delete an objective and its tasks."""
    try:
        deleted = await objective_service.delete_objective(objective_id)
    except db_client.RecordNotFoundError as e:
        return _error_response(e, constants.HTTP_NOT_FOUND)
    return JSONResponse(content={"deleted_tasks": deleted})


@router.put("/objectives/order")
async def reorder_objectives(ordered_ids: list[str]) -> JSONResponse:
    """Persist a drag-and-drop order of objectives."""
    return await _reorder(objective_service.update_objective_positions, ordered_ids)


@router.put("/tasks/order")
async def reorder_tasks(ordered_ids: list[str]) -> JSONResponse:
    """Persist a drag-and-drop order of tasks."""
    return await _reorder(objective_service.update_task_positions, ordered_ids)


async def _reorder(update_positions: Callable[[list[str]], Awaitable[None]], ordered_ids: list[str]) -> JSONResponse:
    try:
        await update_positions(ordered_ids)
    except ValueError as e:
        return JSONResponse(content={"detail": str(e)}, status_code=constants.HTTP_UNPROCESSABLE)
    except db_client.RecordNotFoundError as e:
        return _error_response(e, constants.HTTP_NOT_FOUND)
    return JSONResponse(content={"ordered": len(ordered_ids)})


@router.get("/products/{product_id}/week", response_model=WeekView)
async def get_week_view(product_id: str, value: str | None = Query(None, alias="date")) -> WeekView | JSONResponse:
    """Grouped objectives of the week containing date (default: today)."""
    try:
        return await objective_service.get_week_view(product_id, value or date.today())
    except InvalidDateError as e:
        return _error_response(e, constants.HTTP_UNPROCESSABLE)


@router.get("/shared-plan/{product}/{token}", response_model=SharedPlanView)
async def get_shared_plan(product: str, token: str, members: str | None = None) -> SharedPlanView | JSONResponse:
    """Plan of the week named by a "DD-MM-YYYY--to--DD-MM-YYYY" token.

    product is a product name as it appears in share links, or a product id.
    members is an optional comma-separated list of member ids.
    """
    match = await catalog_service.find_product(product)
    if match is None:
        return _error_response(db_client.RecordNotFoundError(f"No product named {product}"), constants.HTTP_NOT_FOUND)

    member_ids = [m.strip() for m in members.split(",") if m.strip()] if members else None
    return await objective_service.get_shared_plan(match.id, token, member_ids)


@router.post("/tasks/{task_id}/toggle", response_model=Objective)
async def toggle_task(task_id: str) -> Objective | JSONResponse:
    """Toggle a task's completion; failures are reported, never applied partially."""
    try:
        return await objective_service.toggle_task(task_id)
    except db_client.RecordNotFoundError as e:
        return _error_response(e, constants.HTTP_NOT_FOUND)
    except db_client.DatabaseError as e:
        logger.error("toggle_task_failed", extra={"task_id": task_id, "error": str(e)})
        return _error_response(e, constants.HTTP_SERVICE_UNAVAILABLE)


@router.get("/statistics/{product_id}/{week_id}")
async def get_statistics(product_id: str, week_id: str) -> WeekStatistics:
    """Completion statistics of a product week."""
    return await analytics_service.get_statistics(product_id, week_id)


@router.get("/plans/{product_id}/{week_id}")
async def get_plans(product_id: str, week_id: str) -> list[Plan]:
    """Per-assignee plans of a product week."""
    return await analytics_service.get_plans(product_id, week_id)


@router.get("/products")
async def list_products() -> list[Product]:
    """All products, by name."""
    return await catalog_service.get_products()


@router.get("/members")
async def list_members() -> list[Member]:
    """All team members, by name."""
    return await catalog_service.get_members()


@router.post("/products", response_model=Product)
async def create_product(product: ProductCreate) -> Product | JSONResponse:
    """Create a product, or return the existing one with that name."""
    try:
        return await catalog_service.create_product(name=product.name)
    except ValueError as e:
        return JSONResponse(content={"detail": str(e)}, status_code=constants.HTTP_UNPROCESSABLE)


@router.post("/members", response_model=Member)
async def create_member(member: MemberCreate) -> Member | JSONResponse:
    """Add a team member."""
    try:
        return await catalog_service.create_member(name=member.name, role=member.role, avatar=member.avatar)
    except ValueError as e:
        return JSONResponse(content={"detail": str(e)}, status_code=constants.HTTP_UNPROCESSABLE)
