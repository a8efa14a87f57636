"""weekplanner - weekly objectives and tasks per product."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from planner.core.config import settings
from planner.core.db_client import close_connection, init_db
from planner.core.logging import configure_logfire, instrument_fastapi, log_with_context
from planner.core.scheduler import start_scheduler, stop_scheduler
from planner.domain.week import WeekIdentity
from planner.interface.router import router as planner_router
from planner.services import week_range_service
from planner.services.week_context import WeekContext


logger = logging.getLogger(__name__)


def _log_week_selection(week: WeekIdentity) -> None:
    log_with_context(logger, "info", "Selected week changed", week_id=week.id)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    app.state.week_context = WeekContext()
    app.state.week_context.subscribe(_log_week_selection)

    await init_db()
    logger.info("Database initialized")

    if settings.reconcile_on_startup:
        await week_range_service.reconcile_week_ranges()

    start_scheduler()
    yield
    # Shutdown
    stop_scheduler()
    await close_connection()


app = FastAPI(
    title="weekplanner",
    description="Weekly objectives and tasks per product",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(planner_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
