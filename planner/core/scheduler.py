"""Scheduler for automated maintenance jobs."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from planner.core.config import settings
from planner.services import week_range_service


logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()

RECONCILE_JOB_ID = "week_reconciliation"


async def run_week_reconciliation() -> None:
    """Run one reconciliation pass, logging instead of raising so the job keeps its schedule."""
    try:
        report = await week_range_service.reconcile_week_ranges()
    except Exception:
        logger.exception("Week reconciliation job failed")
        return

    if report.changed:
        logger.info(
            "Week reconciliation changed records: %d corrected, %d created",
            len(report.corrected),
            len(report.created),
        )


def start_scheduler() -> None:
    """Start the scheduler and register all jobs.

    This should be called during FastAPI app startup. Calling it while the
    scheduler runs only refreshes the job.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        run_week_reconciliation,
        trigger=CronTrigger(hour=settings.reconcile_hour, minute=0),
        id=RECONCILE_JOB_ID,
        name="Reconcile Week Ranges",
        replace_existing=True,
    )
    logger.info(f"Scheduled week reconciliation job: daily at {settings.reconcile_hour}:00")

    if not scheduler.running:
        scheduler.start()


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown. The asyncio scheduler
    finishes shutting down on the next event loop iteration.
    """
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
