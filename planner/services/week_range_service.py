"""Week range service: store access, reconciliation and resolution of week records.

Week records are keyed by their canonical id (see planner.core.week_identity).
Records can drift from the canonical boundaries through manual edits or legacy
data; reconcile_week_ranges() brings them back in line and makes sure the
required seed week exists. The pass is idempotent and safe to overlap with
reads: every correction is a single-document update.
"""

import logging
from datetime import date, datetime
from typing import Any

from planner.core import db_client
from planner.core.config import settings
from planner.core.logging import log_with_context, span
from planner.core.shared_range import parse_shared_range
from planner.core.week_identity import week_identity_of, week_label, week_options
from planner.core.week_resolver import resolve_week
from planner.domain.create_models import WeekRangeCreate
from planner.domain.update_models import WeekRangeCorrection
from planner.domain.week import DateRange, WeekIdentity, WeekRange
from planner.models.service_models import ReconciliationReport


logger = logging.getLogger(__name__)

COLLECTION = "week_ranges"


async def get_week_ranges() -> list[WeekRange]:
    """Get every stored week range, newest first."""
    with span("week_range_service.get_week_ranges"):
        records = await db_client.list_all_records(collection=COLLECTION, sort="-start_date")
        return [WeekRange(**record) for record in records]


async def get_week_range_by_id(week_id: str) -> WeekRange | None:
    """Get a week range by its id, or None when it does not exist."""
    try:
        record = await db_client.get_record(collection=COLLECTION, record_id=week_id)
    except db_client.RecordNotFoundError:
        return None
    return WeekRange(**record)


async def create_week_range(week: WeekRangeCreate) -> WeekRange:
    """Create a week range record under its own id.

    Raises:
        db_client.DatabaseError: If the id is already taken or the store fails
    """
    record = await db_client.create_record(
        collection=COLLECTION,
        data=week.model_dump(exclude={"id"}),
        record_id=week.id,
    )
    logger.info("Created week range %s (%s)", week.id, week.label)
    return WeekRange(**record)


async def update_week_range(week_id: str, patch: WeekRangeCorrection | dict[str, Any]) -> WeekRange:
    """Apply a patch to a week range in one store write.

    A patch carrying a different id re-keys the record.
    """
    data = patch.model_dump() if isinstance(patch, WeekRangeCorrection) else patch
    record = await db_client.update_record(collection=COLLECTION, record_id=week_id, data=data)
    return WeekRange(**record)


def _create_payload(identity: WeekIdentity) -> WeekRangeCreate:
    return WeekRangeCreate(
        id=identity.id,
        start_date=identity.start,
        end_date=identity.end,
        label=week_label(identity.start, identity.end),
    )


def compute_correction(record: WeekRange) -> WeekRangeCorrection | None:
    """Return the canonical id/boundaries for a drifted record, or None when it is canonical.

    The canonical week is derived from the record's own start date. The patch
    always carries all three fields so a record is either fully corrected or
    left as-is.
    """
    canonical = week_identity_of(record.start_date)
    if (
        record.id == canonical.id
        and record.start_date == canonical.start
        and record.end_date == canonical.end
    ):
        return None

    return WeekRangeCorrection(id=canonical.id, start_date=canonical.start, end_date=canonical.end)


async def ensure_week_exists(value: date | datetime | str) -> WeekRange:
    """Return the week record containing value, creating it when missing.

    An existing record is returned untouched, even if it drifted.

    Raises:
        InvalidDateError: If value is not a usable date
        db_client.DatabaseError: If the record cannot be created
    """
    identity = week_identity_of(value)

    with span("week_range_service.ensure_week_exists"):
        existing = await get_week_range_by_id(identity.id)
        if existing is not None:
            return existing

        try:
            return await create_week_range(_create_payload(identity))
        except db_client.DatabaseError:
            # Another writer may have created it in between
            existing = await get_week_range_by_id(identity.id)
            if existing is not None:
                return existing
            raise


async def reconcile_week_ranges(
    *,
    seed_date: date | None = None,
    seed_year: int | None = None,
) -> ReconciliationReport:
    """Correct drifted week records and create the required weeks that are missing.

    Individual failures are logged and skipped; the pass always continues.

    Args:
        seed_date: A date inside the week that must exist (default: settings.seed_week_date)
        seed_year: Year whose weeks must all exist (default: settings.seed_year)

    Returns:
        ReconciliationReport describing what the pass changed
    """
    seed_date = seed_date or settings.seed_week_date
    seed_year = seed_year if seed_year is not None else settings.seed_year
    report = ReconciliationReport()

    with span("week_range_service.reconcile_week_ranges"):
        records = await get_week_ranges()
        known_ids = {record.id for record in records}

        for record in records:
            report.checked += 1
            correction = compute_correction(record)
            if correction is None:
                continue

            if correction.id != record.id and correction.id in known_ids:
                logger.warning(
                    "Skipping week range %s: canonical id %s already exists",
                    record.id,
                    correction.id,
                )
                report.skipped.append(record.id)
                continue

            try:
                await update_week_range(record.id, correction)
            except Exception:
                logger.exception("Failed to correct week range %s", record.id)
                report.skipped.append(record.id)
                continue

            known_ids.discard(record.id)
            known_ids.add(correction.id)
            report.corrected.append(correction.id)
            logger.info("Corrected week range %s -> %s", record.id, correction.id)

        required = [week_identity_of(seed_date)]
        if seed_year is not None:
            required.extend(week_options(seed_year))

        for identity in required:
            if identity.id in known_ids:
                continue
            try:
                await create_week_range(_create_payload(identity))
            except Exception:
                logger.exception("Failed to create week range %s", identity.id)
                report.skipped.append(identity.id)
                continue
            known_ids.add(identity.id)
            report.created.append(identity.id)

        log_with_context(
            logger,
            "info",
            "Week reconciliation complete",
            checked=report.checked,
            corrected_count=len(report.corrected),
            created_count=len(report.created),
            skipped_count=len(report.skipped),
        )
        return report


async def resolve_week_for_range(target: DateRange) -> WeekRange:
    """Find the stored week that best matches target, creating its canonical week when none exist."""
    records = await get_week_ranges()
    match = resolve_week(records, target)
    if match is not None:
        return match
    return await ensure_week_exists(target.start)


async def resolve_shared_week(token: str) -> tuple[WeekRange, bool]:
    """Resolve the week named by a shared-plan token.

    Returns:
        Tuple of (week, resolved_from_token); an unreadable token falls back to the current week
    """
    with span("week_range_service.resolve_shared_week"):
        target = parse_shared_range(token)
        if target is None:
            logger.info("Unreadable shared range token %r, using current week", token)
            return await ensure_week_exists(datetime.now()), False
        return await resolve_week_for_range(target), True
