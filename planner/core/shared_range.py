"""Shared-plan date range tokens: "DD-MM-YYYY--to--DD-MM-YYYY"."""

import logging
from datetime import date, datetime

from planner.core.config import constants
from planner.domain.week import DateRange


logger = logging.getLogger(__name__)

_DATE_PARTS = 3


def _parse_day(part: str) -> datetime | None:
    """Parse one "DD-MM-YYYY" side into a midnight datetime, or None."""
    components = part.split("-")
    if len(components) != _DATE_PARTS or not all(c.isascii() and c.isdigit() for c in components):
        return None

    day, month, year = (int(c) for c in components)
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_shared_range(token: str) -> DateRange | None:
    """Parse a shared-plan token into its boundary dates.

    Returns None when the token is malformed or either side is not a real
    calendar date; callers fall back to the current week.

    Example:
        parse_shared_range("01-01-2025--to--07-01-2025")
        -> DateRange(start=2025-01-01 00:00, end=2025-01-07 00:00)
    """
    sides = token.split(constants.SHARED_RANGE_SEPARATOR)
    if len(sides) != 2:  # noqa: PLR2004
        logger.debug("Malformed shared range token", extra={"token": token})
        return None

    start = _parse_day(sides[0])
    end = _parse_day(sides[1])
    if start is None or end is None:
        logger.debug("Invalid dates in shared range token", extra={"token": token})
        return None

    return DateRange(start=start, end=end)


def format_shared_range(start: date, end: date) -> str:
    """Build the shared-plan token for a date range."""
    return f"{start:%d-%m-%Y}{constants.SHARED_RANGE_SEPARATOR}{end:%d-%m-%Y}"
