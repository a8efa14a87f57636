"""Canonical week identity: Monday-start weeks keyed by their start date.

Every place that needs a week id or week boundaries goes through
week_identity_of(); ids are never built anywhere else.
"""

from datetime import date, datetime, time, timedelta

from planner.core.config import constants
from planner.core.errors import InvalidDateError
from planner.domain.week import WeekIdentity


END_OF_DAY = time(23, 59, 59, 999000)


def _as_datetime(value: date | datetime | str) -> datetime:
    """Coerce a supported date value to a datetime, raising InvalidDateError otherwise."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidDateError(f"Invalid date: {value!r}") from e
    raise InvalidDateError(f"Invalid date: {value!r}")


def week_id_for(start: date) -> str:
    """Format the week key of a Monday, e.g. 'week-2025-3-3' (month and day unpadded)."""
    return f"{constants.WEEK_ID_PREFIX}{start.year}-{start.month}-{start.day}"


def week_identity_of(value: date | datetime | str) -> WeekIdentity:
    """Return the canonical identity of the Monday-to-Sunday week containing value.

    Args:
        value: A date, a datetime (tzinfo is kept, never converted) or an ISO-8601 string

    Returns:
        WeekIdentity whose start is Monday 00:00 and end is Sunday 23:59:59.999

    Raises:
        InvalidDateError: If value is not a usable calendar date
    """
    dt = _as_datetime(value)

    try:
        monday = dt.date() - timedelta(days=dt.weekday())
        sunday = monday + timedelta(days=constants.DAYS_PER_WEEK - 1)
    except OverflowError as e:
        raise InvalidDateError(f"Date out of supported range: {value!r}") from e

    return WeekIdentity(
        id=week_id_for(monday),
        start=datetime.combine(monday, time.min, tzinfo=dt.tzinfo),
        end=datetime.combine(sunday, END_OF_DAY, tzinfo=dt.tzinfo),
    )


def current_week_identity() -> WeekIdentity:
    """Identity of the week containing the current local time."""
    return week_identity_of(datetime.now())


def week_label(start: date, end: date) -> str:
    """French label shown for a week, e.g. 'Semaine du 24/03/2025 au 30/03/2025'."""
    return f"Semaine du {start:%d/%m/%Y} au {end:%d/%m/%Y}"


def week_options(year: int) -> list[WeekIdentity]:
    """Identities of every week whose Monday falls in the given year."""
    jan_first = date(year, 1, 1)
    monday = jan_first + timedelta(days=(constants.DAYS_PER_WEEK - jan_first.weekday()) % constants.DAYS_PER_WEEK)

    options = []
    while monday.year == year:
        options.append(week_identity_of(monday))
        monday += timedelta(days=constants.DAYS_PER_WEEK)
    return options


def is_same_day(first: datetime, second: datetime) -> bool:
    """Day-level equality, time of day ignored."""
    return first.date() == second.date()


def wall_clock(value: datetime) -> datetime:
    """Local wall-clock reading of value; any UTC offset is dropped, not applied."""
    return value.replace(tzinfo=None)


def is_date_in_range(value: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive containment check on wall-clock time, so offset and naive values compare."""
    return wall_clock(start) <= wall_clock(value) <= wall_clock(end)


def week_range_from_id(week_id: str) -> WeekIdentity:
    """Inverse of week_id_for: the identity of the week keyed by week_id.

    Both the canonical 'week-2025-3-24' and the legacy zero-padded
    'week-2025-03-24' forms are accepted; the result always carries the
    canonical id.

    Raises:
        InvalidDateError: If week_id is not a week key or names an impossible date
    """
    if not week_id.startswith(constants.WEEK_ID_PREFIX):
        raise InvalidDateError(f"Invalid week id: {week_id!r}")

    parts = week_id.removeprefix(constants.WEEK_ID_PREFIX).split("-")
    if len(parts) != 3 or not all(part.isascii() and part.isdigit() for part in parts):
        raise InvalidDateError(f"Invalid week id: {week_id!r}")

    year, month, day = (int(part) for part in parts)
    try:
        start = date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"Invalid week id: {week_id!r}") from e

    return week_identity_of(start)
