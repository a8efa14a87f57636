"""Best-match lookup of a stored week range for externally supplied boundaries."""

from planner.core.week_identity import is_date_in_range, is_same_day, wall_clock
from planner.domain.week import DateRange, WeekRange


def resolve_week(records: list[WeekRange], target: DateRange) -> WeekRange | None:
    """Select the stored week that best matches the target boundaries.

    Priority: exact day match > range containing target.start > nearest start.
    The nearest match keeps the first record among equally distant ones.
    Boundaries are compared on wall-clock time, so records stored with a
    UTC offset match naive targets.

    Args:
        records: Stored week ranges, in the order they should be considered
        target: Boundaries to match

    Returns:
        Best matching record, or None only when records is empty
    """
    for record in records:
        if is_same_day(record.start_date, target.start) and is_same_day(record.end_date, target.end):
            return record

    for record in records:
        if is_date_in_range(target.start, record.start_date, record.end_date):
            return record

    if not records:
        return None

    target_start = wall_clock(target.start)
    return min(records, key=lambda record: abs(wall_clock(record.start_date) - target_start))
