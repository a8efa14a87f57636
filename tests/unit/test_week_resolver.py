"""Unit tests for week resolution against stored records."""

from datetime import datetime, timedelta, timezone

import pytest

from planner.core.week_resolver import resolve_week
from planner.domain.week import DateRange, WeekRange


def _week(week_id: str, start: datetime, end: datetime) -> WeekRange:
    return WeekRange(id=week_id, start_date=start, end_date=end)


@pytest.mark.unit
class TestResolveWeek:
    """Tests for resolve_week."""

    def test_empty_records(self):
        target = DateRange(start=datetime(2025, 3, 24), end=datetime(2025, 3, 30))

        assert resolve_week([], target) is None

    def test_exact_day_match_wins_over_containment(self):
        """A record spanning the target start loses to one with the same boundary days."""
        wide = _week("wide", datetime(2025, 3, 20), datetime(2025, 4, 5))
        exact = _week("week-2025-3-24", datetime(2025, 3, 24), datetime(2025, 3, 30, 23, 59, 59, 999000))
        target = DateRange(start=datetime(2025, 3, 24), end=datetime(2025, 3, 30))

        assert resolve_week([wide, exact], target) is exact

    def test_containment_of_target_start(self):
        drifted = _week("week-2025-3-23", datetime(2025, 3, 23), datetime(2025, 3, 29, 23, 59))
        other = _week("week-2025-3-31", datetime(2025, 3, 31), datetime(2025, 4, 6, 23, 59))
        target = DateRange(start=datetime(2025, 3, 24), end=datetime(2025, 3, 30))

        assert resolve_week([other, drifted], target) is drifted

    def test_containment_is_inclusive_of_start(self):
        record = _week("w", datetime(2025, 3, 24), datetime(2025, 3, 29))
        target = DateRange(start=datetime(2025, 3, 24), end=datetime(2025, 3, 31))

        assert resolve_week([record], target) is record

    def test_nearest_start_fallback(self):
        far = _week("far", datetime(2025, 1, 6), datetime(2025, 1, 12))
        near = _week("near", datetime(2025, 3, 10), datetime(2025, 3, 16))
        target = DateRange(start=datetime(2025, 3, 24), end=datetime(2025, 3, 30))

        assert resolve_week([far, near], target) is near

    def test_nearest_considers_later_records(self):
        before = _week("before", datetime(2025, 3, 3), datetime(2025, 3, 9))
        after = _week("after", datetime(2025, 4, 7), datetime(2025, 4, 13))
        target = DateRange(start=datetime(2025, 4, 1), end=datetime(2025, 4, 6))

        assert resolve_week([before, after], target) is after

    def test_nearest_tie_keeps_first_record(self):
        first = _week("first", datetime(2025, 3, 17), datetime(2025, 3, 18))
        second = _week("second", datetime(2025, 3, 31), datetime(2025, 4, 1))
        target = DateRange(start=datetime(2025, 3, 24), end=datetime(2025, 3, 30))

        assert resolve_week([first, second], target) is first
        assert resolve_week([second, first], target) is second

    def test_always_returns_a_record_when_non_empty(self):
        lone = _week("lone", datetime(2020, 1, 6), datetime(2020, 1, 12))
        target = DateRange(start=datetime(2030, 1, 7), end=datetime(2030, 1, 13))

        assert resolve_week([lone], target) is lone


PARIS_WINTER = timezone(timedelta(hours=1))


@pytest.mark.unit
class TestResolveWeekWithOffsets:
    """Stored weeks carrying a UTC offset against naive shared-plan boundaries."""

    def _offset_week(self) -> WeekRange:
        return _week(
            "week-2025-3-24",
            datetime(2025, 3, 24, tzinfo=PARIS_WINTER),
            datetime(2025, 3, 30, 23, 59, 59, 999000, tzinfo=PARIS_WINTER),
        )

    def test_exact_day_match(self):
        record = self._offset_week()
        target = DateRange(start=datetime(2025, 3, 24), end=datetime(2025, 3, 30))

        assert resolve_week([record], target) is record

    def test_containment_uses_wall_clock(self):
        record = self._offset_week()
        target = DateRange(start=datetime(2025, 3, 26), end=datetime(2025, 3, 27))

        assert resolve_week([record], target) is record

    def test_nearest_start_across_offsets(self):
        offset = self._offset_week()
        naive = _week("week-2025-1-13", datetime(2025, 1, 13), datetime(2025, 1, 19, 23, 59, 59, 999000))
        target = DateRange(start=datetime(2025, 1, 1), end=datetime(2025, 1, 7))

        assert resolve_week([offset, naive], target) is naive
        assert resolve_week([offset], target) is offset

    def test_offset_target_against_naive_records(self):
        record = _week("week-2025-3-24", datetime(2025, 3, 24), datetime(2025, 3, 30, 23, 59, 59, 999000))
        target = DateRange(
            start=datetime(2025, 3, 25, 8, tzinfo=PARIS_WINTER), end=datetime(2025, 3, 25, 9, tzinfo=PARIS_WINTER)
        )

        assert resolve_week([record], target) is record
