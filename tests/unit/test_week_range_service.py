"""Unit tests for week_range_service module."""

from datetime import date, datetime

import pytest

from planner.core import db_client
from planner.core.config import settings
from planner.core.week_identity import current_week_identity, week_identity_of
from planner.domain.create_models import WeekRangeCreate
from planner.domain.week import DateRange, WeekRange
from planner.services import week_range_service


def _store_week(db, week_id: str, start: datetime, end: datetime, label: str = "") -> None:
    db.seed("week_ranges", week_id, {"start_date": start, "end_date": end, "label": label})


@pytest.mark.unit
class TestComputeCorrection:
    """Tests for compute_correction."""

    def test_canonical_record_needs_nothing(self):
        identity = week_identity_of(date(2025, 3, 24))
        record = WeekRange(id=identity.id, start_date=identity.start, end_date=identity.end)

        assert week_range_service.compute_correction(record) is None

    def test_padded_id_is_corrected(self):
        record = WeekRange(
            id="week-2025-03-24",
            start_date=datetime(2025, 3, 24),
            end_date=datetime(2025, 3, 30, 23, 59, 59, 999000),
        )

        correction = week_range_service.compute_correction(record)

        assert correction is not None
        assert correction.id == "week-2025-3-24"

    def test_patch_carries_all_canonical_fields(self):
        """A record starting midweek is moved back to its Monday, end included."""
        record = WeekRange(
            id="week-2025-3-26",
            start_date=datetime(2025, 3, 26, 9, 0),
            end_date=datetime(2025, 4, 1),
        )

        correction = week_range_service.compute_correction(record)

        assert correction.id == "week-2025-3-24"
        assert correction.start_date == datetime(2025, 3, 24)
        assert correction.end_date == datetime(2025, 3, 30, 23, 59, 59, 999000)

    def test_truncated_end_is_corrected(self):
        record = WeekRange(id="week-2025-3-24", start_date=datetime(2025, 3, 24), end_date=datetime(2025, 3, 30))

        correction = week_range_service.compute_correction(record)

        assert correction.id == "week-2025-3-24"
        assert correction.end_date == datetime(2025, 3, 30, 23, 59, 59, 999000)


@pytest.mark.unit
class TestWeekRangeStore:
    """Tests for week range store access."""

    async def test_get_week_ranges_newest_first(self, patched_db, seed_week):
        seed_week("2025-03-03")
        seed_week("2025-03-24")
        seed_week("2025-03-10")

        weeks = await week_range_service.get_week_ranges()

        assert [week.id for week in weeks] == ["week-2025-3-24", "week-2025-3-10", "week-2025-3-3"]

    async def test_get_week_range_by_id_missing(self, patched_db):
        assert await week_range_service.get_week_range_by_id("week-2025-3-24") is None

    async def test_create_week_range_uses_week_id(self, patched_db):
        identity = week_identity_of(date(2025, 3, 24))

        week = await week_range_service.create_week_range(
            WeekRangeCreate(id=identity.id, start_date=identity.start, end_date=identity.end, label="W13")
        )

        assert week.id == "week-2025-3-24"
        assert "week-2025-3-24" in patched_db.all("week_ranges")

    async def test_create_week_range_duplicate_raises(self, patched_db, seed_week):
        seed_week("2025-03-24")
        identity = week_identity_of(date(2025, 3, 24))

        with pytest.raises(db_client.DatabaseError):
            await week_range_service.create_week_range(
                WeekRangeCreate(id=identity.id, start_date=identity.start, end_date=identity.end, label="")
            )

    async def test_update_week_range_rekeys(self, patched_db):
        _store_week(patched_db, "week-2025-03-24", datetime(2025, 3, 24), datetime(2025, 3, 30))

        week = await week_range_service.update_week_range("week-2025-03-24", {"id": "week-2025-3-24"})

        assert week.id == "week-2025-3-24"
        assert set(patched_db.all("week_ranges")) == {"week-2025-3-24"}


@pytest.mark.unit
class TestEnsureWeekExists:
    """Tests for ensure_week_exists."""

    async def test_creates_missing_week(self, patched_db):
        week = await week_range_service.ensure_week_exists(date(2025, 3, 27))

        assert week.id == "week-2025-3-24"
        assert week.start_date == datetime(2025, 3, 24)
        assert week.label == "Semaine du 24/03/2025 au 30/03/2025"

    async def test_second_call_creates_nothing(self, patched_db):
        await week_range_service.ensure_week_exists(date(2025, 3, 24))
        await week_range_service.ensure_week_exists(date(2025, 3, 30))

        assert list(patched_db.all("week_ranges")) == ["week-2025-3-24"]

    async def test_existing_record_returned_untouched(self, patched_db):
        _store_week(patched_db, "week-2025-3-24", datetime(2025, 3, 24), datetime(2025, 3, 30), label="custom")

        week = await week_range_service.ensure_week_exists(date(2025, 3, 25))

        assert week.end_date == datetime(2025, 3, 30)
        assert week.label == "custom"
        assert patched_db.update_calls == []

    async def test_concurrent_creation_returns_winner(self, monkeypatch, patched_db):
        """A create that loses the race re-reads the record written by the other writer."""

        async def create_after_other_writer(collection, data, record_id=None):
            patched_db.seed(collection, record_id, data)
            raise db_client.DatabaseError("UNIQUE constraint failed")

        monkeypatch.setattr("planner.core.db_client.create_record", create_after_other_writer)

        week = await week_range_service.ensure_week_exists(date(2025, 3, 24))

        assert week.id == "week-2025-3-24"

    async def test_store_failure_propagates(self, monkeypatch, patched_db):
        async def failing_create(collection, data, record_id=None):
            raise db_client.DatabaseError("disk full")

        monkeypatch.setattr("planner.core.db_client.create_record", failing_create)

        with pytest.raises(db_client.DatabaseError, match="disk full"):
            await week_range_service.ensure_week_exists(date(2025, 3, 24))


@pytest.mark.unit
class TestReconcileWeekRanges:
    """Tests for reconcile_week_ranges."""

    async def test_empty_store_creates_seed_week(self, patched_db):
        report = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24))

        assert report.created == ["week-2025-3-24"]
        assert report.corrected == []
        stored = patched_db.all("week_ranges")["week-2025-3-24"]
        assert stored["end_date"] == datetime(2025, 3, 30, 23, 59, 59, 999000)

    async def test_default_seed_comes_from_settings(self, monkeypatch, patched_db):
        monkeypatch.setattr(settings, "seed_week_date", date(2025, 6, 11))
        monkeypatch.setattr(settings, "seed_year", None)

        report = await week_range_service.reconcile_week_ranges()

        assert report.created == ["week-2025-6-9"]

    async def test_drifted_record_is_corrected_and_rekeyed(self, patched_db):
        _store_week(
            patched_db,
            "week-2025-03-24",
            datetime(2025, 3, 24),
            datetime(2025, 3, 30),
            label="Semaine du 24/03/2025 au 30/03/2025",
        )

        report = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24))

        assert report.checked == 1
        assert report.corrected == ["week-2025-3-24"]
        assert report.created == []
        stored = patched_db.all("week_ranges")
        assert list(stored) == ["week-2025-3-24"]
        assert stored["week-2025-3-24"]["end_date"] == datetime(2025, 3, 30, 23, 59, 59, 999000)
        assert stored["week-2025-3-24"]["label"] == "Semaine du 24/03/2025 au 30/03/2025"

    async def test_correction_is_a_single_full_write(self, patched_db):
        _store_week(patched_db, "week-2025-3-26", datetime(2025, 3, 26), datetime(2025, 4, 1))

        await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24))

        assert len(patched_db.update_calls) == 1
        _, record_id, data = patched_db.update_calls[0]
        assert record_id == "week-2025-3-26"
        assert set(data) == {"id", "start_date", "end_date"}

    async def test_second_pass_changes_nothing(self, patched_db):
        _store_week(patched_db, "week-2025-03-10", datetime(2025, 3, 10), datetime(2025, 3, 16))

        first = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24))
        snapshot = patched_db.all("week_ranges")
        second = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24))

        assert first.changed
        assert not second.changed
        assert second.checked == 2
        assert {k: (v["start_date"], v["end_date"]) for k, v in patched_db.all("week_ranges").items()} == {
            k: (v["start_date"], v["end_date"]) for k, v in snapshot.items()
        }

    async def test_conflicting_canonical_id_is_skipped(self, patched_db, seed_week):
        seed_week("2025-03-24")
        _store_week(patched_db, "week-2025-03-24", datetime(2025, 3, 24), datetime(2025, 3, 30))

        report = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24))

        assert report.skipped == ["week-2025-03-24"]
        assert report.corrected == []
        assert set(patched_db.all("week_ranges")) == {"week-2025-3-24", "week-2025-03-24"}

    async def test_failed_update_is_skipped_and_pass_continues(self, patched_db, seed_week):
        seed_week("2025-03-24")
        _store_week(patched_db, "week-2025-03-03", datetime(2025, 3, 3), datetime(2025, 3, 9))
        _store_week(patched_db, "week-2025-03-10", datetime(2025, 3, 10), datetime(2025, 3, 16))
        patched_db.failing_updates.add("week-2025-03-03")

        report = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24))

        assert report.skipped == ["week-2025-03-03"]
        assert report.corrected == ["week-2025-3-10"]
        stored = patched_db.all("week_ranges")
        assert stored["week-2025-03-03"]["end_date"] == datetime(2025, 3, 9)

    async def test_seed_year_creates_every_week(self, patched_db):
        report = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24), seed_year=2025)

        assert len(report.created) == 52
        assert len(set(report.created)) == 52
        assert report.created[0] == "week-2025-3-24"

    async def test_seed_year_pass_is_idempotent(self, patched_db):
        await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24), seed_year=2025)

        second = await week_range_service.reconcile_week_ranges(seed_date=date(2025, 3, 24), seed_year=2025)

        assert not second.changed
        assert second.checked == 52


@pytest.mark.unit
class TestResolveSharedWeek:
    """Tests for resolve_shared_week and resolve_week_for_range."""

    async def test_exact_match(self, patched_db, seed_week):
        seed_week("2025-03-17")
        seed_week("2025-03-24")

        week, resolved = await week_range_service.resolve_shared_week("24-03-2025--to--30-03-2025")

        assert resolved is True
        assert week.id == "week-2025-3-24"

    async def test_drifted_record_found_by_containment(self, patched_db):
        _store_week(patched_db, "week-2025-3-23", datetime(2025, 3, 23, 23, 0), datetime(2025, 3, 30, 22, 59))

        week, resolved = await week_range_service.resolve_shared_week("24-03-2025--to--30-03-2025")

        assert resolved is True
        assert week.id == "week-2025-3-23"

    async def test_unreadable_token_falls_back_to_current_week(self, patched_db):
        week, resolved = await week_range_service.resolve_shared_week("not-a-range")

        assert resolved is False
        assert week.id == current_week_identity().id

    async def test_no_stored_weeks_creates_canonical_week(self, patched_db):
        week = await week_range_service.resolve_week_for_range(
            DateRange(start=datetime(2025, 3, 26), end=datetime(2025, 4, 1))
        )

        assert week.id == "week-2025-3-24"
        assert "week-2025-3-24" in patched_db.all("week_ranges")
