"""Pytest configuration and fixtures for unit tests."""

from datetime import datetime

import pytest

from planner.core.week_identity import week_identity_of, week_label
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches planner.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("planner.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("planner.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("planner.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("planner.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("planner.core.db_client.delete_records", in_memory_db.delete_records)
    monkeypatch.setattr("planner.core.db_client.list_records", in_memory_db.list_records)
    monkeypatch.setattr("planner.core.db_client.get_first_record", in_memory_db.get_first_record)

    return in_memory_db


@pytest.fixture
def seed_week(patched_db):
    """Stores a canonical week record for the week containing a date."""

    def _seed(value: datetime | str) -> dict:
        identity = week_identity_of(value)
        return patched_db.seed(
            "week_ranges",
            identity.id,
            {
                "start_date": identity.start,
                "end_date": identity.end,
                "label": week_label(identity.start, identity.end),
            },
        )

    return _seed


@pytest.fixture
def sample_objective_data():
    """Returns sample objective data for testing."""
    return {
        "product_id": "prod1",
        "week_id": "week-2025-3-24",
        "title": "Ship onboarding flow",
        "is_urgent": True,
        "is_important": True,
        "assignees": ["alice"],
    }
