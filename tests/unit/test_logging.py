"""Tests for the structured logging helpers."""

import logging

import pytest

from planner.core.logging import log_with_context


@pytest.mark.unit
def test_context_fields_land_on_the_record(caplog):
    logger = logging.getLogger("planner.services.week_range_service")

    with caplog.at_level(logging.INFO):
        log_with_context(logger, "info", "Week reconciliation complete", checked=3, corrected_count=1)

    record = caplog.records[-1]
    assert record.getMessage() == "Week reconciliation complete"
    assert record.checked == 3
    assert record.corrected_count == 1


@pytest.mark.unit
def test_level_name_is_case_insensitive(caplog):
    logger = logging.getLogger("planner.main")

    with caplog.at_level(logging.WARNING):
        log_with_context(logger, "WARNING", "Selected week changed", week_id="week-2025-3-24")

    assert caplog.records[-1].levelno == logging.WARNING
    assert caplog.records[-1].week_id == "week-2025-3-24"
