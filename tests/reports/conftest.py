"""Fixtures for report formatting tests."""

import pytest

from rslmon.models import PeriodKey
from rslmon.pivot import build_pivot
from rslmon.summary import summarize_month, summarize_year


@pytest.fixture
def pivot_rows(sample_links, sample_readings):
    """2025 pivot with a note on L1 February (no reading that month)."""
    notes = {(1, PeriodKey(2025, 2)): "radio replaced"}
    return build_pivot(2025, sample_readings, sample_links, notes)


@pytest.fixture
def march_summary(sample_links, sample_readings):
    return summarize_month(2025, 3, sample_readings, sample_links)


@pytest.fixture
def yearly_summary(sample_links, sample_readings):
    return summarize_year(2025, sample_readings, sample_links)
