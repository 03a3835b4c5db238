"""Fixtures for chart tests."""

import pytest

from rslmon.charts import CHART_THEMES
from rslmon.pivot import build_pivot


@pytest.fixture
def light_theme():
    return CHART_THEMES["light"]


@pytest.fixture
def dark_theme():
    return CHART_THEMES["dark"]


@pytest.fixture
def pivot_rows(sample_links, sample_readings):
    return build_pivot(2025, sample_readings, sample_links)


@pytest.fixture
def empty_rows(sample_links):
    return build_pivot(2025, [], sample_links)
