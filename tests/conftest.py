"""Root fixtures for all tests."""

import os
from datetime import date

import pytest

from rslmon.models import Link, Reading


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clear rslmon env vars and reset config singleton before each test."""
    env_prefixes = (
        "RSL_",
        "REPORT_",
        "DEFAULT_RSL_",
        "STATE_DIR",
        "OUT_DIR",
    )

    for key in list(os.environ.keys()):
        for prefix in env_prefixes:
            if key.startswith(prefix):
                monkeypatch.delenv(key, raising=False)
                break

    # Reset config singleton
    import rslmon.env

    rslmon.env._config = None

    yield

    # Reset again after test
    rslmon.env._config = None


@pytest.fixture
def tmp_state_dir(tmp_path):
    """Create temp directory for state files (DB)."""
    state_dir = tmp_path / "state"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def tmp_out_dir(tmp_path):
    """Create temp directory for rendered output."""
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    return out_dir


@pytest.fixture
def configured_env(tmp_state_dir, tmp_out_dir, monkeypatch):
    """Set up test environment with temp directories."""
    monkeypatch.setenv("STATE_DIR", str(tmp_state_dir))
    monkeypatch.setenv("OUT_DIR", str(tmp_out_dir))
    # Reset config to pick up new values
    import rslmon.env

    rslmon.env._config = None
    return {"state_dir": tmp_state_dir, "out_dir": tmp_out_dir}


@pytest.fixture
def sample_links():
    """Three links across two near-end towers."""
    return [
        Link(
            id=1, name="L1", near_end_tower_id=1, far_end_tower_id=2,
            expected_rsl_min=-60.0, expected_rsl_max=-40.0,
            near_end_tower="TowerA", far_end_tower="TowerB",
        ),
        Link(
            id=2, name="L2", near_end_tower_id=1, far_end_tower_id=3,
            expected_rsl_min=-55.0, expected_rsl_max=-35.0,
            near_end_tower="TowerA", far_end_tower="TowerC",
        ),
        Link(
            id=3, name="L3", near_end_tower_id=2, far_end_tower_id=3,
            expected_rsl_min=-65.0, expected_rsl_max=-45.0,
            near_end_tower="TowerB", far_end_tower="TowerC",
        ),
    ]


@pytest.fixture
def sample_readings():
    """Readings for 2025 plus one stray reading from 2024.

    L1: Jan -42 (normal), Mar -62 (below range)
    L2: Jan -50, Feb -48
    L3: no readings
    """
    return [
        Reading(id=1, link_id=1, date=date(2025, 1, 15), rsl_near_end=-42.0, rsl_far_end=-43.0),
        Reading(id=2, link_id=1, date=date(2025, 3, 10), rsl_near_end=-62.0, rsl_far_end=-61.5),
        Reading(id=3, link_id=2, date=date(2025, 1, 20), rsl_near_end=-50.0),
        Reading(id=4, link_id=2, date=date(2025, 2, 5), rsl_near_end=-48.0),
        Reading(id=5, link_id=1, date=date(2024, 12, 31), rsl_near_end=-70.0),
    ]
