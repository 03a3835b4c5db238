"""Fixtures for database tests."""

from datetime import date
from pathlib import Path

import pytest

from rslmon.models import Reading


@pytest.fixture
def db_path(tmp_state_dir):
    """Database path in temp state directory."""
    return tmp_state_dir / "rsl.db"


@pytest.fixture
def migrations_dir():
    """Path to actual migrations directory."""
    return Path(__file__).parent.parent.parent / "src" / "rslmon" / "migrations"


@pytest.fixture
def initialized_db(db_path, configured_env):
    """Fresh database with migrations applied."""
    from rslmon.db import init_db
    init_db(db_path)
    return db_path


@pytest.fixture
def directory(initialized_db):
    """Database with three towers and two links.

    A-B link "AB" and A-C link "AC".
    """
    from rslmon.db import create_link, create_tower

    a = create_tower("TowerA", "Hill 1", db_path=initialized_db)
    b = create_tower("TowerB", db_path=initialized_db)
    c = create_tower("TowerC", db_path=initialized_db)
    ab = create_link("AB", a.id, b.id, -60.0, -40.0, db_path=initialized_db)
    ac = create_link("AC", a.id, c.id, -55.0, -35.0, db_path=initialized_db)
    return {"db": initialized_db, "towers": (a, b, c), "links": (ab, ac)}


@pytest.fixture
def populated_db(directory):
    """Directory plus readings in 2024 and 2025."""
    from rslmon.db import upsert_reading

    db = directory["db"]
    ab, ac = directory["links"]
    for reading in [
        Reading(id=None, link_id=ab.id, date=date(2025, 1, 15), rsl_near_end=-42.0, rsl_far_end=-43.0),
        Reading(id=None, link_id=ab.id, date=date(2025, 3, 10), rsl_near_end=-62.0),
        Reading(id=None, link_id=ac.id, date=date(2025, 1, 20), rsl_near_end=-50.0),
        Reading(id=None, link_id=ac.id, date=date(2024, 6, 1), rsl_near_end=-48.0),
    ]:
        upsert_reading(reading, db)
    return directory
