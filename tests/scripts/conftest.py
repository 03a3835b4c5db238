"""Script-specific test fixtures."""

import importlib.util
import sys
from datetime import date
from pathlib import Path

import pytest

from rslmon.models import Reading

SCRIPTS_DIR = Path(__file__).parent.parent.parent / "scripts"

# Track dynamically loaded script modules for cleanup
_loaded_script_modules: set[str] = set()


def load_script_module(script_name: str):
    """Load a script as a module and track it for cleanup.

    Args:
        script_name: Name of script file (e.g., "render_reports.py")

    Returns:
        Loaded module object
    """
    script_path = SCRIPTS_DIR / script_name
    module_name = script_name.replace(".py", "")

    spec = importlib.util.spec_from_file_location(module_name, script_path)
    assert spec is not None, f"Could not load spec for {script_path}"
    assert spec.loader is not None, f"No loader for {script_path}"

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    _loaded_script_modules.add(module_name)

    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def cleanup_script_modules():
    """Remove dynamically loaded script modules after each test."""
    _loaded_script_modules.clear()
    yield
    for module_name in _loaded_script_modules:
        sys.modules.pop(module_name, None)


@pytest.fixture
def seeded_db(configured_env):
    """Default-path database with two links and a few 2025 readings."""
    from rslmon.db import create_link, create_tower, init_db, set_note, upsert_reading
    from rslmon.models import PeriodKey

    init_db()
    a = create_tower("TowerA")
    b = create_tower("TowerB")
    c = create_tower("TowerC")
    ab = create_link("AB", a.id, b.id, -60.0, -40.0)
    bc = create_link("BC", b.id, c.id, -65.0, -45.0)
    upsert_reading(Reading(id=None, link_id=ab.id, date=date(2025, 1, 15), rsl_near_end=-42.0))
    upsert_reading(Reading(id=None, link_id=ab.id, date=date(2025, 3, 10), rsl_near_end=-62.0))
    upsert_reading(Reading(id=None, link_id=bc.id, date=date(2025, 3, 12), rsl_near_end=-50.0))
    set_note(ab.id, PeriodKey(2025, 2), "radio swap")
    return configured_env
