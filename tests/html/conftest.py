"""Fixtures for HTML rendering tests."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def reset_jinja_env():
    """Reset the cached Jinja2 environment between tests."""
    import rslmon.html

    rslmon.html._jinja_env = None
    yield
    rslmon.html._jinja_env = None


@pytest.fixture
def templates_dir():
    """Path to the packaged templates."""
    return Path(__file__).parent.parent.parent / "src" / "rslmon" / "templates"
