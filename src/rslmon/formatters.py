"""Shared formatting functions for display values."""

import calendar
import re
from datetime import date
from typing import Any, Optional

from .models import PeriodKey


def format_rsl(value: Optional[float], decimals: int = 1) -> str:
    """Format an RSL value in dBm, or "-" when absent."""
    if value is None:
        return "-"
    return f"{value:.{decimals}f} dBm"


def format_value(value: Any, decimals: int = 1) -> str:
    """Format a value for display."""
    if value is None:
        return "N/A"
    if isinstance(value, float):
        return f"{value:.{decimals}f}"
    return str(value)


def format_period(period: Optional[PeriodKey]) -> str:
    """Format a period as "Jan-25"."""
    if period is None:
        return "N/A"
    return PeriodKey(*period).label()


def format_month_name(month: int) -> str:
    """Full month name for a month index (1-12)."""
    return calendar.month_name[month]


def format_month_abbr(month: int) -> str:
    """Abbreviated month name for a month index (1-12)."""
    return calendar.month_abbr[month]


def format_date(d: Optional[date]) -> str:
    """Format a calendar day as YYYY-MM-DD."""
    if d is None:
        return "N/A"
    return d.isoformat()


def format_range(expected_min: float, expected_max: float) -> str:
    """Format an expected operating range, e.g. "-60 .. -40 dBm"."""
    return f"{expected_min:g} .. {expected_max:g} dBm"


def tower_slug(name: str) -> str:
    """File-name-safe form of a tower name.

    Runs of characters other than letters, digits, "_" and "-" become a
    single "-". A name with nothing usable left maps to "tower".
    """
    slug = re.sub(r"[^A-Za-z0-9_-]+", "-", name.strip()).strip("-")
    return slug or "tower"
