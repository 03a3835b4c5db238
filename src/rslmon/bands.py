"""Centralized band and range-status display configuration.

This module is the single source of truth for how severity bands and range
verdicts are presented:
- Display labels
- Table cell background / text colours (hex, without #)
- Chart fill colours

It only maps enum members to presentation attributes. Nothing in rslmon
derives a band or verdict back from a colour or label.
"""

from dataclasses import dataclass

from .anomaly import RangeStatus
from .severity import SeverityBand


@dataclass(frozen=True)
class BandConfig:
    """Configuration for displaying a severity band.

    Attributes:
        label: Human-readable label for tables and legends
        color: Cell background colour
        text_color: Cell text colour
        chart_fill: Fill colour for distribution charts
    """
    label: str
    color: str
    text_color: str
    chart_fill: str


BAND_CONFIG: dict[SeverityBand, BandConfig] = {
    SeverityBand.TOO_STRONG: BandConfig(
        label="Too Strong",
        color="fecaca",
        text_color="991b1b",
        chart_fill="ef4444",
    ),
    SeverityBand.OPTIMAL: BandConfig(
        label="Optimal",
        color="bbf7d0",
        text_color="166534",
        chart_fill="10b981",
    ),
    SeverityBand.WARNING: BandConfig(
        label="Warning",
        color="fef08a",
        text_color="854d0e",
        chart_fill="f59e0b",
    ),
    SeverityBand.SUB_OPTIMAL: BandConfig(
        label="Sub-optimal",
        color="fed7aa",
        text_color="9a3412",
        chart_fill="fb923c",
    ),
    SeverityBand.CRITICAL: BandConfig(
        label="Critical",
        color="fca5a5",
        text_color="7f1d1d",
        chart_fill="dc2626",
    ),
    SeverityBand.NO_DATA: BandConfig(
        label="No Data",
        color="f3f4f6",
        text_color="9ca3af",
        chart_fill="d1d5db",
    ),
}


RANGE_STATUS_LABELS: dict[RangeStatus, str] = {
    RangeStatus.NORMAL: "Normal",
    RangeStatus.WARNING_HIGH: "Above Range",
    RangeStatus.WARNING_LOW: "Below Range",
}


def get_band_config(band: SeverityBand) -> BandConfig:
    """Get display configuration for a band."""
    return BAND_CONFIG[band]


def get_band_label(band: SeverityBand) -> str:
    """Get human-readable label for a band."""
    return BAND_CONFIG[band].label


def get_band_color(band: SeverityBand) -> str:
    """Get cell background colour for a band."""
    return BAND_CONFIG[band].color


def get_band_fill(band: SeverityBand) -> str:
    """Get chart fill colour for a band."""
    return BAND_CONFIG[band].chart_fill


def get_range_status_label(status: RangeStatus) -> str:
    """Get human-readable label for a range verdict.

    Args:
        status: RangeStatus member or its string value

    Returns:
        Display label
    """
    return RANGE_STATUS_LABELS[RangeStatus(status)]
