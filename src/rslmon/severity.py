"""Fixed severity bands for RSL values.

Bands are link-independent: two links with the same reading always land
in the same band. Intervals are open at the bottom and closed at the top:

    too_strong   -45 < v <= -30
    optimal      -55 < v <= -45
    warning      -60 < v <= -55
    sub_optimal  -65 < v <= -60
    critical     everything else, including v > -30

Values stronger than -30 dBm fall through to critical. This keeps the
behaviour of the existing dashboards; an overload band has not been agreed.
"""

from enum import Enum
from typing import Iterable, Optional


class SeverityBand(str, Enum):
    """Link-independent signal quality category."""

    TOO_STRONG = "too_strong"
    OPTIMAL = "optimal"
    WARNING = "warning"
    SUB_OPTIMAL = "sub_optimal"
    CRITICAL = "critical"
    NO_DATA = "no_data"


# (band, lower bound exclusive, upper bound inclusive), checked in order
BAND_THRESHOLDS: list[tuple[SeverityBand, float, float]] = [
    (SeverityBand.TOO_STRONG, -45.0, -30.0),
    (SeverityBand.OPTIMAL, -55.0, -45.0),
    (SeverityBand.WARNING, -60.0, -55.0),
    (SeverityBand.SUB_OPTIMAL, -65.0, -60.0),
]

# Display order for distributions and legends
BAND_ORDER = [
    SeverityBand.TOO_STRONG,
    SeverityBand.OPTIMAL,
    SeverityBand.WARNING,
    SeverityBand.SUB_OPTIMAL,
    SeverityBand.CRITICAL,
]


def classify(value: Optional[float]) -> SeverityBand:
    """Assign a severity band to an RSL value.

    Args:
        value: RSL in dBm, or None when there is no reading

    Returns:
        SeverityBand; NO_DATA for None, CRITICAL for anything outside the
        defined bands
    """
    if value is None:
        return SeverityBand.NO_DATA

    for band, lower, upper in BAND_THRESHOLDS:
        if lower < value <= upper:
            return band

    return SeverityBand.CRITICAL


def band_distribution(values: Iterable[Optional[float]]) -> dict[SeverityBand, int]:
    """Count readings per band.

    None values are skipped. Bands are returned in display order and bands
    with no readings are omitted.
    """
    counts = {band: 0 for band in BAND_ORDER}
    for value in values:
        band = classify(value)
        if band is SeverityBand.NO_DATA:
            continue
        counts[band] += 1

    return {band: count for band, count in counts.items() if count > 0}
