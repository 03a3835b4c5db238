"""Range anomaly detection against a link's expected operating range.

Unlike the fixed severity bands, the verdict here is relative to each
link's own configured range [expected_rsl_min, expected_rsl_max]. Both
bounds are inclusive.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ConfigurationError
from .models import Link, PeriodKey


class RangeStatus(str, Enum):
    """Verdict of comparing an average against a link's expected range."""

    NORMAL = "normal"
    WARNING_HIGH = "warning_high"
    WARNING_LOW = "warning_low"


@dataclass(frozen=True)
class RangeVerdict:
    """Result of range anomaly detection."""

    status: RangeStatus
    message: Optional[str] = None

    @property
    def is_normal(self) -> bool:
        return self.status is RangeStatus.NORMAL


def _fmt_dbm(value: float) -> str:
    return f"{value:.1f} dBm"


def detect(
    avg: float,
    expected_min: float,
    expected_max: float,
    subject: Optional[str] = None,
) -> RangeVerdict:
    """Compare an average RSL with an expected range.

    A NaN average is reported as below range, matching classify(), which
    treats it as critical.

    Args:
        avg: Average RSL in dBm
        expected_min: Lower bound (inclusive)
        expected_max: Upper bound (inclusive)
        subject: Optional prefix for the message (link name, period)

    Returns:
        RangeVerdict; message is None when the average is within range
    """
    prefix = f"{subject}: " if subject else ""

    if math.isnan(avg):
        return RangeVerdict(
            RangeStatus.WARNING_LOW,
            f"{prefix}RSL average is not a number "
            f"(min {_fmt_dbm(expected_min)})",
        )

    if avg > expected_max:
        return RangeVerdict(
            RangeStatus.WARNING_HIGH,
            f"{prefix}RSL {_fmt_dbm(avg)} is stronger than expected "
            f"(max {_fmt_dbm(expected_max)})",
        )
    if avg < expected_min:
        return RangeVerdict(
            RangeStatus.WARNING_LOW,
            f"{prefix}RSL {_fmt_dbm(avg)} is weaker than expected "
            f"(min {_fmt_dbm(expected_min)})",
        )
    return RangeVerdict(RangeStatus.NORMAL)


def validate_link(link: Link) -> Link:
    """Check the directory invariants the detector relies on.

    Raises:
        ConfigurationError: If the range is empty or inverted, or both ends
            point at the same tower
    """
    if link.near_end_tower_id == link.far_end_tower_id:
        raise ConfigurationError(
            f"Link {link.name!r} (id={link.id}) has identical near and far "
            f"end towers (tower id={link.near_end_tower_id})"
        )
    if not link.expected_rsl_min < link.expected_rsl_max:
        raise ConfigurationError(
            f"Link {link.name!r} (id={link.id}) has invalid expected range: "
            f"min {link.expected_rsl_min} must be below max {link.expected_rsl_max}"
        )
    return link


def detect_for_link(
    avg: float,
    link: Link,
    period: Optional[PeriodKey] = None,
) -> RangeVerdict:
    """Run detection for a link, refusing links with a broken configuration.

    Args:
        avg: Average RSL in dBm
        link: Link supplying the expected range
        period: Optional period, included in the warning message

    Returns:
        RangeVerdict

    Raises:
        ConfigurationError: If the link fails validate_link
    """
    validate_link(link)
    subject = link.name if period is None else f"{link.name} {period.label()}"
    return detect(avg, link.expected_rsl_min, link.expected_rsl_max, subject=subject)
