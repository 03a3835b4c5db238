"""Domain model for towers, links, readings and derived summaries.

Stored entities (Tower, Link, Reading, Note) mirror the database rows.
Derived entities (PivotCell, LinkPivotRow, MonthlySummary, YearlySummary)
are produced by the pivot and summary modules and never persisted.

Missing readings are always represented as None, never as 0.0: zero dBm is
a legitimate (if unlikely) signal level.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Optional

if TYPE_CHECKING:
    from .anomaly import RangeStatus


class PeriodKey(NamedTuple):
    """Canonical (year, month) period identifier.

    Formatted strings such as "Jan-25" are produced only for display via
    label(); aggregation code always compares tuples.
    """

    year: int
    month: int

    @classmethod
    def of(cls, d: date) -> "PeriodKey":
        """Period containing a calendar day."""
        return cls(d.year, d.month)

    def label(self) -> str:
        """Short display label, e.g. "Jan-25"."""
        return f"{calendar.month_abbr[self.month]}-{self.year % 100:02d}"


def year_periods(year: int) -> list[PeriodKey]:
    """All twelve periods of a year, January through December."""
    return [PeriodKey(year, month) for month in range(1, 13)]


def validate_month(month: int) -> int:
    """Validate a month index (1-12)."""
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month!r}. Must be between 1 and 12")
    return month


class ReadingStatus(str, Enum):
    """Operational status recorded with a reading."""

    ACTIVE = "active"
    DISMANTLED = "dismantled"
    REMOVED = "removed"
    OBSTACLE = "obstacle"


# Legacy numeric codes used by bulk imports
READING_STATUS_CODES = {
    0: ReadingStatus.ACTIVE,
    1: ReadingStatus.DISMANTLED,
    2: ReadingStatus.REMOVED,
    3: ReadingStatus.OBSTACLE,
}


def parse_reading_status(value) -> ReadingStatus:
    """Normalize a status given as enum, name or numeric code.

    None maps to active. Unknown values raise ValueError.
    """
    if value is None:
        return ReadingStatus.ACTIVE
    if isinstance(value, ReadingStatus):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if value in READING_STATUS_CODES:
            return READING_STATUS_CODES[value]
        raise ValueError(f"Unknown reading status code: {value!r}")
    return ReadingStatus(str(value).strip().lower())


@dataclass(frozen=True)
class Tower:
    """A physical site hosting radio equipment."""

    id: int
    name: str
    location: Optional[str] = None


@dataclass(frozen=True)
class Link:
    """A point-to-point radio path between two towers.

    Attributes:
        id: Link id
        name: Display name
        near_end_tower_id: Tower id at the near end
        far_end_tower_id: Tower id at the far end
        expected_rsl_min: Lower bound of the expected operating range (dBm)
        expected_rsl_max: Upper bound of the expected operating range (dBm)
        near_end_tower: Near-end tower name, when known
        far_end_tower: Far-end tower name, when known
    """

    id: int
    name: str
    near_end_tower_id: int
    far_end_tower_id: int
    expected_rsl_min: float
    expected_rsl_max: float
    near_end_tower: Optional[str] = None
    far_end_tower: Optional[str] = None

    def touches_tower(self, tower: str) -> bool:
        """Return True if either end of the link is the named tower."""
        return tower in (self.near_end_tower, self.far_end_tower)


@dataclass(frozen=True)
class Reading:
    """A single RSL measurement for a link on a calendar day."""

    id: Optional[int]
    link_id: int
    date: date
    rsl_near_end: float
    rsl_far_end: Optional[float] = None
    status: ReadingStatus = ReadingStatus.ACTIVE

    @property
    def period(self) -> PeriodKey:
        return PeriodKey.of(self.date)


@dataclass(frozen=True)
class Note:
    """Free-text annotation for a link in a period."""

    link_id: int
    period: PeriodKey
    text: str


@dataclass(frozen=True)
class PivotCell:
    """One Link x Month cell of the pivot."""

    link_id: int
    period: PeriodKey
    value: Optional[float] = None
    note: Optional[str] = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


@dataclass
class LinkPivotRow:
    """Pivot row for one link: twelve cells in calendar order."""

    link_id: int
    link_name: str
    tower: Optional[str]
    far_end_tower: Optional[str]
    expected_rsl_min: float
    expected_rsl_max: float
    cells: list[PivotCell] = field(default_factory=list)

    @property
    def monthly_values(self) -> dict[PeriodKey, Optional[float]]:
        """Cell values keyed by period; absent months map to None."""
        return {cell.period: cell.value for cell in self.cells}

    @property
    def notes(self) -> dict[PeriodKey, str]:
        """Notes keyed by period; only periods that carry a note."""
        return {cell.period: cell.note for cell in self.cells if cell.note is not None}


@dataclass(frozen=True)
class LinkMonthly:
    """Monthly average and range verdict for one link."""

    link_id: int
    link_name: str
    avg_rsl: float
    status: "RangeStatus"
    warning_message: Optional[str] = None
    reading_count: int = 0


@dataclass
class TowerMonthly:
    """Links of one (near-end) tower for a month."""

    tower_name: str
    links: list[LinkMonthly] = field(default_factory=list)


@dataclass
class MonthlySummary:
    """Cross-link averages for a single month."""

    year: int
    month: int
    towers: list[TowerMonthly] = field(default_factory=list)

    @property
    def period(self) -> PeriodKey:
        return PeriodKey(self.year, self.month)

    @property
    def links(self) -> list[LinkMonthly]:
        """All link entries, flattened across towers."""
        return [link for tower in self.towers for link in tower.links]


@dataclass
class LinkYearly:
    """Monthly averages, yearly average and warnings for one link."""

    link_id: int
    link_name: str
    monthly_avg: dict[int, float] = field(default_factory=dict)
    yearly_avg: Optional[float] = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class TowerYearly:
    """Links of one (near-end) tower for a year."""

    tower_name: str
    links: list[LinkYearly] = field(default_factory=list)


@dataclass
class YearlySummary:
    """Per-link monthly roll-up for a full year."""

    year: int
    towers: list[TowerYearly] = field(default_factory=list)

    @property
    def links(self) -> list[LinkYearly]:
        """All link entries, flattened across towers."""
        return [link for tower in self.towers for link in tower.links]


@dataclass(frozen=True)
class TowerStats:
    """Link health counts for one tower in a month."""

    tower_name: str
    total_links: int
    avg_rsl: Optional[float]
    healthy_links: int
    warning_links: int
    critical_links: int
