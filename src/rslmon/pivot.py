"""Link x Month pivot of RSL readings.

Each link becomes one row with exactly twelve cells (January..December of
the selected year), regardless of how many readings exist. A cell holds the
near-end RSL of the reading in that month, or None, plus any note recorded
for that link and month.
"""

import calendar
from typing import Any, Iterable, Optional, Union

from .annotations import NoteIndex, index_notes
from .models import Link, LinkPivotRow, Note, PeriodKey, PivotCell, Reading, year_periods
from .severity import SeverityBand, band_distribution, classify
from . import log

ALL_TOWERS = "all"


def filter_links(links: Iterable[Link], tower_filter: Optional[str] = None) -> list[Link]:
    """Restrict links to those touching a tower.

    Args:
        links: Links to filter
        tower_filter: Tower name matched against near and far end; None or
            "all" keeps every link

    Returns:
        Matching links in input order
    """
    if not tower_filter or tower_filter == ALL_TOWERS:
        return list(links)
    return [link for link in links if link.touches_tower(tower_filter)]


def _index_readings(
    year: int, readings: Iterable[Reading]
) -> dict[tuple[int, PeriodKey], Reading]:
    """Map (link_id, period) to the reading supplying the cell value.

    Readings outside the year are ignored. If a month has more than one
    reading, the latest-dated one is used.
    """
    index: dict[tuple[int, PeriodKey], Reading] = {}
    for reading in readings:
        if reading.date.year != year:
            continue
        key = (reading.link_id, reading.period)
        current = index.get(key)
        if current is None or reading.date > current.date:
            if current is not None:
                log.debug(
                    f"Link {reading.link_id} has several readings in "
                    f"{reading.period.label()}, using {reading.date.isoformat()}"
                )
            index[key] = reading
    return index


def build_pivot(
    year: int,
    readings: Iterable[Reading],
    links: Iterable[Link],
    notes: Optional[Union[NoteIndex, Iterable[Note]]] = None,
    tower_filter: Optional[str] = None,
) -> list[LinkPivotRow]:
    """Reshape readings into one twelve-month row per link.

    Args:
        year: Year to pivot
        readings: Reading history (other years are ignored)
        links: Links to produce rows for, in output order
        notes: Note index or Note records for the year
        tower_filter: Optional tower name restricting the links

    Returns:
        List of LinkPivotRow, one per selected link
    """
    if isinstance(notes, dict):
        note_index = notes
    else:
        note_index = index_notes(notes)

    reading_index = _index_readings(year, readings)
    periods = year_periods(year)

    rows = []
    for link in filter_links(links, tower_filter):
        cells = []
        for period in periods:
            reading = reading_index.get((link.id, period))
            cells.append(PivotCell(
                link_id=link.id,
                period=period,
                value=reading.rsl_near_end if reading is not None else None,
                note=note_index.get((link.id, period)),
            ))

        rows.append(LinkPivotRow(
            link_id=link.id,
            link_name=link.name,
            tower=link.near_end_tower,
            far_end_tower=link.far_end_tower,
            expected_rsl_min=link.expected_rsl_min,
            expected_rsl_max=link.expected_rsl_max,
            cells=cells,
        ))

    return rows


def cell_band(cell: PivotCell) -> SeverityBand:
    """Severity band used to colour a pivot cell."""
    return classify(cell.value)


def pivot_towers(rows: Iterable[LinkPivotRow]) -> list[str]:
    """Sorted unique tower names present in a pivot (for filter choices)."""
    return sorted({row.tower for row in rows if row.tower})


def pivot_band_distribution(rows: Iterable[LinkPivotRow]) -> dict[SeverityBand, int]:
    """Count cells per severity band across a pivot, ignoring empty cells."""
    return band_distribution(cell.value for row in rows for cell in row.cells)


def pivot_chart_series(rows: list[LinkPivotRow]) -> list[dict[str, Any]]:
    """Month-major series for a multi-line chart.

    Returns:
        Twelve dicts, one per month, each with a "month" abbreviation and
        one entry per link name holding the cell value or None
    """
    series: list[dict[str, Any]] = [
        {"month": calendar.month_abbr[month]} for month in range(1, 13)
    ]
    for row in rows:
        for cell in row.cells:
            series[cell.period.month - 1][row.link_name] = cell.value
    return series
