"""Tabular export of yearly pivots.

The export collaborator only serializes values that were already computed
by build_pivot. Missing readings are exported as empty cells, never as 0.
"""

import csv
import io
from typing import Any, Optional

from .formatters import tower_slug
from .models import LinkPivotRow


def pivot_to_table(rows: list[LinkPivotRow]) -> list[list[Any]]:
    """Flatten pivot rows into a header row plus one row per link.

    Columns: link, tower, far end, expected min/max, twelve month values
    (headed by their "Jan-25" style labels), then the notes of the row.
    """
    if not rows:
        return [["Link", "Tower", "Far End", "Expected Min", "Expected Max"]]

    periods = [cell.period for cell in rows[0].cells]
    header: list[Any] = ["Link", "Tower", "Far End", "Expected Min", "Expected Max"]
    header += [period.label() for period in periods]
    header.append("Notes")

    table = [header]
    for row in rows:
        notes = "; ".join(
            f"{cell.period.label()}: {cell.note}" for cell in row.cells if cell.note is not None
        )
        table.append([
            row.link_name,
            row.tower or "",
            row.far_end_tower or "",
            row.expected_rsl_min,
            row.expected_rsl_max,
            *["" if cell.value is None else cell.value for cell in row.cells],
            notes,
        ])
    return table


def export_yearly_csv(rows: list[LinkPivotRow]) -> bytes:
    """Serialize a yearly pivot as UTF-8 CSV (with BOM for spreadsheets)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerows(pivot_to_table(rows))
    return buffer.getvalue().encode("utf-8-sig")


def export_filename(year: int, tower_filter: Optional[str] = None) -> str:
    """File name for an exported pivot, e.g. RSL_History_2025_TowerA.csv.

    The tower name is reduced with tower_slug so it is always a plain file
    name.
    """
    suffix = f"_{tower_slug(tower_filter)}" if tower_filter and tower_filter != "all" else ""
    return f"RSL_History_{year}{suffix}.csv"
