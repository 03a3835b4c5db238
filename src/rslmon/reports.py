"""Report formatting for pivots and period summaries.

This module turns already-computed pivots and summaries into:
- fixed-width ASCII tables (TXT)
- JSON-serializable dicts

No aggregation happens here; see pivot.py and summary.py. Missing values
are rendered as "-" in text output and as null in JSON.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .bands import get_band_label, get_range_status_label
from .env import get_config
from .models import LinkPivotRow, MonthlySummary, TowerStats, YearlySummary
from .pivot import cell_band, pivot_band_distribution
from .summary import tower_stats


def _round(val: Optional[float], decimals: int = 4) -> Optional[float]:
    return round(val, decimals) if val is not None else None


# --- Fixed-width column formatting ---


@dataclass
class Column:
    """Define a fixed-width column for ASCII table formatting."""

    width: int
    align: str = "right"  # "left", "right", or "center"
    decimals: int = 1  # For float formatting

    def format(self, value: Any) -> str:
        """Format a value to fit this column width."""
        if value is None:
            text = "-"
        elif isinstance(value, float):
            text = f"{value:.{self.decimals}f}"
        else:
            text = str(value)

        if len(text) > self.width - 1 and self.align == "left":
            text = text[:self.width - 2] + "~"

        if self.align == "left":
            return text.ljust(self.width)
        elif self.align == "center":
            return text.center(self.width)
        else:  # right
            return text.rjust(self.width)


def _format_row(columns: list[Column], values: list[Any]) -> str:
    """Format a row of values using column specs."""
    return "".join(col.format(val) for col, val in zip(columns, values)).rstrip()


def _format_separator(columns: list[Column], char: str = "-") -> str:
    """Generate a separator line matching total width."""
    return char * sum(col.width for col in columns)


def _header_lines(title: str, width: int) -> list[str]:
    cfg = get_config()
    return [
        title.center(width).rstrip(),
        "",
        f"ORGANIZATION: {cfg.report_org_name}",
        f"NETWORK: {cfg.report_network_name}",
        "",
    ]


def _month_columns(decimals: int) -> list[Column]:
    return [Column(7, decimals=decimals) for _ in range(12)]


def format_pivot_txt(rows: list[LinkPivotRow], year: int) -> str:
    """Format a Link x Month pivot as a text table.

    Cells with a note are marked with "*"; the notes are listed below the
    table.

    Args:
        rows: Pivot rows from build_pivot
        year: Pivot year

    Returns:
        Formatted text report string
    """
    decimals = get_config().report_decimals
    cols = [
        Column(18, align="left"),   # LINK
        Column(14, align="left"),   # TOWER
        Column(6, decimals=0),      # MIN
        Column(6, decimals=0),      # MAX
    ] + _month_columns(decimals)

    lines = _header_lines(f"RSL PIVOT for {year}", sum(c.width for c in cols))
    lines.append(_format_row(cols, [
        "LINK", "TOWER", "MIN", "MAX",
        *[calendar.month_abbr[m].upper() for m in range(1, 13)],
    ]))
    lines.append(_format_separator(cols))

    note_lines = []
    for row in rows:
        values: list[Any] = [row.link_name, row.tower, row.expected_rsl_min, row.expected_rsl_max]
        for cell in row.cells:
            if cell.value is None:
                text = "-" if cell.note is None else "-*"
            else:
                text = f"{cell.value:.{decimals}f}" + ("*" if cell.note is not None else "")
            values.append(text)
            if cell.note is not None:
                note_lines.append(f"  {row.link_name} {cell.period.label()}: {cell.note}")
        lines.append(_format_row(cols, values))

    lines.append(_format_separator(cols))

    distribution = pivot_band_distribution(rows)
    if distribution:
        lines.append("BANDS: " + ", ".join(
            f"{get_band_label(band)} {count}" for band, count in distribution.items()
        ))

    if note_lines:
        lines.append("")
        lines.append("NOTES:")
        lines.extend(note_lines)

    return "\n".join(lines)


def format_monthly_txt(summary: MonthlySummary) -> str:
    """Format a monthly summary as a text report, grouped by tower.

    Args:
        summary: Monthly summary from summarize_month

    Returns:
        Formatted text report string
    """
    decimals = get_config().report_decimals
    cols = [
        Column(22, align="left"),   # LINK
        Column(10, decimals=decimals),  # AVG
        Column(6),                  # N
        Column(14, align="center"), # STATUS
    ]
    width = sum(c.width for c in cols)
    title = f"MONTHLY RSL REPORT for {calendar.month_name[summary.month]} {summary.year}"
    lines = _header_lines(title, width)

    if not summary.towers:
        lines.append("No readings for this month.")
        return "\n".join(lines)

    stats_by_tower = {s.tower_name: s for s in tower_stats(summary)}
    warnings = []

    for tower in summary.towers:
        stats = stats_by_tower[tower.tower_name]
        lines.append(f"TOWER: {tower.tower_name}")
        lines.append(_format_row(cols, ["LINK", "AVG dBm", "N", "STATUS"]))
        lines.append(_format_separator(cols))
        for link in tower.links:
            lines.append(_format_row(cols, [
                link.link_name,
                link.avg_rsl,
                link.reading_count,
                get_range_status_label(link.status),
            ]))
            if link.warning_message:
                warnings.append(link.warning_message)
        lines.append(_format_separator(cols))
        lines.append(_format_row(cols, ["AVG", stats.avg_rsl, stats.total_links, ""]))
        lines.append("")

    if warnings:
        lines.append("WARNINGS:")
        lines.extend(f"  {w}" for w in warnings)

    return "\n".join(lines).rstrip()


def format_yearly_txt(summary: YearlySummary) -> str:
    """Format a yearly summary as a text report.

    One row per link with its monthly averages and the yearly average of
    the months that have data.

    Args:
        summary: Yearly summary from summarize_year

    Returns:
        Formatted text report string
    """
    decimals = get_config().report_decimals
    cols = [
        Column(14, align="left"),   # TOWER
        Column(18, align="left"),   # LINK
    ] + _month_columns(decimals) + [
        Column(8, decimals=decimals),  # YEAR
    ]
    width = sum(c.width for c in cols)
    lines = _header_lines(f"YEARLY RSL REPORT for {summary.year}", width)

    lines.append(_format_row(cols, [
        "TOWER", "LINK",
        *[calendar.month_abbr[m].upper() for m in range(1, 13)],
        "YEAR",
    ]))
    lines.append(_format_separator(cols))

    warnings = []
    for tower in summary.towers:
        for link in tower.links:
            lines.append(_format_row(cols, [
                tower.tower_name,
                link.link_name,
                *[link.monthly_avg.get(m) for m in range(1, 13)],
                link.yearly_avg,
            ]))
            warnings.extend(link.warnings)

    lines.append(_format_separator(cols))

    if warnings:
        lines.append("")
        lines.append("WARNINGS:")
        lines.extend(f"  {w}" for w in warnings)

    return "\n".join(lines)


def pivot_to_json(rows: list[LinkPivotRow], year: int) -> dict[str, Any]:
    """Convert pivot rows to a JSON-serializable dict.

    Args:
        rows: Pivot rows from build_pivot
        year: Pivot year

    Returns:
        JSON-serializable dict
    """
    return {
        "report_type": "pivot",
        "year": year,
        "links": [
            {
                "link_id": row.link_id,
                "link_name": row.link_name,
                "tower": row.tower,
                "far_end_tower": row.far_end_tower,
                "expected_rsl_min": row.expected_rsl_min,
                "expected_rsl_max": row.expected_rsl_max,
                "cells": [
                    {
                        "month": cell.period.month,
                        "label": cell.period.label(),
                        "value": cell.value,
                        "band": cell_band(cell).value,
                        "note": cell.note,
                    }
                    for cell in row.cells
                ],
            }
            for row in rows
        ],
        "band_distribution": {
            band.value: count for band, count in pivot_band_distribution(rows).items()
        },
    }


def _tower_stats_to_dict(stats: TowerStats) -> dict[str, Any]:
    return {
        "tower_name": stats.tower_name,
        "total_links": stats.total_links,
        "avg_rsl": _round(stats.avg_rsl),
        "healthy_links": stats.healthy_links,
        "warning_links": stats.warning_links,
        "critical_links": stats.critical_links,
    }


def monthly_to_json(summary: MonthlySummary) -> dict[str, Any]:
    """Convert a monthly summary to a JSON-serializable dict.

    Args:
        summary: Monthly summary

    Returns:
        JSON-serializable dict
    """
    return {
        "report_type": "monthly",
        "year": summary.year,
        "month": summary.month,
        "period": summary.period.label(),
        "towers": [
            {
                "tower_name": tower.tower_name,
                "links": [
                    {
                        "link_id": link.link_id,
                        "link_name": link.link_name,
                        "avg_rsl": _round(link.avg_rsl),
                        "status": link.status.value,
                        "warning_message": link.warning_message,
                        "reading_count": link.reading_count,
                    }
                    for link in tower.links
                ],
            }
            for tower in summary.towers
        ],
        "tower_stats": [_tower_stats_to_dict(s) for s in tower_stats(summary)],
    }


def yearly_to_json(summary: YearlySummary) -> dict[str, Any]:
    """Convert a yearly summary to a JSON-serializable dict.

    Month keys are zero-padded month numbers ("01".."12"); months without
    data are absent.

    Args:
        summary: Yearly summary

    Returns:
        JSON-serializable dict
    """
    return {
        "report_type": "yearly",
        "year": summary.year,
        "towers": [
            {
                "tower_name": tower.tower_name,
                "links": [
                    {
                        "link_id": link.link_id,
                        "link_name": link.link_name,
                        "monthly_avg": {
                            f"{month:02d}": _round(avg)
                            for month, avg in link.monthly_avg.items()
                        },
                        "yearly_avg": _round(link.yearly_avg),
                        "warnings": list(link.warnings),
                    }
                    for link in tower.links
                ],
            }
            for tower in summary.towers
        ],
    }


def report_metadata(now: Optional[datetime] = None) -> dict[str, str]:
    """Common metadata attached to rendered reports."""
    cfg = get_config()
    now = now or datetime.now()
    return {
        "organization": cfg.report_org_name,
        "network": cfg.report_network_name,
        "generated_at": now.strftime("%Y-%m-%d %H:%M"),
    }
