"""HTML rendering helpers using Jinja2 templates."""

import calendar
import shutil
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from .bands import get_band_config, get_band_label, get_range_status_label
from .env import get_config
from .formatters import format_period, format_range, format_rsl, format_value, tower_slug
from .models import LinkPivotRow, MonthlySummary, YearlySummary
from .pivot import cell_band, pivot_band_distribution
from .reports import report_metadata
from .summary import tower_stats, yearly_month_averages
from . import log


# Singleton Jinja2 environment
_jinja_env: Optional[Environment] = None


def get_jinja_env() -> Environment:
    """Get or create the singleton Jinja2 environment.

    Uses PackageLoader to load templates from src/rslmon/templates/
    with autoescape enabled for security.
    """
    global _jinja_env
    if _jinja_env is not None:
        return _jinja_env

    env = Environment(
        loader=PackageLoader("rslmon", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )

    # Register custom filters
    env.filters["format_rsl"] = format_rsl
    env.filters["format_value"] = format_value
    env.filters["format_period"] = format_period
    env.filters["range_status_label"] = get_range_status_label
    env.filters["tower_page"] = tower_page_name

    _jinja_env = env
    return env


def tower_page_name(tower: str) -> str:
    """File name of the pivot page filtered to one tower.

    The "tower-" prefix keeps these pages apart from index.html and the
    yearly pages whatever the tower is called.
    """
    return f"tower-{tower_slug(tower)}.html"


def build_pivot_table_data(rows: list[LinkPivotRow]) -> list[dict[str, Any]]:
    """Build template rows for the pivot table.

    Each cell carries its display text, band label and colours, and note.
    """
    decimals = get_config().report_decimals
    table_rows = []
    for row in rows:
        cells = []
        for cell in row.cells:
            band = cell_band(cell)
            config = get_band_config(band)
            cells.append({
                "period": cell.period.label(),
                "text": "-" if cell.value is None else f"{cell.value:.{decimals}f}",
                "band": band.value,
                "band_label": config.label,
                "color": config.color,
                "text_color": config.text_color,
                "note": cell.note,
            })
        table_rows.append({
            "link_name": row.link_name,
            "tower": row.tower or "",
            "far_end_tower": row.far_end_tower or "",
            "expected_range": format_range(row.expected_rsl_min, row.expected_rsl_max),
            "cells": cells,
        })
    return table_rows


def render_pivot_page(
    rows: list[LinkPivotRow],
    year: int,
    tower_filter: Optional[str] = None,
    towers: Optional[list[str]] = None,
    chart_prefix: Optional[str] = None,
) -> str:
    """Render the Link x Month pivot page.

    Args:
        rows: Pivot rows from build_pivot
        year: Pivot year
        tower_filter: Active tower filter, shown in the subtitle
        towers: Tower names for filter navigation
        chart_prefix: Relative path prefix of the rendered chart SVGs

    Returns:
        Rendered HTML string
    """
    env = get_jinja_env()
    distribution = pivot_band_distribution(rows)

    context = {
        "title": f"RSL Pivot {year}",
        "meta": report_metadata(),
        "css_path": "../",
        "year": year,
        "tower_filter": tower_filter if tower_filter and tower_filter != "all" else None,
        "towers": towers or [],
        "months": [calendar.month_abbr[m] for m in range(1, 13)],
        "rows": build_pivot_table_data(rows),
        "distribution": [
            {"label": get_band_label(band), "count": count,
             "color": get_band_config(band).chart_fill}
            for band, count in distribution.items()
        ],
        "chart_prefix": chart_prefix,
    }

    template = env.get_template("pivot.html")
    return template.render(**context)


def render_monthly_page(summary: MonthlySummary) -> str:
    """Render a monthly summary page with per-tower statistics."""
    env = get_jinja_env()

    context = {
        "title": f"{calendar.month_name[summary.month]} {summary.year}",
        "meta": report_metadata(),
        "css_path": "../../",
        "summary": summary,
        "period_label": summary.period.label(),
        "tower_stats": {s.tower_name: s for s in tower_stats(summary)},
    }

    template = env.get_template("monthly.html")
    return template.render(**context)


def render_yearly_page(summary: YearlySummary) -> str:
    """Render a yearly summary page."""
    env = get_jinja_env()

    rows = []
    for tower in summary.towers:
        for link in tower.links:
            rows.append({
                "tower": tower.tower_name,
                "link_name": link.link_name,
                "months": [link.monthly_avg.get(m) for m in range(1, 13)],
                "yearly_avg": link.yearly_avg,
                "warnings": link.warnings,
            })

    month_avgs = yearly_month_averages(summary)

    context = {
        "title": f"RSL {summary.year}",
        "meta": report_metadata(),
        "css_path": "../",
        "year": summary.year,
        "months": [calendar.month_abbr[m] for m in range(1, 13)],
        "rows": rows,
        "network_months": [month_avgs.get(m) for m in range(1, 13)],
    }

    template = env.get_template("yearly.html")
    return template.render(**context)


def copy_styles(out_dir: Optional[Path] = None) -> None:
    """Copy styles.css to output directory."""
    if out_dir is None:
        out_dir = get_config().out_dir
    src = Path(__file__).parent / "templates" / "styles.css"
    dst = out_dir / "styles.css"

    if src.exists():
        out_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
        log.debug(f"Copied {src} to {dst}")
    else:
        log.warn(f"styles.css not found at {src}")
