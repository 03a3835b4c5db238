#!/usr/bin/env python3
"""
Render RSL reports from the SQLite database.

For every year with readings (or the years given on the command line),
renders the Link x Month pivot (overall and per tower), the yearly summary
and one monthly summary per month with data, in HTML, TXT and JSON.

Output structure:
    out/reports/
        styles.css
        2025/
            index.html         # Pivot, all towers (HTML)
            tower-<slug>.html  # Pivot filtered to one tower
            pivot.txt          # Pivot (TXT)
            pivot.json         # Pivot (JSON)
            yearly.html        # Yearly summary (HTML)
            yearly.txt         # Yearly summary (TXT)
            yearly.json        # Yearly summary (JSON)
            assets/            # SVG charts
            03/
                index.html     # Monthly summary (HTML)
                report.txt     # Monthly summary (TXT)
                report.json    # Monthly summary (JSON)

Usage:
    python scripts/render_reports.py [YEAR ...]
"""

import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rslmon.charts import render_all_charts
from rslmon.db import get_available_years, init_db, list_links, list_readings, notes_for_year
from rslmon.env import get_config
from rslmon.html import (
    copy_styles,
    render_monthly_page,
    render_pivot_page,
    render_yearly_page,
    tower_page_name,
)
from rslmon.pivot import build_pivot, pivot_towers
from rslmon.reports import (
    format_monthly_txt,
    format_pivot_txt,
    format_yearly_txt,
    monthly_to_json,
    pivot_to_json,
    yearly_to_json,
)
from rslmon.summary import summarize_month, summarize_year
from rslmon import log


def safe_write(path: Path, content: str) -> bool:
    """Write content to file with error handling.

    Args:
        path: File path to write to
        content: Content to write

    Returns:
        True if write succeeded, False otherwise
    """
    try:
        path.write_text(content)
        return True
    except IOError as e:
        log.error(f"Failed to write {path}: {e}")
        return False


def render_year(year: int) -> int:
    """Render all reports for a year.

    Returns:
        Number of monthly reports written
    """
    cfg = get_config()
    out_dir = cfg.out_dir / "reports" / str(year)
    out_dir.mkdir(parents=True, exist_ok=True)

    links = list_links()
    readings = list_readings(year)
    notes = notes_for_year(year)

    log.info(f"Building {year} pivot for {len(links)} links ({len(readings)} readings)...")
    rows = build_pivot(year, readings, links, notes)
    towers = pivot_towers(rows)

    render_all_charts(rows, year, out_dir / "assets")
    safe_write(out_dir / "index.html", render_pivot_page(rows, year, towers=towers, chart_prefix="assets/"))
    safe_write(out_dir / "pivot.txt", format_pivot_txt(rows, year))
    safe_write(out_dir / "pivot.json", json.dumps(pivot_to_json(rows, year), indent=2))

    for tower in towers:
        tower_rows = build_pivot(year, readings, links, notes, tower_filter=tower)
        safe_write(out_dir / tower_page_name(tower), render_pivot_page(tower_rows, year, tower, towers))

    yearly = summarize_year(year, readings, links)
    safe_write(out_dir / "yearly.html", render_yearly_page(yearly))
    safe_write(out_dir / "yearly.txt", format_yearly_txt(yearly))
    safe_write(out_dir / "yearly.json", json.dumps(yearly_to_json(yearly), indent=2))

    months_with_data = sorted({m for link in yearly.links for m in link.monthly_avg})
    for month in months_with_data:
        monthly = summarize_month(year, month, readings, links)
        month_dir = out_dir / f"{month:02d}"
        month_dir.mkdir(parents=True, exist_ok=True)
        safe_write(month_dir / "index.html", render_monthly_page(monthly))
        safe_write(month_dir / "report.txt", format_monthly_txt(monthly))
        safe_write(month_dir / "report.json", json.dumps(monthly_to_json(monthly), indent=2))
        log.debug(f"Wrote monthly report: {month_dir}")

    return len(months_with_data)


def main():
    """Generate RSL reports."""
    init_db()
    cfg = get_config()

    if len(sys.argv) > 1:
        try:
            years = [int(arg) for arg in sys.argv[1:]]
        except ValueError:
            print(f"Usage: {sys.argv[0]} [YEAR ...]")
            sys.exit(1)
    else:
        years = get_available_years()

    if not years:
        log.warn("No readings in database, nothing to render")
        return

    copy_styles(cfg.out_dir / "reports")

    total_monthly = 0
    for year in years:
        total_monthly += render_year(year)

    log.info(f"Rendered {len(years)} yearly and {total_monthly} monthly reports")


if __name__ == "__main__":
    main()
