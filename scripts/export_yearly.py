#!/usr/bin/env python3
"""
Export a yearly Link x Month pivot as CSV.

Usage:
    python scripts/export_yearly.py YEAR [TOWER]
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rslmon.db import list_links, list_readings, notes_for_year
from rslmon.env import get_config
from rslmon.export import export_filename, export_yearly_csv
from rslmon.pivot import build_pivot
from rslmon import log


def main():
    if len(sys.argv) < 2:
        print(f"Usage: {sys.argv[0]} YEAR [TOWER]")
        sys.exit(1)

    try:
        year = int(sys.argv[1])
    except ValueError:
        print(f"Invalid year: {sys.argv[1]}")
        sys.exit(1)
    tower = sys.argv[2] if len(sys.argv) > 2 else None

    cfg = get_config()
    links = list_links(tower)
    rows = build_pivot(year, list_readings(year), links, notes_for_year(year), tower_filter=tower)

    out_path = cfg.out_dir / export_filename(year, tower)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(export_yearly_csv(rows))
    log.info(f"Exported {len(rows)} links to {out_path}")


if __name__ == "__main__":
    main()
