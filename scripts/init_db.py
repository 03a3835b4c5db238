#!/usr/bin/env python3
"""
Initialize the RSL database and apply pending migrations.

With --vacuum, also compact the database and refresh its statistics
(useful after deleting many readings or links).

Usage:
    python scripts/init_db.py [--vacuum]
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rslmon.db import get_db_path, get_schema_version, init_db, vacuum_db
from rslmon import log


def main():
    args = sys.argv[1:]
    unknown = [arg for arg in args if arg != "--vacuum"]
    if unknown:
        print(f"Usage: {sys.argv[0]} [--vacuum]")
        sys.exit(1)

    init_db()
    if "--vacuum" in args:
        vacuum_db()
    log.info(f"Database ready at {get_db_path()} (schema v{get_schema_version()})")


if __name__ == "__main__":
    main()
