"""SQLite storage for towers, links, readings and notes.

This module is the reference implementation of the collaborators the
aggregation core works against:
- Reading Repository: list_readings, upsert_reading, delete_reading
- Tower/Link Directory: list_towers, list_links, create_tower, create_link,
  update_tower, update_link, delete_tower, delete_link
- Annotation Store: get_note, set_note, notes_for_year (SqliteAnnotationStore)

Schema design:
- At most one reading per (link_id, date), enforced by a UNIQUE constraint
- Link invariants (distinct endpoints, min < max) checked before each write and
  backed by CHECK constraints
- Notes keyed by (link_id, year, month), independent of readings
- STRICT tables, foreign keys with ON DELETE CASCADE from links/towers

Migration system:
- Schema version tracked in db_meta table
- Migrations stored as SQL files in src/rslmon/migrations/
- Files named: NNN_description.sql (e.g., 001_initial_schema.sql)
- Applied in order on database init

Read failures surface as DataFetchError; the aggregation code never
catches them.
"""

import sqlite3
import time
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterator, Optional, Union

from .annotations import NoteIndex, normalize_note
from .anomaly import validate_link
from .env import get_config
from .errors import DataFetchError, DuplicateReadingError, NotFoundError
from .models import Link, PeriodKey, Reading, Tower, parse_reading_status, validate_month
from . import log


# Path to migrations directory (relative to this file)
MIGRATIONS_DIR = Path(__file__).parent / "migrations"

DateRange = tuple[date, date]


# =============================================================================
# File-based Migration System
# =============================================================================


def _get_migration_files() -> list[tuple[int, Path]]:
    """Get all migration files sorted by version number.

    Returns:
        List of (version, path) tuples sorted by version
    """
    if not MIGRATIONS_DIR.exists():
        return []

    migrations = []
    for sql_file in MIGRATIONS_DIR.glob("*.sql"):
        # Extract version number from filename (e.g., "001_initial.sql" -> 1)
        try:
            version_str = sql_file.stem.split("_")[0]
            version = int(version_str)
            migrations.append((version, sql_file))
        except (ValueError, IndexError):
            log.warn(f"Skipping invalid migration filename: {sql_file.name}")
            continue

    return sorted(migrations, key=lambda x: x[0])


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from database.

    Returns 0 if db_meta table doesn't exist (fresh database).
    """
    try:
        cursor = conn.execute(
            "SELECT value FROM db_meta WHERE key = 'schema_version'"
        )
        row = cursor.fetchone()
        return int(row[0]) if row else 0
    except sqlite3.OperationalError:
        # db_meta table doesn't exist
        return 0


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set schema version in database."""
    conn.execute(
        """
        INSERT OR REPLACE INTO db_meta (key, value)
        VALUES ('schema_version', ?)
        """,
        (str(version),)
    )


def _apply_migrations(conn: sqlite3.Connection) -> None:
    """Apply pending migrations from SQL files."""
    current_version = _get_schema_version(conn)
    migrations = _get_migration_files()

    if not migrations:
        raise RuntimeError(
            f"No migration files found in {MIGRATIONS_DIR}. "
            "Expected at least 001_initial_schema.sql"
        )

    for version, sql_file in migrations:
        if version <= current_version:
            continue

        log.info(f"Applying migration {sql_file.name}")
        try:
            sql_content = sql_file.read_text()
            conn.executescript(sql_content)
            _set_schema_version(conn, version)
            conn.commit()
            log.debug(f"Migration {version} applied successfully")
        except Exception as e:
            conn.rollback()
            raise RuntimeError(
                f"Migration {sql_file.name} failed: {e}"
            ) from e


def get_schema_version(db_path: Optional[Path] = None) -> int:
    """Get current schema version from database.

    Returns:
        Current schema version, or 0 if database doesn't exist
    """
    if db_path is None:
        db_path = get_db_path()
    if not db_path.exists():
        return 0

    with get_connection(db_path, readonly=True) as conn:
        return _get_schema_version(conn)


# =============================================================================
# Database Connection & Initialization
# =============================================================================


def get_db_path() -> Path:
    """Get database file path."""
    cfg = get_config()
    return cfg.state_dir / "rsl.db"


def init_db(db_path: Optional[Path] = None) -> None:
    """Initialize database with schema and apply pending migrations.

    Safe to call multiple times.

    Args:
        db_path: Optional path override (for testing)
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")

        _apply_migrations(conn)
        conn.commit()

        version = _get_schema_version(conn)
        log.debug(f"Database initialized at {db_path} (schema v{version})")

    finally:
        conn.close()


@contextmanager
def get_connection(
    db_path: Optional[Path] = None,
    readonly: bool = False
) -> Iterator[sqlite3.Connection]:
    """Context manager for database connections.

    Args:
        db_path: Optional path override
        readonly: If True, open in read-only mode

    Yields:
        sqlite3.Connection with Row factory and foreign keys enabled
    """
    if db_path is None:
        db_path = get_db_path()

    if readonly:
        uri = f"file:{db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
    else:
        conn = sqlite3.connect(db_path)

    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")

    try:
        yield conn
        if not readonly:
            conn.commit()
    except Exception:
        if not readonly:
            conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def _fetching(what: str) -> Iterator[None]:
    """Translate storage errors during reads into DataFetchError."""
    try:
        yield
    except sqlite3.Error as e:
        raise DataFetchError(f"Failed to fetch {what}: {e}") from e


# =============================================================================
# Tower/Link Directory
# =============================================================================


def _row_to_tower(row: sqlite3.Row) -> Tower:
    return Tower(id=row["id"], name=row["name"], location=row["location"])


def _row_to_link(row: sqlite3.Row) -> Link:
    return Link(
        id=row["id"],
        name=row["name"],
        near_end_tower_id=row["near_end_tower_id"],
        far_end_tower_id=row["far_end_tower_id"],
        expected_rsl_min=row["expected_rsl_min"],
        expected_rsl_max=row["expected_rsl_max"],
        near_end_tower=row["near_end_tower"],
        far_end_tower=row["far_end_tower"],
    )


def create_tower(
    name: str,
    location: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> Tower:
    """Insert a tower.

    Raises:
        ValueError: If the name is empty or already used
    """
    name = name.strip()
    if not name:
        raise ValueError("Tower name must not be empty")

    try:
        with get_connection(db_path) as conn:
            cursor = conn.execute(
                "INSERT INTO towers (name, location) VALUES (?, ?)",
                (name, location)
            )
            tower_id = cursor.lastrowid
    except sqlite3.IntegrityError as e:
        raise ValueError(f"Tower {name!r} already exists") from e

    log.debug(f"Created tower {name!r} (id={tower_id})")
    return Tower(id=tower_id, name=name, location=location)


def list_towers(db_path: Optional[Path] = None) -> list[Tower]:
    """List all towers ordered by name."""
    with _fetching("towers"), get_connection(db_path, readonly=True) as conn:
        cursor = conn.execute("SELECT id, name, location FROM towers ORDER BY name")
        return [_row_to_tower(row) for row in cursor.fetchall()]


def update_tower(
    tower_id: int,
    name: Optional[str] = None,
    location: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> Tower:
    """Rename a tower or change its location.

    Fields left as None keep their stored value.

    Raises:
        NotFoundError: If no tower has this id
        ValueError: If the new name is empty or already used
    """
    with get_connection(db_path) as conn:
        row = conn.execute(
            "SELECT id, name, location FROM towers WHERE id = ?", (tower_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Tower {tower_id} not found")

        current = _row_to_tower(row)
        new_name = current.name if name is None else name.strip()
        if not new_name:
            raise ValueError("Tower name must not be empty")
        new_location = current.location if location is None else location

        try:
            conn.execute(
                "UPDATE towers SET name = ?, location = ? WHERE id = ?",
                (new_name, new_location, tower_id)
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Tower {new_name!r} already exists") from e

    log.debug(f"Updated tower {tower_id} ({new_name!r})")
    return Tower(id=tower_id, name=new_name, location=new_location)


def delete_tower(tower_id: int, db_path: Optional[Path] = None) -> None:
    """Delete a tower and, by cascade, its links, readings and notes.

    Raises:
        NotFoundError: If no tower has this id
    """
    with get_connection(db_path) as conn:
        cursor = conn.execute("DELETE FROM towers WHERE id = ?", (tower_id,))
        if cursor.rowcount == 0:
            raise NotFoundError(f"Tower {tower_id} not found")


_LINK_SELECT = """
    SELECT l.id, l.name, l.near_end_tower_id, l.far_end_tower_id,
           l.expected_rsl_min, l.expected_rsl_max,
           ne.name AS near_end_tower, fe.name AS far_end_tower
    FROM links l
    JOIN towers ne ON ne.id = l.near_end_tower_id
    JOIN towers fe ON fe.id = l.far_end_tower_id
"""


def create_link(
    name: str,
    near_end_tower_id: int,
    far_end_tower_id: int,
    expected_rsl_min: Optional[float] = None,
    expected_rsl_max: Optional[float] = None,
    db_path: Optional[Path] = None,
) -> Link:
    """Insert a link between two towers.

    A missing expected range bound falls back to DEFAULT_RSL_MIN /
    DEFAULT_RSL_MAX.

    Raises:
        ConfigurationError: If both ends are the same tower or the range
            is empty or inverted
        ValueError: If the name is already used or a tower does not exist
    """
    cfg = get_config()
    if expected_rsl_min is None:
        expected_rsl_min = cfg.default_rsl_min
    if expected_rsl_max is None:
        expected_rsl_max = cfg.default_rsl_max

    validate_link(Link(
        id=0,
        name=name,
        near_end_tower_id=near_end_tower_id,
        far_end_tower_id=far_end_tower_id,
        expected_rsl_min=float(expected_rsl_min),
        expected_rsl_max=float(expected_rsl_max),
    ))

    try:
        with get_connection(db_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO links
                (name, near_end_tower_id, far_end_tower_id,
                 expected_rsl_min, expected_rsl_max)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, near_end_tower_id, far_end_tower_id,
                 float(expected_rsl_min), float(expected_rsl_max))
            )
            link_id = cursor.lastrowid
            row = conn.execute(f"{_LINK_SELECT} WHERE l.id = ?", (link_id,)).fetchone()
    except sqlite3.IntegrityError as e:
        raise ValueError(f"Cannot create link {name!r}: {e}") from e

    log.debug(f"Created link {name!r} (id={link_id})")
    return _row_to_link(row)


def list_links(
    tower_filter: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> list[Link]:
    """List links ordered by name.

    Args:
        tower_filter: Tower name matched against either end; None or "all"
            returns every link
        db_path: Optional path override
    """
    query = _LINK_SELECT
    params: tuple = ()
    if tower_filter and tower_filter != "all":
        query += " WHERE ne.name = ? OR fe.name = ?"
        params = (tower_filter, tower_filter)
    query += " ORDER BY l.name"

    with _fetching("links"), get_connection(db_path, readonly=True) as conn:
        cursor = conn.execute(query, params)
        return [_row_to_link(row) for row in cursor.fetchall()]


def update_link(
    link_id: int,
    name: Optional[str] = None,
    near_end_tower_id: Optional[int] = None,
    far_end_tower_id: Optional[int] = None,
    expected_rsl_min: Optional[float] = None,
    expected_rsl_max: Optional[float] = None,
    db_path: Optional[Path] = None,
) -> Link:
    """Change a link's name, endpoints or expected range.

    Fields left as None keep their stored value. The merged link is
    validated before anything is written.

    Raises:
        NotFoundError: If no link has this id
        ConfigurationError: If the result has identical ends or an empty or
            inverted range
        ValueError: If the name is already used or a tower does not exist
    """
    with get_connection(db_path) as conn:
        row = conn.execute(f"{_LINK_SELECT} WHERE l.id = ?", (link_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Link {link_id} not found")

        current = _row_to_link(row)
        updated = Link(
            id=link_id,
            name=current.name if name is None else name,
            near_end_tower_id=(
                current.near_end_tower_id if near_end_tower_id is None else near_end_tower_id
            ),
            far_end_tower_id=(
                current.far_end_tower_id if far_end_tower_id is None else far_end_tower_id
            ),
            expected_rsl_min=float(
                current.expected_rsl_min if expected_rsl_min is None else expected_rsl_min
            ),
            expected_rsl_max=float(
                current.expected_rsl_max if expected_rsl_max is None else expected_rsl_max
            ),
        )
        validate_link(updated)

        try:
            conn.execute(
                """
                UPDATE links
                SET name = ?, near_end_tower_id = ?, far_end_tower_id = ?,
                    expected_rsl_min = ?, expected_rsl_max = ?
                WHERE id = ?
                """,
                (updated.name, updated.near_end_tower_id, updated.far_end_tower_id,
                 updated.expected_rsl_min, updated.expected_rsl_max, link_id)
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Cannot update link {link_id}: {e}") from e
        row = conn.execute(f"{_LINK_SELECT} WHERE l.id = ?", (link_id,)).fetchone()

    log.debug(f"Updated link {updated.name!r} (id={link_id})")
    return _row_to_link(row)


def delete_link(link_id: int, db_path: Optional[Path] = None) -> None:
    """Delete a link and, by cascade, its readings and notes.

    Raises:
        NotFoundError: If no link has this id
    """
    with get_connection(db_path) as conn:
        cursor = conn.execute("DELETE FROM links WHERE id = ?", (link_id,))
        if cursor.rowcount == 0:
            raise NotFoundError(f"Link {link_id} not found")


# =============================================================================
# Reading Repository
# =============================================================================


def _row_to_reading(row: sqlite3.Row) -> Reading:
    return Reading(
        id=row["id"],
        link_id=row["link_id"],
        date=date.fromisoformat(row["date"]),
        rsl_near_end=row["rsl_near_end"],
        rsl_far_end=row["rsl_far_end"],
        status=parse_reading_status(row["status"]),
    )


def _date_bounds(year_or_range: Union[int, DateRange]) -> tuple[str, str]:
    """Inclusive ISO date bounds for a year or (start, end) range."""
    if isinstance(year_or_range, int):
        return (f"{year_or_range:04d}-01-01", f"{year_or_range:04d}-12-31")
    start, end = year_or_range
    return (start.isoformat(), end.isoformat())


def list_readings(
    year_or_range: Union[int, DateRange],
    link_id: Optional[int] = None,
    db_path: Optional[Path] = None,
) -> list[Reading]:
    """Fetch readings within a year or date range.

    Args:
        year_or_range: Year, or (start, end) dates (inclusive)
        link_id: Restrict to one link
        db_path: Optional path override

    Returns:
        Readings ordered by link and date

    Raises:
        DataFetchError: If the database cannot be read
    """
    start, end = _date_bounds(year_or_range)
    query = (
        "SELECT id, link_id, date, rsl_near_end, rsl_far_end, status "
        "FROM readings WHERE date BETWEEN ? AND ?"
    )
    params: tuple = (start, end)
    if link_id is not None:
        query += " AND link_id = ?"
        params += (link_id,)
    query += " ORDER BY link_id, date"

    with _fetching("readings"), get_connection(db_path, readonly=True) as conn:
        cursor = conn.execute(query, params)
        return [_row_to_reading(row) for row in cursor.fetchall()]


def upsert_reading(reading: Reading, db_path: Optional[Path] = None) -> Reading:
    """Create or update a reading.

    A reading without id is inserted. A reading with id updates the near
    end, far end and status values of the stored reading; its link and date
    cannot change.

    Returns:
        The stored reading

    Raises:
        DuplicateReadingError: If another reading exists for (link_id, date)
        NotFoundError: If updating an id that does not exist
        ValueError: If updating would change the link or date
    """
    status = parse_reading_status(reading.status).value

    with get_connection(db_path) as conn:
        if reading.id is None:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO readings
                    (link_id, date, rsl_near_end, rsl_far_end, status)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (reading.link_id, reading.date.isoformat(),
                     reading.rsl_near_end, reading.rsl_far_end, status)
                )
            except sqlite3.IntegrityError as e:
                if "UNIQUE" in str(e):
                    raise DuplicateReadingError(
                        f"Reading for link {reading.link_id} on "
                        f"{reading.date.isoformat()} already exists"
                    ) from e
                raise
            reading_id = cursor.lastrowid
        else:
            row = conn.execute(
                "SELECT link_id, date FROM readings WHERE id = ?", (reading.id,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Reading {reading.id} not found")
            if row["link_id"] != reading.link_id or row["date"] != reading.date.isoformat():
                raise ValueError(
                    f"Reading {reading.id}: link and date cannot be changed"
                )
            conn.execute(
                """
                UPDATE readings
                SET rsl_near_end = ?, rsl_far_end = ?, status = ?
                WHERE id = ?
                """,
                (reading.rsl_near_end, reading.rsl_far_end, status, reading.id)
            )
            reading_id = reading.id

        row = conn.execute(
            "SELECT id, link_id, date, rsl_near_end, rsl_far_end, status "
            "FROM readings WHERE id = ?",
            (reading_id,)
        ).fetchone()

    return _row_to_reading(row)


def delete_reading(reading_id: int, db_path: Optional[Path] = None) -> None:
    """Delete a reading. Notes for its month are kept.

    Raises:
        NotFoundError: If no reading has this id
    """
    with get_connection(db_path) as conn:
        cursor = conn.execute("DELETE FROM readings WHERE id = ?", (reading_id,))
        if cursor.rowcount == 0:
            raise NotFoundError(f"Reading {reading_id} not found")


def get_available_years(db_path: Optional[Path] = None) -> list[int]:
    """Years with at least one reading, ascending."""
    with _fetching("available years"), get_connection(db_path, readonly=True) as conn:
        cursor = conn.execute(
            "SELECT DISTINCT CAST(substr(date, 1, 4) AS INTEGER) AS year "
            "FROM readings ORDER BY year"
        )
        return [row["year"] for row in cursor.fetchall()]


# =============================================================================
# Annotation Store
# =============================================================================


def get_note(
    link_id: int,
    period: PeriodKey,
    db_path: Optional[Path] = None,
) -> Optional[str]:
    """Get the note for a link and period, or None."""
    year, month = period
    with _fetching("note"), get_connection(db_path, readonly=True) as conn:
        row = conn.execute(
            "SELECT text FROM notes WHERE link_id = ? AND year = ? AND month = ?",
            (link_id, year, month)
        ).fetchone()
        return row["text"] if row else None


def set_note(
    link_id: int,
    period: PeriodKey,
    text: Optional[str],
    db_path: Optional[Path] = None,
) -> None:
    """Set or replace the note for a link and period.

    Blank text deletes the note. The last write wins.
    """
    year, month = period
    validate_month(month)
    text = normalize_note(text)

    with get_connection(db_path) as conn:
        if text is None:
            conn.execute(
                "DELETE FROM notes WHERE link_id = ? AND year = ? AND month = ?",
                (link_id, year, month)
            )
            log.debug(f"Cleared note for link {link_id} {PeriodKey(year, month).label()}")
            return

        conn.execute(
            """
            INSERT INTO notes (link_id, year, month, text, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (link_id, year, month)
            DO UPDATE SET text = excluded.text, updated_at = excluded.updated_at
            """,
            (link_id, year, month, text, int(time.time()))
        )
    log.debug(f"Saved note for link {link_id} {PeriodKey(year, month).label()}")


def notes_for_year(year: int, db_path: Optional[Path] = None) -> NoteIndex:
    """All notes of a year as a (link_id, period) -> text lookup."""
    with _fetching("notes"), get_connection(db_path, readonly=True) as conn:
        cursor = conn.execute(
            "SELECT link_id, year, month, text FROM notes WHERE year = ?",
            (year,)
        )
        return {
            (row["link_id"], PeriodKey(row["year"], row["month"])): row["text"]
            for row in cursor.fetchall()
        }


class SqliteAnnotationStore:
    """AnnotationStore backed by the notes table."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def get_note(self, link_id: int, period: PeriodKey) -> Optional[str]:
        return get_note(link_id, period, self.db_path)

    def set_note(self, link_id: int, period: PeriodKey, text: str) -> None:
        set_note(link_id, period, text, self.db_path)

    def notes_for_year(self, year: int) -> NoteIndex:
        return notes_for_year(year, self.db_path)


def vacuum_db(db_path: Optional[Path] = None) -> None:
    """Compact database and rebuild indexes."""
    if db_path is None:
        db_path = get_db_path()

    conn = sqlite3.connect(db_path)
    try:
        conn.execute("VACUUM")
        conn.execute("ANALYZE")
        log.info("Database vacuumed and analyzed")
    finally:
        conn.close()
