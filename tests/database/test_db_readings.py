"""Tests for the reading repository."""

from datetime import date

import pytest

from rslmon.db import (
    delete_link,
    delete_reading,
    get_available_years,
    list_readings,
    upsert_reading,
)
from rslmon.errors import DataFetchError, DuplicateReadingError, NotFoundError
from rslmon.models import Reading, ReadingStatus


class TestListReadings:
    """Tests for list_readings."""

    def test_by_year(self, populated_db):
        """A year selects only that year's readings."""
        readings = list_readings(2025, db_path=populated_db["db"])
        assert len(readings) == 3
        assert all(r.date.year == 2025 for r in readings)

    def test_ordered_by_link_then_date(self, populated_db):
        """Readings come back ordered by link and date."""
        readings = list_readings(2025, db_path=populated_db["db"])
        keys = [(r.link_id, r.date) for r in readings]
        assert keys == sorted(keys)

    def test_by_range_inclusive(self, populated_db):
        """Date range bounds are inclusive."""
        readings = list_readings(
            (date(2025, 1, 15), date(2025, 3, 10)), db_path=populated_db["db"]
        )
        assert {r.rsl_near_end for r in readings} == {-42.0, -62.0, -50.0}

    def test_by_link(self, populated_db):
        """Readings can be limited to one link."""
        ab, _ = populated_db["links"]
        readings = list_readings(2025, link_id=ab.id, db_path=populated_db["db"])
        assert [r.rsl_near_end for r in readings] == [-42.0, -62.0]

    def test_round_trips_fields(self, populated_db):
        """Stored fields are read back unchanged."""
        reading = list_readings(2025, db_path=populated_db["db"])[0]
        assert reading.date == date(2025, 1, 15)
        assert reading.rsl_far_end == -43.0
        assert reading.status == ReadingStatus.ACTIVE

    def test_unreadable_db_raises_fetch_error(self, tmp_path, configured_env):
        """Read failures surface as DataFetchError."""
        with pytest.raises(DataFetchError):
            list_readings(2025, db_path=tmp_path / "missing" / "rsl.db")


class TestUpsertReading:
    """Tests for upsert_reading."""

    def test_insert_assigns_id(self, directory):
        """A new reading gets an id and keeps its status."""
        ab, _ = directory["links"]
        stored = upsert_reading(
            Reading(id=None, link_id=ab.id, date=date(2025, 5, 1), rsl_near_end=-51.0,
                    status=ReadingStatus.OBSTACLE),
            directory["db"],
        )
        assert stored.id is not None
        assert stored.status == ReadingStatus.OBSTACLE

    def test_duplicate_link_date_rejected(self, populated_db):
        """A second reading for the same link and day is rejected."""
        ab, _ = populated_db["links"]
        with pytest.raises(DuplicateReadingError):
            upsert_reading(
                Reading(id=None, link_id=ab.id, date=date(2025, 1, 15), rsl_near_end=-45.0),
                populated_db["db"],
            )

    def test_same_date_other_link_allowed(self, populated_db):
        """Another link may have a reading on the same day."""
        _, ac = populated_db["links"]
        stored = upsert_reading(
            Reading(id=None, link_id=ac.id, date=date(2025, 1, 15), rsl_near_end=-45.0),
            populated_db["db"],
        )
        assert stored.link_id == ac.id

    def test_update_values(self, populated_db):
        """An update replaces values and status."""
        existing = list_readings(2025, db_path=populated_db["db"])[0]
        updated = upsert_reading(
            Reading(id=existing.id, link_id=existing.link_id, date=existing.date,
                    rsl_near_end=-44.5, rsl_far_end=None, status=2),
            populated_db["db"],
        )
        assert updated.rsl_near_end == -44.5
        assert updated.rsl_far_end is None
        assert updated.status == ReadingStatus.REMOVED

    def test_update_cannot_move_date(self, populated_db):
        """An update cannot move a reading to another day."""
        existing = list_readings(2025, db_path=populated_db["db"])[0]
        with pytest.raises(ValueError, match="cannot be changed"):
            upsert_reading(
                Reading(id=existing.id, link_id=existing.link_id, date=date(2025, 2, 1),
                        rsl_near_end=-44.0),
                populated_db["db"],
            )

    def test_update_unknown_id(self, directory):
        """Updating a missing reading raises NotFoundError."""
        ab, _ = directory["links"]
        with pytest.raises(NotFoundError):
            upsert_reading(
                Reading(id=999, link_id=ab.id, date=date(2025, 1, 1), rsl_near_end=-44.0),
                directory["db"],
            )


class TestDeleteReading:
    """Tests for delete_reading."""

    def test_delete(self, populated_db):
        """A deleted reading is no longer listed."""
        existing = list_readings(2025, db_path=populated_db["db"])[0]
        delete_reading(existing.id, populated_db["db"])
        assert existing.id not in {r.id for r in list_readings(2025, db_path=populated_db["db"])}

    def test_delete_unknown(self, initialized_db):
        """Deleting a missing reading raises NotFoundError."""
        with pytest.raises(NotFoundError):
            delete_reading(123, initialized_db)

    def test_link_delete_cascades(self, populated_db):
        """Deleting a link removes its readings."""
        ab, _ = populated_db["links"]
        delete_link(ab.id, populated_db["db"])
        assert list_readings(2025, link_id=ab.id, db_path=populated_db["db"]) == []


class TestAvailableYears:
    """Tests for get_available_years."""

    def test_years(self, populated_db):
        """Years with readings are listed in order."""
        assert get_available_years(populated_db["db"]) == [2024, 2025]

    def test_empty(self, initialized_db):
        """An empty database has no years."""
        assert get_available_years(initialized_db) == []


class TestVacuum:
    """Tests for vacuum_db."""

    def test_keeps_data(self, populated_db, capsys):
        """VACUUM keeps every reading."""
        from rslmon.db import vacuum_db

        vacuum_db(populated_db["db"])
        assert len(list_readings(2025, db_path=populated_db["db"])) == 3
        assert "vacuumed" in capsys.readouterr().out
