"""Tests for CSV export of pivots."""

import csv
import io

from rslmon.export import export_filename, export_yearly_csv, pivot_to_table


class TestPivotToTable:
    """Tests for pivot_to_table."""

    def test_header(self, pivot_rows):
        """Header has link columns, twelve months and notes."""
        header = pivot_to_table(pivot_rows)[0]
        assert header[:5] == ["Link", "Tower", "Far End", "Expected Min", "Expected Max"]
        assert header[5] == "Jan-25"
        assert header[16] == "Dec-25"
        assert header[-1] == "Notes"

    def test_rows(self, pivot_rows):
        """Missing months are empty strings and notes are joined."""
        table = pivot_to_table(pivot_rows)
        assert len(table) == 4
        l1 = table[1]
        assert l1[:5] == ["L1", "TowerA", "TowerB", -60.0, -40.0]
        assert l1[5] == -42.0
        assert l1[6] == ""
        assert l1[-1] == "Feb-25: radio replaced"

    def test_empty(self):
        """No rows gives just the fixed header."""
        assert pivot_to_table([]) == [["Link", "Tower", "Far End", "Expected Min", "Expected Max"]]


class TestExportYearlyCsv:
    """Tests for export_yearly_csv."""

    def test_utf8_bom(self, pivot_rows):
        """Output starts with a UTF-8 BOM."""
        assert export_yearly_csv(pivot_rows).startswith(b"\xef\xbb\xbf")

    def test_parses_back(self, pivot_rows):
        """The CSV parses back with empty cells for gaps."""
        text = export_yearly_csv(pivot_rows).decode("utf-8-sig")
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[1][0] == "L1"
        assert rows[1][5] == "-42.0"
        assert rows[1][6] == ""


class TestExportFilename:
    """Tests for export_filename."""

    def test_all(self):
        """No filter or "all" gives the plain file name."""
        assert export_filename(2025) == "RSL_History_2025.csv"
        assert export_filename(2025, "all") == "RSL_History_2025.csv"

    def test_tower(self):
        """A tower filter is appended to the file name."""
        assert export_filename(2025, "TowerA") == "RSL_History_2025_TowerA.csv"

    def test_tower_name_sanitised(self):
        """Tower names cannot escape the output directory."""
        assert export_filename(2025, "../North/South") == "RSL_History_2025_North-South.csv"
