"""Tests for page rendering."""

from rslmon.html import (
    build_pivot_table_data,
    copy_styles,
    render_monthly_page,
    render_pivot_page,
    render_yearly_page,
    tower_page_name,
)
from rslmon.models import MonthlySummary, PeriodKey
from rslmon.pivot import build_pivot
from rslmon.summary import summarize_month, summarize_year


class TestBuildPivotTableData:
    """Tests for build_pivot_table_data."""

    def test_cells(self, configured_env, sample_links, sample_readings):
        """Cells carry text, band class and note."""
        rows = build_pivot(2025, sample_readings, sample_links,
                           {(1, PeriodKey(2025, 2)): "note"})
        data = build_pivot_table_data(rows)
        l1 = data[0]
        assert l1["link_name"] == "L1"
        assert l1["expected_range"] == "-60 .. -40 dBm"
        assert len(l1["cells"]) == 12
        assert l1["cells"][0]["text"] == "-42.0"
        assert l1["cells"][0]["band"] == "too_strong"
        assert l1["cells"][1]["text"] == "-"
        assert l1["cells"][1]["band"] == "no_data"
        assert l1["cells"][1]["note"] == "note"

    def test_decimals_from_config(self, configured_env, monkeypatch, sample_links, sample_readings):
        """Cell text follows REPORT_DECIMALS."""
        monkeypatch.setenv("REPORT_DECIMALS", "2")
        import rslmon.env
        rslmon.env._config = None

        data = build_pivot_table_data(build_pivot(2025, sample_readings, sample_links))
        assert data[0]["cells"][0]["text"] == "-42.00"


class TestRenderPivotPage:
    """Tests for render_pivot_page."""

    def test_renders_rows(self, configured_env, sample_links, sample_readings):
        """The pivot page shows bands, tower links and the chart."""
        rows = build_pivot(2025, sample_readings, sample_links)
        html = render_pivot_page(rows, 2025, towers=["TowerA", "TowerB"], chart_prefix="assets/")
        assert "RSL History - Pivot Table (2025)" in html
        assert "band-too_strong" in html
        assert 'href="tower-TowerA.html"' in html
        assert "assets/rsl_2025_light.svg" in html
        assert "Microwave Backhaul" in html

    def test_tower_filter_subtitle(self, configured_env, sample_links, sample_readings):
        """A filtered page names its tower."""
        rows = build_pivot(2025, sample_readings, sample_links, tower_filter="TowerC")
        html = render_pivot_page(rows, 2025, tower_filter="TowerC")
        assert "Tower: TowerC" in html

    def test_notes_escaped(self, configured_env, sample_links):
        """Note text is HTML-escaped."""
        rows = build_pivot(2025, [], sample_links, {(1, PeriodKey(2025, 1)): "<b>x</b>"})
        html = render_pivot_page(rows, 2025)
        assert "<b>x</b>" not in html
        assert "&lt;b&gt;x&lt;/b&gt;" in html

    def test_empty(self, configured_env):
        """An empty pivot renders a placeholder."""
        assert "No links to display." in render_pivot_page([], 2025)


class TestRenderSummaryPages:
    """Tests for monthly and yearly pages."""

    def test_monthly(self, configured_env, sample_links, sample_readings):
        """The monthly page lists towers, statuses and averages."""
        html = render_monthly_page(summarize_month(2025, 3, sample_readings, sample_links))
        assert "March 2025" in html
        assert "TowerA" in html
        assert "Below Range" in html
        assert "-62.0 dBm" in html

    def test_monthly_empty(self, configured_env):
        """A month without readings renders a placeholder."""
        html = render_monthly_page(MonthlySummary(year=2025, month=7))
        assert "No readings for Jul-25." in html

    def test_yearly(self, configured_env, sample_links, sample_readings):
        """The yearly page shows averages and warnings."""
        html = render_yearly_page(summarize_year(2025, sample_readings, sample_links))
        assert "Yearly RSL Report - 2025" in html
        assert "-52.0" in html
        assert "Network average" in html
        assert "weaker than expected" in html


class TestCopyStyles:
    """Tests for copy_styles."""

    def test_copies(self, tmp_out_dir):
        """styles.css is copied into the given directory."""
        copy_styles(tmp_out_dir / "reports")
        assert (tmp_out_dir / "reports" / "styles.css").exists()

    def test_default_out_dir(self, configured_env):
        """Without a directory the stylesheet goes to OUT_DIR."""
        copy_styles()
        assert (configured_env["out_dir"] / "styles.css").exists()


class TestTowerPageName:
    """Tests for tower_page_name."""

    def test_prefixed(self):
        """A tower called "index" does not take over index.html."""
        assert tower_page_name("index") == "tower-index.html"

    def test_sanitised(self):
        """Slashes in tower names never reach the file system."""
        assert tower_page_name("Ridge/2") == "tower-Ridge-2.html"

    def test_link_in_filter_navigation(self, configured_env):
        """The pivot page links to the same file name the script writes."""
        html = render_pivot_page([], 2025, towers=["Ridge/2"])
        assert 'href="tower-Ridge-2.html"' in html
