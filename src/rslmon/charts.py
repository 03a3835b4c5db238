"""Matplotlib-based SVG charts for RSL pivots.

Two charts are produced per year:
- a line chart with one line per link across the twelve months, with the
  severity band boundaries drawn as reference lines
- a pie chart of the severity band distribution of all pivot cells

Months without a reading are plotted as gaps, never as zero.
"""

import io
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for server-side rendering
import matplotlib.pyplot as plt

from .bands import get_band_fill, get_band_label
from .env import get_config
from .models import LinkPivotRow
from .pivot import pivot_band_distribution
from .severity import BAND_THRESHOLDS, SeverityBand
from . import log


# Type alias for theme names
ThemeName = Literal["light", "dark"]


@dataclass(frozen=True)
class ChartTheme:
    """Color palette for chart rendering."""

    name: str
    # Colors as hex values (without #)
    background: str
    canvas: str
    text: str
    axis: str
    grid: str
    reference: str


CHART_THEMES: dict[ThemeName, ChartTheme] = {
    "light": ChartTheme(
        name="light",
        background="faf8f5",
        canvas="ffffff",
        text="1a1915",
        axis="8a857a",
        grid="e8e4dc",
        reference="b45309",
    ),
    "dark": ChartTheme(
        name="dark",
        background="0f1114",
        canvas="161a1e",
        text="f0efe8",
        axis="706d62",
        grid="252a30",
        reference="f59e0b",
    ),
}

# Line colours, cycled per link
LINE_COLORS = [
    "3b82f6", "ef4444", "10b981", "f59e0b", "8b5cf6", "06b6d4",
    "ec4899", "14b8a6", "f97316", "6366f1", "84cc16", "a855f7",
]

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _band_boundaries() -> list[float]:
    """Distinct band edges, strongest first (-30, -45, -55, -60, -65)."""
    edges = set()
    for _, lower, upper in BAND_THRESHOLDS:
        edges.add(lower)
        edges.add(upper)
    return sorted(edges, reverse=True)


def _to_plot_values(values: list[Optional[float]]) -> list[float]:
    """Replace missing values with NaN so matplotlib leaves a gap."""
    return [math.nan if v is None else v for v in values]


def _apply_theme(fig, ax, theme: ChartTheme) -> None:
    fig.patch.set_facecolor(f"#{theme.background}")
    ax.set_facecolor(f"#{theme.canvas}")

    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    ax.spines['left'].set_color(f"#{theme.grid}")
    ax.spines['bottom'].set_color(f"#{theme.grid}")

    ax.tick_params(colors=f"#{theme.axis}", labelsize=10)
    ax.yaxis.label.set_color(f"#{theme.text}")

    ax.grid(True, linestyle='-', alpha=0.5, color=f"#{theme.grid}")
    ax.set_axisbelow(True)


def _figure_to_svg(fig) -> str:
    svg_buffer = io.StringIO()
    fig.savefig(svg_buffer, format='svg', bbox_inches='tight', pad_inches=0.1)
    return svg_buffer.getvalue()


def render_pivot_chart_svg(
    rows: list[LinkPivotRow],
    year: int,
    theme: ChartTheme,
    width: int = 800,
    height: int = 320,
) -> str:
    """Render monthly RSL per link as a multi-line SVG chart.

    Args:
        rows: Pivot rows from build_pivot
        year: Pivot year (used for the root data attribute)
        theme: Color theme to apply
        width: Chart width in pixels
        height: Chart height in pixels

    Returns:
        SVG string
    """
    dpi = 100
    fig, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
    has_data = any(cell.value is not None for row in rows for cell in row.cells)

    try:
        _apply_theme(fig, ax, theme)
        x = list(range(1, 13))

        if not has_data:
            ax.text(
                0.5, 0.5, "No data available",
                transform=ax.transAxes,
                ha='center', va='center',
                fontsize=12,
                color=f"#{theme.axis}"
            )
        else:
            for idx, row in enumerate(rows):
                values = _to_plot_values([cell.value for cell in row.cells])
                color = LINE_COLORS[idx % len(LINE_COLORS)]
                ax.plot(
                    x, values,
                    color=f"#{color}", linewidth=2,
                    marker='o', markersize=4,
                    label=row.link_name,
                )

            for edge in _band_boundaries():
                ax.axhline(
                    edge, color=f"#{theme.reference}",
                    linestyle='--', linewidth=0.8, alpha=0.6,
                )

            if len(rows) > 1:
                ax.legend(loc='lower left', fontsize=8, ncol=min(len(rows), 4), frameon=False)

        ax.set_xlim(0.5, 12.5)
        ax.set_xticks(x)
        ax.set_xticklabels(MONTH_LABELS)
        ax.set_ylabel("RSL (dBm)")

        plt.tight_layout(pad=0.5)
        svg_content = _figure_to_svg(fig)

    finally:
        # Ensure figure is closed to prevent memory leaks
        plt.close(fig)

    return re.sub(
        r'<svg\b',
        f'<svg data-chart="pivot" data-year="{year}" data-theme="{theme.name}"',
        svg_content,
        count=1,
    )


def render_band_distribution_svg(
    distribution: dict[SeverityBand, int],
    theme: ChartTheme,
    size: int = 320,
) -> str:
    """Render a severity band distribution as an SVG pie chart.

    Args:
        distribution: Band counts, e.g. from pivot_band_distribution
        theme: Color theme to apply
        size: Width and height in pixels

    Returns:
        SVG string
    """
    dpi = 100
    fig, ax = plt.subplots(figsize=(size / dpi, size / dpi), dpi=dpi)

    try:
        fig.patch.set_facecolor(f"#{theme.background}")
        ax.set_facecolor(f"#{theme.background}")

        counts = {band: n for band, n in distribution.items() if n > 0}
        if not counts:
            ax.axis('off')
            ax.text(
                0.5, 0.5, "No data available",
                transform=ax.transAxes,
                ha='center', va='center',
                fontsize=12,
                color=f"#{theme.axis}"
            )
        else:
            ax.pie(
                list(counts.values()),
                labels=[get_band_label(band) for band in counts],
                colors=[f"#{get_band_fill(band)}" for band in counts],
                autopct='%1.0f%%',
                textprops={"color": f"#{theme.text}", "fontsize": 9},
                startangle=90,
            )
            ax.axis('equal')

        svg_content = _figure_to_svg(fig)

    finally:
        plt.close(fig)

    return re.sub(
        r'<svg\b',
        f'<svg data-chart="bands" data-theme="{theme.name}"',
        svg_content,
        count=1,
    )


def render_all_charts(
    rows: list[LinkPivotRow],
    year: int,
    out_dir: Optional[Path] = None,
    suffix: str = "",
) -> list[Path]:
    """Render pivot and band charts for a year in both themes.

    Args:
        rows: Pivot rows from build_pivot
        year: Pivot year
        out_dir: Output directory (default: OUT_DIR/assets/<year>)
        suffix: Optional file name suffix, e.g. a tower filter

    Returns:
        List of generated chart paths
    """
    if out_dir is None:
        out_dir = get_config().out_dir / "assets" / str(year)
    out_dir.mkdir(parents=True, exist_ok=True)

    distribution = pivot_band_distribution(rows)
    themes: list[ThemeName] = ["light", "dark"]
    generated: list[Path] = []

    for theme_name in themes:
        theme = CHART_THEMES[theme_name]

        pivot_path = out_dir / f"rsl_{year}{suffix}_{theme_name}.svg"
        pivot_path.write_text(render_pivot_chart_svg(rows, year, theme))
        generated.append(pivot_path)

        bands_path = out_dir / f"bands_{year}{suffix}_{theme_name}.svg"
        bands_path.write_text(render_band_distribution_svg(distribution, theme))
        generated.append(bands_path)

        log.debug(f"Generated charts: {pivot_path.name}, {bands_path.name}")

    log.info(f"Rendered {len(generated)} charts for {year}")
    return generated
