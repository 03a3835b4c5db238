"""Monthly and yearly RSL roll-ups.

Averages use the near-end RSL only; far-end values are not included.
Periods without readings are left out entirely: a link with no readings in
a month has no monthly entry, and months without data never count as zero
in a yearly average.

Range verdicts come from anomaly.detect_for_link, so a link with an invalid
expected range makes the summary fail with ConfigurationError instead of
producing a meaningless verdict.
"""

from collections import defaultdict
from typing import Iterable, Optional

from .anomaly import RangeStatus, detect_for_link
from .models import (
    Link,
    LinkMonthly,
    LinkYearly,
    MonthlySummary,
    PeriodKey,
    Reading,
    TowerMonthly,
    TowerStats,
    TowerYearly,
    YearlySummary,
    validate_month,
)
from . import log

UNKNOWN_TOWER = "Unknown"


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _tower_name(link: Link) -> str:
    return link.near_end_tower or UNKNOWN_TOWER


def _group_near_end(
    readings: Iterable[Reading],
    links_by_id: dict[int, Link],
    year: int,
    month: Optional[int] = None,
) -> dict[int, dict[int, list[float]]]:
    """Collect near-end values per link and month.

    Returns:
        {link_id: {month: [rsl_near_end, ...]}} for readings in the year
        (and month, if given) whose link is known
    """
    grouped: dict[int, dict[int, list[float]]] = defaultdict(lambda: defaultdict(list))
    skipped = 0

    for reading in readings:
        if reading.date.year != year:
            continue
        if month is not None and reading.date.month != month:
            continue
        if reading.link_id not in links_by_id:
            skipped += 1
            continue
        grouped[reading.link_id][reading.date.month].append(reading.rsl_near_end)

    if skipped:
        log.debug(f"Skipped {skipped} readings for unknown links")

    return grouped


def summarize_month(
    year: int,
    month: int,
    readings: Iterable[Reading],
    links: Iterable[Link],
) -> MonthlySummary:
    """Average each link's readings for one month and check its range.

    Args:
        year: Year of the month
        month: Month (1-12)
        readings: Reading history (readings outside the month are ignored)
        links: Directory links supplying names, towers and expected ranges

    Returns:
        MonthlySummary grouped by near-end tower; links without readings in
        the month are omitted

    Raises:
        ValueError: If month is out of range
        ConfigurationError: If a link with readings has an invalid range
    """
    validate_month(month)
    link_list = list(links)
    links_by_id = {link.id: link for link in link_list}
    grouped = _group_near_end(readings, links_by_id, year, month)
    period = PeriodKey(year, month)

    towers: dict[str, TowerMonthly] = {}
    for link in link_list:
        values = grouped.get(link.id, {}).get(month)
        if not values:
            continue

        avg = _mean(values)
        verdict = detect_for_link(avg, link, period)

        tower_name = _tower_name(link)
        tower = towers.setdefault(tower_name, TowerMonthly(tower_name=tower_name))
        tower.links.append(LinkMonthly(
            link_id=link.id,
            link_name=link.name,
            avg_rsl=avg,
            status=verdict.status,
            warning_message=verdict.message,
            reading_count=len(values),
        ))

    summary = MonthlySummary(
        year=year,
        month=month,
        towers=[towers[name] for name in sorted(towers)],
    )
    log.debug(f"Monthly summary {period.label()}: {len(summary.links)} links with data")
    return summary


def summarize_year(
    year: int,
    readings: Iterable[Reading],
    links: Iterable[Link],
) -> YearlySummary:
    """Compute per-link monthly averages, yearly average and warnings.

    Args:
        year: Year to summarize
        readings: Reading history (other years are ignored)
        links: Directory links supplying names, towers and expected ranges

    Returns:
        YearlySummary grouped by near-end tower; links without readings in
        the year are omitted

    Raises:
        ConfigurationError: If a link with readings has an invalid range
    """
    link_list = list(links)
    links_by_id = {link.id: link for link in link_list}
    grouped = _group_near_end(readings, links_by_id, year)

    towers: dict[str, TowerYearly] = {}
    for link in link_list:
        months = grouped.get(link.id)
        if not months:
            continue

        entry = LinkYearly(link_id=link.id, link_name=link.name)
        for month in sorted(months):
            avg = _mean(months[month])
            entry.monthly_avg[month] = avg

            verdict = detect_for_link(avg, link, PeriodKey(year, month))
            if not verdict.is_normal:
                entry.warnings.append(verdict.message)

        entry.yearly_avg = _mean(list(entry.monthly_avg.values()))

        tower_name = _tower_name(link)
        tower = towers.setdefault(tower_name, TowerYearly(tower_name=tower_name))
        tower.links.append(entry)

    summary = YearlySummary(year=year, towers=[towers[name] for name in sorted(towers)])
    log.debug(f"Yearly summary {year}: {len(summary.links)} links with data")
    return summary


def tower_stats(summary: MonthlySummary) -> list[TowerStats]:
    """Count link health per tower for a month.

    Links are counted by range verdict: normal is healthy, above range is
    a warning and below range is critical.
    """
    stats = []
    for tower in summary.towers:
        statuses = [link.status for link in tower.links]
        averages = [link.avg_rsl for link in tower.links]
        stats.append(TowerStats(
            tower_name=tower.tower_name,
            total_links=len(tower.links),
            avg_rsl=_mean(averages) if averages else None,
            healthy_links=statuses.count(RangeStatus.NORMAL),
            warning_links=statuses.count(RangeStatus.WARNING_HIGH),
            critical_links=statuses.count(RangeStatus.WARNING_LOW),
        ))
    return stats


def yearly_month_averages(summary: YearlySummary) -> dict[int, float]:
    """Average of all links' monthly averages, per month with data.

    Returns:
        {month: mean}, ordered by month
    """
    buckets: dict[int, list[float]] = defaultdict(list)
    for link in summary.links:
        for month, avg in link.monthly_avg.items():
            buckets[month].append(avg)
    return {month: _mean(buckets[month]) for month in sorted(buckets)}
