"""Year, period and month aggregations behind the time-series charts."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from nsw_fires.records import FIRE_TYPES, MAX_YEAR, WILDFIRE, FireRecord, valid_fires

Reducer = Callable[[List[FireRecord]], float]
KeyFunc = Callable[[FireRecord], str]

PERIOD_CONTEXT = {
    '2015-2019': 'Black Summer: Gospers Mountain (513k ha), Currowan (500k ha), Dunns Road (334k ha)',
    '2000-2004': '2003 Australian Alps fires (1.73M ha) - worst drought in 103 years',
    '1970-1974': '1974-75 season: Moolah-Corinya (1.17M ha) - largest fire contained by humans in NSW',
}

# (first year, last year, display name, context) for the big-fire annotations.
BIG_FIRE_WINDOWS = [
    (1970, 1979, '1974-75 Wildfire', 'Largest fire contained by humans in NSW'),
    (2000, 2009, 'Kosciuszko (2003)', "During Australia's worst drought in 103 years"),
    (2019, 2020, 'Gospers Mountain (2019)', 'Largest fire from single ignition point in Australian history'),
]


def count(records: List[FireRecord]) -> float:
    return len(records)


def area_sum(records: List[FireRecord]) -> float:
    return sum(record.area_or_zero for record in records)


METRICS: Dict[str, Tuple[str, Reducer]] = {
    'count': ('count', count),
    'area': ('area', area_sum),
}


@dataclass(frozen=True)
class LinearTrend:
    slope: float
    intercept: float

    def at(self, x: float) -> float:
        return self.slope * x + self.intercept


def linear_trend(points: Sequence[Tuple[float, float]]) -> Optional[LinearTrend]:
    """Ordinary least squares fit, or None when the fit is undefined."""
    n = len(points)
    if n <= 1:
        return None
    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_x2 = sum(x * x for x, _ in points)
    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return None
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return LinearTrend(slope, intercept)


def partition(records: Iterable[FireRecord], key: KeyFunc = lambda record: record.category) -> Dict[str, List[FireRecord]]:
    groups: Dict[str, List[FireRecord]] = {}
    for record in records:
        groups.setdefault(key(record), []).append(record)
    return groups


def group_by_year(records: Iterable[FireRecord], reducer: Reducer = count) -> List[Tuple[int, float]]:
    """Reduce records per calendar year; years without records are omitted."""
    by_year: Dict[int, List[FireRecord]] = {}
    for record in records:
        by_year.setdefault(record.year, []).append(record)
    return sorted((year, reducer(group)) for year, group in by_year.items())


def yearly_series(
    records: Iterable[FireRecord],
    metric: str = 'count',
    with_trend: bool = True,
    key: KeyFunc = lambda record: record.category,
) -> List[Dict]:
    field, reducer = METRICS[metric]
    groups = partition(valid_fires(records), key)
    ordered = [name for name in FIRE_TYPES if name in groups]
    ordered += sorted(name for name in groups if name not in FIRE_TYPES)
    series = []
    for name in ordered:
        totals = group_by_year(groups[name], reducer)
        entry: Dict = {
            'type': name,
            'points': [{'year': year, field: value, 'type': name} for year, value in totals],
            'trend': None,
        }
        fit = linear_trend(totals) if with_trend else None
        if fit is not None:
            entry['slope'] = fit.slope
            entry['trend'] = [{'year': year, 'trend': fit.at(year), 'type': name} for year, _ in totals]
        series.append(entry)
    return series


def top_k_by(rows: Sequence[Mapping], key: str, k: int) -> List[Mapping]:
    """Highest ``k`` rows by ``key``; ties keep their input order."""
    return sorted(rows, key=lambda row: row[key], reverse=True)[:k]


def period_bounds(year: int, width: int = 5) -> Tuple[int, int]:
    start = (year // width) * width
    return start, start + width - 1


def five_year_periods(records: Iterable[FireRecord], top_k: int = 3) -> Dict[str, List[Dict]]:
    buckets: Dict[str, Dict] = {}
    for record in valid_fires(records):
        if not record.has_area:
            continue
        start, end = period_bounds(record.year)
        label = f"{start}-{end}"
        bucket = buckets.setdefault(
            label,
            {'period': label, 'periodStart': start, 'totalArea': 0.0, 'minYear': record.year, 'maxYear': record.year},
        )
        bucket['totalArea'] += record.area_or_zero
        bucket['minYear'] = min(bucket['minYear'], record.year)
        bucket['maxYear'] = max(bucket['maxYear'], record.year)
    periods = sorted(buckets.values(), key=lambda bucket: bucket['period'])
    top = [
        dict(row, context=PERIOD_CONTEXT.get(row['period'], ''))
        for row in top_k_by(periods, 'totalArea', top_k)
    ]
    return {'periods': periods, 'top': top}


def monthly_heatmap(
    records: Iterable[FireRecord],
    end_year: int = MAX_YEAR,
    window_years: int = 15,
    fire_type: str = WILDFIRE,
) -> List[Dict]:
    start_year = end_year - window_years + 1
    counts: Dict[Tuple[int, int], int] = {}
    for record in valid_fires(records, start_year, end_year):
        if record.fire_type != fire_type:
            continue
        cell = (record.year, record.month)
        counts[cell] = counts.get(cell, 0) + 1
    return [{'year': year, 'month': month, 'count': total} for (year, month), total in sorted(counts.items())]


def big_fires(records: Iterable[FireRecord], min_area: float = 50000) -> List[Dict]:
    return [
        {
            'year': record.year,
            'month': record.month + 1,
            'areaHa': record.area_ha,
            'name': record.display_name,
        }
        for record in valid_fires(records)
        if record.area_ha and record.area_ha > min_area
    ]


def largest_per_window(points: Sequence[Dict], windows=BIG_FIRE_WINDOWS) -> List[Dict]:
    annotated = []
    for first, last, display_name, context in windows:
        candidates = [point for point in points if first <= point['year'] <= last]
        if not candidates:
            continue
        largest = max(candidates, key=lambda point: point['areaHa'])
        annotated.append(dict(largest, displayName=display_name, context=context))
    return annotated


def fires_by_label(records: Iterable[FireRecord], year: int = 2025, limit: int = 15) -> List[Dict]:
    totals: Dict[str, Dict] = {}
    for record in records:
        if record.start_date is None or record.is_sentinel or record.year != year:
            continue
        label = record.label or 'Unknown'
        entry = totals.setdefault(label, {'label': label, 'count': 0, 'totalArea': 0.0})
        entry['count'] += 1
        entry['totalArea'] += record.area_or_zero
    rows = [entry for entry in totals.values() if entry['label'] != 'Unknown']
    return top_k_by(rows, 'count', limit)


def impact_score(deaths: int, homes: int, area: float, injuries: int) -> float:
    return deaths * 10000 + homes * 2 + area / 1000 + injuries * 100


def _impact_level(score: float, low: float, high: float) -> str:
    spread = high - low
    if score >= low + spread * 0.66:
        return 'CRITICAL'
    if score >= low + spread * 0.33:
        return 'MAJOR'
    return 'HIGH'


def top_largest_fires(
    records: Iterable[FireRecord],
    research: Mapping[str, Mapping],
    limit: int = 10,
) -> List[Dict]:
    best: Dict[str, Dict] = {}
    for record in valid_fires(records):
        if not record.has_area:
            continue
        name = record.fire_name or 'Unnamed'
        label = f"{name} ({record.year})"
        notes = research.get(label) or {}
        deaths = notes.get('deaths') or 0
        homes = notes.get('homes') or 0
        injuries = notes.get('injuries') or 0
        entry = {
            'name': name,
            'year': record.year,
            'area': record.area_ha,
            'label': label,
            'deaths': deaths,
            'homes': homes,
            'injuries': injuries,
            'cause': notes.get('cause') or 'Unknown',
            'summary': notes.get('summary') or '',
            'impactScore': impact_score(deaths, homes, record.area_ha, injuries),
            'longitude': record.longitude,
            'latitude': record.latitude,
        }
        current = best.get(label)
        if current is None or entry['impactScore'] > current['impactScore']:
            best[label] = entry
    ranked = top_k_by(list(best.values()), 'impactScore', limit)
    if not ranked:
        return []
    scores = [fire['impactScore'] for fire in ranked]
    low, high = min(scores), max(scores)
    return [dict(fire, impactLevel=_impact_level(fire['impactScore'], low, high)) for fire in ranked]


def map_points(records: Iterable[FireRecord]) -> List[Dict]:
    return [
        {
            'longitude': record.longitude,
            'latitude': record.latitude,
            'type': record.category,
            'fireType': record.fire_type or 'Unknown',
            'fireName': record.fire_name,
            'areaHa': record.area_ha,
            'date': record.display_date,
        }
        for record in valid_fires(records)
        if record.has_coordinates
    ]
