import json
import math
import random

import pytest

from nsw_fires import aggregation
from nsw_fires.records import FireRecord


def _fire(start, area=None, fire_type='Wildfire', **extra):
    return FireRecord.from_mapping({'StartDate': start, 'AreaHa': area, 'd_FireType': fire_type, **extra})


def _series(series, fire_type):
    return next(entry for entry in series if entry['type'] == fire_type)


def test_linear_trend_recovers_exact_line():
    fit = aggregation.linear_trend([(1, 2), (2, 4), (3, 6)])
    assert fit is not None
    assert fit.slope == pytest.approx(2.0)
    assert fit.intercept == pytest.approx(0.0)
    assert fit.at(10) == pytest.approx(20.0)


@pytest.mark.parametrize(
    'points',
    [
        [],
        [(2019, 5)],
        [(2019, 5), (2019, 7), (2019, 9)],
    ],
)
def test_linear_trend_degenerate_inputs_give_no_trend(points):
    assert aggregation.linear_trend(points) is None


def test_yearly_counts_and_areas_end_to_end():
    fires = [
        _fire('2019-01-01', 100),
        _fire('2019-06-01', 200),
        _fire('2020-01-01', 50),
    ]
    counts = _series(aggregation.yearly_series(fires, metric='count'), 'Wildfire')
    areas = _series(aggregation.yearly_series(fires, metric='area', with_trend=False), 'Wildfire')
    assert counts['points'] == [
        {'year': 2019, 'count': 2, 'type': 'Wildfire'},
        {'year': 2020, 'count': 1, 'type': 'Wildfire'},
    ]
    assert areas['points'] == [
        {'year': 2019, 'area': 300.0, 'type': 'Wildfire'},
        {'year': 2020, 'area': 50.0, 'type': 'Wildfire'},
    ]
    assert [row['trend'] for row in counts['trend']] == pytest.approx([2.0, 1.0])
    assert areas['trend'] is None


def test_single_year_series_has_no_trend_and_serializes_cleanly():
    fires = [_fire('2019-01-01', 10), _fire('2019-03-01', 10), _fire('2020-01-01', 5, 'Prescribed Burn')]
    series = aggregation.yearly_series(fires, metric='count')
    assert [entry['type'] for entry in series] == ['Wildfire', 'Prescribed Burn']
    assert all(entry['trend'] is None for entry in series)
    json.dumps(series, allow_nan=False)


def test_sentinel_and_out_of_range_years_never_reach_series():
    fires = [
        _fire('1899-11-29T14:00:00.000Z', 10),
        _fire('1969-12-31T12:00:00Z', 10),
        _fire('1970-01-01T00:00:00Z', 10),
        _fire('2024-12-31T12:00:00Z', 10),
        _fire('2025-02-01', 10),
        _fire(None, 10),
    ]
    for metric in ('count', 'area'):
        years = [
            point['year']
            for entry in aggregation.yearly_series(fires, metric=metric)
            for point in entry['points']
        ]
        assert years == [1970, 2024]
        assert all(1970 <= year <= 2024 for year in years)


def test_aggregation_is_order_independent():
    rng = random.Random(7)
    fires = [
        _fire(f"{rng.randint(1970, 2024)}-0{rng.randint(1, 9)}-15", rng.choice([None, 5, 12.5, 400]), rng.choice(['Wildfire', 'Prescribed Burn']))
        for _ in range(200)
    ]
    shuffled = list(fires)
    rng.shuffle(shuffled)
    for metric in ('count', 'area'):
        original = aggregation.yearly_series(fires, metric=metric, with_trend=False)
        reordered = aggregation.yearly_series(shuffled, metric=metric, with_trend=False)
        for fire_type in ('Wildfire', 'Prescribed Burn'):
            left = _series(original, fire_type)['points']
            right = _series(reordered, fire_type)['points']
            assert [p['year'] for p in left] == [p['year'] for p in right]
            assert [p.get(metric) for p in left] == pytest.approx([p.get(metric) for p in right])


def test_group_by_year_leaves_gaps():
    fires = [_fire('1990-01-01'), _fire('1995-01-01')]
    assert aggregation.group_by_year(fires) == [(1990, 1), (1995, 1)]


def test_top_k_keeps_input_order_among_ties():
    rows = [
        {'period': 'a', 'totalArea': 5},
        {'period': 'b', 'totalArea': 9},
        {'period': 'c', 'totalArea': 5},
        {'period': 'd', 'totalArea': 5},
    ]
    assert [row['period'] for row in aggregation.top_k_by(rows, 'totalArea', 3)] == ['b', 'a', 'c']
    assert [row['period'] for row in rows] == ['a', 'b', 'c', 'd']


def test_period_bounds():
    assert aggregation.period_bounds(1970) == (1970, 1974)
    assert aggregation.period_bounds(1974) == (1970, 1974)
    assert aggregation.period_bounds(2019) == (2015, 2019)
    assert aggregation.period_bounds(2020) == (2020, 2024)


def test_five_year_periods_totals_and_top_three():
    fires = [
        _fire('1971-03-01', 1_000_000),
        _fire('1974-03-01', 170_000),
        _fire('1988-01-01', 20_000),
        _fire('2003-01-08', 1_730_000),
        _fire('2019-10-26', 500_000, 'Prescribed Burn'),
        _fire('2019-11-01', 0),
        _fire('2016-01-01', None),
    ]
    result = aggregation.five_year_periods(fires, top_k=3)
    periods = {row['period']: row for row in result['periods']}
    assert list(periods) == ['1970-1974', '1985-1989', '2000-2004', '2015-2019']
    assert periods['1970-1974']['totalArea'] == pytest.approx(1_170_000)
    assert periods['1970-1974']['minYear'] == 1971
    assert periods['1970-1974']['maxYear'] == 1974
    assert periods['2015-2019']['minYear'] == 2019
    assert [row['period'] for row in result['top']] == ['2000-2004', '1970-1974', '2015-2019']
    assert result['top'][0]['context'].startswith('2003 Australian Alps fires')
    assert 'context' not in result['periods'][0]


def test_monthly_heatmap_window_and_fire_type():
    fires = [
        _fire('2009-06-01'),
        _fire('2010-01-05'),
        _fire('2010-01-20'),
        _fire('2010-01-20', fire_type='Prescribed Burn'),
        _fire('2010-01-21', fire_type='Other'),
        _fire('2024-12-10'),
        _fire('2025-01-10'),
    ]
    rows = aggregation.monthly_heatmap(fires, end_year=2024, window_years=15)
    assert rows == [
        {'year': 2010, 'month': 0, 'count': 2},
        {'year': 2024, 'month': 11, 'count': 1},
    ]
    wider = aggregation.monthly_heatmap(fires, end_year=2024, window_years=16)
    assert wider[0] == {'year': 2009, 'month': 5, 'count': 1}


def test_big_fires_and_window_annotations():
    fires = [
        _fire('1974-12-01', 1_170_000, Label='Moolah-Corinya'),
        _fire('1975-01-01', 60_000, FireName='Second'),
        _fire('2003-01-08', 1_730_000, FireName='Kosciuszko'),
        _fire('2019-10-26', 513_000, Label='Gospers Mountain'),
        _fire('2019-11-26', 40_000, Label='Too small'),
        _fire('1985-02-01', 80_000),
    ]
    points = aggregation.big_fires(fires)
    assert [point['name'] for point in points] == ['Moolah-Corinya', 'Second', 'Kosciuszko', 'Gospers Mountain', 'Unknown']
    assert points[0]['month'] == 12
    notes = aggregation.largest_per_window(points)
    assert [note['displayName'] for note in notes] == ['1974-75 Wildfire', 'Kosciuszko (2003)', 'Gospers Mountain (2019)']
    assert notes[0]['name'] == 'Moolah-Corinya'
    assert 'displayName' not in points[0]


def test_fires_by_label_for_a_single_year():
    fires = [
        _fire('2025-01-10', 10, Label='Hunter'),
        _fire('2025-02-10', 5, Label='Hunter'),
        _fire('2025-02-11', 7, Label='Riverina'),
        _fire('2025-03-01', 3),
        _fire('2024-03-01', 3, Label='Hunter'),
    ]
    rows = aggregation.fires_by_label(fires, year=2025)
    assert rows == [
        {'label': 'Hunter', 'count': 2, 'totalArea': 15.0},
        {'label': 'Riverina', 'count': 1, 'totalArea': 7.0},
    ]


def test_top_largest_fires_scores_deduplicates_and_levels():
    research = {
        'Deadly (2019)': {'deaths': 3, 'homes': 100, 'injuries': None, 'cause': 'Lightning', 'summary': 's'},
    }
    fires = [
        _fire('2019-11-01', 1000, FireName='Deadly'),
        _fire('2019-12-01', 5000, FireName='Deadly'),
        _fire('2010-01-01', 200_000, FireName='Big'),
        _fire('2011-01-01', 1000),
        _fire('2012-01-01', None, FireName='No area'),
    ]
    ranked = aggregation.top_largest_fires(fires, research)
    assert [fire['label'] for fire in ranked] == ['Deadly (2019)', 'Big (2010)', 'Unnamed (2011)']
    assert ranked[0]['impactScore'] == pytest.approx(3 * 10000 + 100 * 2 + 5000 / 1000)
    assert ranked[0]['area'] == 5000
    assert ranked[0]['cause'] == 'Lightning'
    assert ranked[1]['cause'] == 'Unknown'
    assert [fire['impactLevel'] for fire in ranked] == ['CRITICAL', 'HIGH', 'HIGH']
    assert aggregation.top_largest_fires([], research) == []


def test_map_points_only_located_valid_fires():
    fires = [
        _fire('2019-12-01', 10, longitude=150.2, latitude=-33.5, FireName='Test'),
        _fire('2019-12-01', 10),
        _fire('1899-11-29T14:00:00.000Z', 10, longitude=150.2, latitude=-33.5),
    ]
    points = aggregation.map_points(fires)
    assert points == [
        {
            'longitude': 150.2,
            'latitude': -33.5,
            'type': 'Wildfire',
            'fireType': 'Wildfire',
            'fireName': 'Test',
            'areaHa': 10.0,
            'date': '2019-12-01',
        }
    ]
    assert not math.isnan(points[0]['areaHa'])
