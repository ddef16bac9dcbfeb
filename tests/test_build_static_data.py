import json
from datetime import date

import pandas as pd
import pytest
import requests
import shapefile  # type: ignore
from pyproj import CRS, Transformer

from nsw_fires import build_static_data as static
from nsw_fires.aggregation import map_points
from nsw_fires.records import records_from_frame

RING = [[150.0, -33.0], [151.0, -33.0], [151.0, -34.0], [150.0, -34.0], [150.0, -33.0]]


def _write_fire_shapefile(path, rings, records, prj_wkt=None):
    writer = shapefile.Writer(str(path), shapeType=shapefile.POLYGON)
    writer.field('StartDate', 'D')
    writer.field('AreaHa', 'N', size=18, decimal=2)
    writer.field('Label', 'C', size=60)
    writer.field('d_FireType', 'C', size=30)
    writer.field('FireName', 'C', size=60)
    for ring, record in zip(rings, records):
        writer.poly([ring])
        writer.record(*record)
    writer.close()
    if prj_wkt:
        path.with_suffix('.prj').write_text(prj_wkt, encoding='utf-8')
    return path.with_suffix('.shp')


class _FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self._payload


@pytest.fixture
def static_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(static, 'FIRES_FILE', tmp_path / 'static' / 'fires-with-coords.json')
    monkeypatch.setattr(static, 'SUBURBS_FILE', tmp_path / 'static' / 'australia-states.json')
    return tmp_path / 'static'


def test_fire_records_builder_reads_shapefile(tmp_path, static_dir):
    shp = _write_fire_shapefile(
        tmp_path / 'fires',
        [RING, RING],
        [
            (date(2019, 12, 1), 1234.5, '2019-20 Wildfire', 'Wildfire', 'Gospers Mountain'),
            (None, None, '', 'Prescribed Burn', ''),
        ],
    )
    df = static.build_fire_records_df(shp_path=shp, store_processed=False, force_rebuild=True)

    assert list(df.columns) == ['StartDate', 'AreaHa', 'Label', 'd_FireType', 'FireName', 'longitude', 'latitude']
    first = df.iloc[0]
    # Local midnight in Sydney (AEDT, UTC+11) is 13:00 UTC the previous day.
    assert first['StartDate'] == '2019-11-30T13:00:00.000Z'
    assert first['AreaHa'] == pytest.approx(1234.5)
    assert first['FireName'] == 'Gospers Mountain'
    assert first['longitude'] == pytest.approx(150.4)
    assert first['latitude'] == pytest.approx(-33.4)
    second = df.iloc[1]
    assert pd.isna(second['StartDate'])
    assert pd.isna(second['Label'])
    assert second['d_FireType'] == 'Prescribed Burn'
    assert not static.FIRES_FILE.exists()


def test_fire_records_builder_stores_and_reuses_cache(tmp_path, static_dir, capsys):
    shp = _write_fire_shapefile(
        tmp_path / 'fires',
        [RING, RING, RING],
        [(date(2003, 1, 8), 10.0, 'a', 'Wildfire', 'A')] * 3,
    )
    df = static.build_fire_records_df(max_records=2, shp_path=shp, store_processed=True, force_rebuild=True)
    assert len(df) == 2
    assert 'Wrote' in capsys.readouterr().out

    stored = json.loads(static.FIRES_FILE.read_text(encoding='utf-8'))
    assert stored[0]['StartDate'] == '2003-01-07T13:00:00.000Z'

    cached = static.build_fire_records_df(shp_path=tmp_path / 'missing.shp')
    assert len(cached) == 2


def test_sentinel_source_date_matches_dashboard_sentinel(tmp_path, static_dir):
    shp = _write_fire_shapefile(tmp_path / 'fires', [RING], [(date(1899, 11, 30), 1.0, 'x', 'Wildfire', 'x')])
    df = static.build_fire_records_df(shp_path=shp, store_processed=False, force_rebuild=True)
    assert df.iloc[0]['StartDate'] == '1899-11-29T14:00:00.000Z'


def test_map_dates_match_shapefile_calendar_dates(tmp_path, static_dir):
    shp = _write_fire_shapefile(
        tmp_path / 'fires',
        [RING, RING],
        [
            (date(2019, 12, 1), 10.0, 'a', 'Wildfire', 'A'),
            (date(2020, 1, 1), 10.0, 'b', 'Prescribed Burn', 'B'),
        ],
    )
    df = static.build_fire_records_df(shp_path=shp, store_processed=False, force_rebuild=True)
    points = map_points(records_from_frame(df))
    assert [point['date'] for point in points] == ['2019-12-01', '2020-01-01']


def test_fire_records_builder_reprojects_with_prj(tmp_path, static_dir):
    to_mercator = Transformer.from_crs('EPSG:4326', 'EPSG:3857', always_xy=True)
    ring = [list(to_mercator.transform(lon, lat)) for lon, lat in RING]
    shp = _write_fire_shapefile(
        tmp_path / 'fires_3857',
        [ring],
        [(date(2010, 6, 1), 5.0, 'x', 'Wildfire', 'x')],
        prj_wkt=CRS.from_epsg(3857).to_wkt(),
    )
    df = static.build_fire_records_df(shp_path=shp, store_processed=False, force_rebuild=True)
    assert 150.0 < df.iloc[0]['longitude'] < 151.0
    assert -34.0 < df.iloc[0]['latitude'] < -33.0


def test_fire_records_builder_errors(tmp_path, static_dir):
    with pytest.raises(FileNotFoundError):
        static.build_fire_records_df(shp_path=tmp_path / 'nope.shp', force_rebuild=True)

    writer = shapefile.Writer(str(tmp_path / 'bad'), shapeType=shapefile.POLYGON)
    writer.field('Other', 'C')
    writer.poly([RING])
    writer.record('x')
    writer.close()
    with pytest.raises(RuntimeError):
        static.build_fire_records_df(shp_path=tmp_path / 'bad.shp', force_rebuild=True)


def test_suburb_boundaries_drop_lord_howe_and_cache(static_dir, monkeypatch):
    payload = {
        'type': 'FeatureCollection',
        'features': [
            {'type': 'Feature', 'properties': {'nsw_loca_2': 'LORD HOWE ISLAND'}, 'geometry': None},
            {'type': 'Feature', 'properties': {'name': 'Lord Howe Island'}, 'geometry': None},
            {'type': 'Feature', 'properties': {'nsw_loca_2': 'KATOOMBA'}, 'geometry': None},
        ],
    }
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _FakeResponse(json.loads(json.dumps(payload)))

    monkeypatch.setattr(static.requests, 'get', fake_get)

    collection = static.build_suburb_boundaries()
    assert [f['properties']['nsw_loca_2'] for f in collection['features']] == ['KATOOMBA']
    assert calls == [(static.SUBURBS_URL, 60)]
    assert static.SUBURBS_FILE.exists()

    again = static.build_suburb_boundaries()
    assert again == collection
    assert len(calls) == 1


def test_optional_dataset_failure_is_skipped(static_dir, monkeypatch, capsys):
    def failing_get(url, timeout):
        raise requests.ConnectionError('offline')

    monkeypatch.setattr(static.requests, 'get', failing_get)
    static.build_dataset('suburbs')
    assert 'Skipping suburbs' in capsys.readouterr().out


def test_required_dataset_failure_propagates(tmp_path, static_dir, monkeypatch):
    monkeypatch.setattr(static, 'SHAPEFILE_PATH', tmp_path / 'absent.shp')
    with pytest.raises(FileNotFoundError):
        static.build_dataset('fires')
