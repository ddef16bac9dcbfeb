#!/usr/bin/env python3
"""Build the static JSON assets (fire records + suburb boundaries) for the dashboard."""
from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import date, datetime
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pandas as pd
import requests
import shapefile  # type: ignore
from pyproj import CRS, Transformer

from nsw_fires.records import SOURCE_TIMEZONE

DATA_DIR = Path(os.environ.get('NSW_FIRES_DATA_DIR', Path.cwd() / 'src' / 'data'))
STATIC_DIR = Path(os.environ.get('NSW_FIRES_STATIC_DIR', DATA_DIR / 'static'))
SHAPEFILE_PATH = Path(os.environ.get('NSW_FIRES_SHAPEFILE', DATA_DIR / 'NPWSFireHistory.shp'))
SUBURBS_URL = os.environ.get(
    'NSW_FIRES_SUBURBS_URL',
    'https://raw.githubusercontent.com/anthwri/GeoJson-Data/master/suburb-2-nsw.geojson',
)

DEFAULT_SOURCE_CRS = 'EPSG:4326'

FIRES_FILE = STATIC_DIR / 'fires-with-coords.json'
SUBURBS_FILE = STATIC_DIR / 'australia-states.json'

FIRE_FIELDS = ['StartDate', 'AreaHa', 'Label', 'd_FireType', 'FireName']
EXCLUDED_SUBURBS = ('lord howe',)

DatasetConfig = Dict[str, object]


def _write_json(payload, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding='utf-8')
    _report_written(path)


def _report_written(path: Path) -> None:
    try:
        display_path = path.relative_to(Path.cwd())
    except ValueError:
        display_path = path
    size_mb = path.stat().st_size / 1024 / 1024
    print(f"✔️  Wrote {display_path} ({size_mb:.2f} MB)")


def _format_start_date(value) -> Optional[str]:
    """Render a shapefile date as the UTC instant of local midnight."""
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return None
    local = pd.Timestamp(value).tz_localize(SOURCE_TIMEZONE)
    return local.tz_convert('UTC').strftime('%Y-%m-%dT%H:%M:%S.000Z')


def _clean_area(value) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _source_transformer(shp_path: Path) -> Optional[Transformer]:
    prj_path = shp_path.with_suffix('.prj')
    if prj_path.exists():
        source_crs = CRS.from_wkt(prj_path.read_text(encoding='utf-8', errors='ignore'))
    else:
        source_crs = CRS.from_user_input(DEFAULT_SOURCE_CRS)
    if source_crs == CRS.from_epsg(4326):
        return None
    return Transformer.from_crs(source_crs, 'EPSG:4326', always_xy=True)


# -----------------------------------------------------------------------------------------------
# Builders


def build_fire_records_df(
    max_records: Optional[int] = None,
    store_processed: bool = True,
    force_rebuild: bool = False,
    shp_path: Optional[Path] = None,
) -> pd.DataFrame:
    if FIRES_FILE.exists() and not force_rebuild and max_records is None:
        return pd.DataFrame(json.loads(FIRES_FILE.read_text(encoding='utf-8')))
    shp_path = Path(shp_path or SHAPEFILE_PATH)
    if not shp_path.exists():
        raise FileNotFoundError(f"Missing fire history shapefile: {shp_path}")

    transformer = _source_transformer(shp_path)
    reader = shapefile.Reader(str(shp_path))
    try:
        fields = [field[0] for field in reader.fields[1:]]
        missing = {'StartDate', 'd_FireType'} - set(fields)
        if missing:
            raise RuntimeError(f"Fire shapefile missing fields: {missing}")
        rows: List[dict] = []
        for shape_record in reader.iterShapeRecords():
            attr = {name: value for name, value in zip(fields, shape_record.record)}
            points = shape_record.shape.points
            longitude = latitude = None
            if points:
                longitude = sum(x for x, _ in points) / len(points)
                latitude = sum(y for _, y in points) / len(points)
                if transformer is not None:
                    longitude, latitude = transformer.transform(longitude, latitude)
            rows.append(
                {
                    'StartDate': _format_start_date(attr.get('StartDate')),
                    'AreaHa': _clean_area(attr.get('AreaHa')),
                    'Label': _clean_text(attr.get('Label')),
                    'd_FireType': _clean_text(attr.get('d_FireType')),
                    'FireName': _clean_text(attr.get('FireName')),
                    'longitude': longitude,
                    'latitude': latitude,
                }
            )
            if max_records and len(rows) >= max_records:
                break
    finally:
        reader.close()

    df = pd.DataFrame(rows, columns=FIRE_FIELDS + ['longitude', 'latitude'])
    if store_processed:
        FIRES_FILE.parent.mkdir(parents=True, exist_ok=True)
        df.to_json(FIRES_FILE, orient='records')
        _report_written(FIRES_FILE)
    return df


def _is_excluded_suburb(feature: Dict) -> bool:
    properties = feature.get('properties') or {}
    for key in ('nsw_loca_2', 'name'):
        value = str(properties.get(key) or '').lower()
        if any(excluded in value for excluded in EXCLUDED_SUBURBS):
            return True
    return False


def build_suburb_boundaries(
    store_processed: bool = True,
    force_rebuild: bool = False,
) -> Dict:
    if SUBURBS_FILE.exists() and not force_rebuild:
        return json.loads(SUBURBS_FILE.read_text(encoding='utf-8'))
    response = requests.get(SUBURBS_URL, timeout=60)
    response.raise_for_status()
    collection = response.json()
    features = collection.get('features') or []
    collection['features'] = [feature for feature in features if not _is_excluded_suburb(feature)]
    dropped = len(features) - len(collection['features'])
    if dropped:
        print(f"ℹ️  Dropped {dropped} Lord Howe Island feature(s)")
    if store_processed:
        _write_json(collection, SUBURBS_FILE)
    return collection


# -----------------------------------------------------------------------------------------------
# Dataset registry

DATASETS: Dict[str, DatasetConfig] = {
    'fires': {
        'builder': partial(build_fire_records_df, store_processed=True, force_rebuild=True),
    },
    'suburbs': {
        'builder': partial(build_suburb_boundaries, store_processed=True, force_rebuild=False),
        'optional': True,
    },
}


def build_dataset(key: str) -> None:
    config = DATASETS[key]
    builder: Callable[[], object] = config['builder']  # type: ignore[assignment]
    try:
        builder()
    except (OSError, RuntimeError, requests.RequestException) as exc:
        if config.get('optional'):
            print(f"⚠️  Skipping {key}: {exc}")
            return
        raise


def main() -> None:
    parser = argparse.ArgumentParser(description='Build the static JSON assets for the NSW fires dashboard.')
    parser.add_argument('dataset', nargs='*', help='Optional dataset keys (default: all)')
    args = parser.parse_args()

    keys = args.dataset or list(DATASETS.keys())
    for key in keys:
        if key not in DATASETS:
            print(f"Unknown dataset '{key}'. Available: {', '.join(DATASETS)}", file=sys.stderr)
            continue
        build_dataset(key)


if __name__ == '__main__':
    main()
