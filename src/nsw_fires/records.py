"""Fire record model and the validity rules shared by every chart pipeline."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

import pandas as pd

SENTINEL_START = pd.Timestamp('1899-11-29T14:00:00.000Z')
YEAR_TIMEZONE = os.environ.get('NSW_FIRES_YEAR_TZ', 'UTC')
# Timezone the source shapefile dates are recorded in; calendar dates shown to users use it too.
SOURCE_TIMEZONE = os.environ.get('NSW_FIRES_SOURCE_TZ', 'Australia/Sydney')
MIN_YEAR = 1970
MAX_YEAR = 2024

WILDFIRE = 'Wildfire'
PRESCRIBED_BURN = 'Prescribed Burn'
FIRE_TYPES = (WILDFIRE, PRESCRIBED_BURN)

# Column names used by the static fires-with-coords.json asset.
SOURCE_COLUMNS = {
    'start_date': 'StartDate',
    'area_ha': 'AreaHa',
    'fire_type': 'd_FireType',
    'label': 'Label',
    'fire_name': 'FireName',
    'longitude': 'longitude',
    'latitude': 'latitude',
}


def _clean_number(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


def parse_start_date(value) -> Optional[pd.Timestamp]:
    if value is None or value == '':
        return None
    stamp = pd.to_datetime(value, utc=True, errors='coerce', format='ISO8601')
    if pd.isna(stamp):
        return None
    return stamp


@dataclass(frozen=True)
class FireRecord:
    """One fire polygon; ``start_date`` is held as a UTC timestamp (naive values are taken as UTC)."""

    start_date: Optional[pd.Timestamp] = None
    area_ha: Optional[float] = None
    fire_type: Optional[str] = None
    label: Optional[str] = None
    fire_name: Optional[str] = None
    longitude: Optional[float] = None
    latitude: Optional[float] = None

    def __post_init__(self):
        if self.start_date is None:
            return
        stamp = pd.Timestamp(self.start_date)
        stamp = stamp.tz_localize('UTC') if stamp.tzinfo is None else stamp.tz_convert('UTC')
        object.__setattr__(self, 'start_date', stamp)

    @classmethod
    def from_mapping(cls, row: Mapping) -> 'FireRecord':
        return cls(
            start_date=parse_start_date(row.get(SOURCE_COLUMNS['start_date'])),
            area_ha=_clean_number(row.get(SOURCE_COLUMNS['area_ha'])),
            fire_type=_clean_text(row.get(SOURCE_COLUMNS['fire_type'])),
            label=_clean_text(row.get(SOURCE_COLUMNS['label'])),
            fire_name=_clean_text(row.get(SOURCE_COLUMNS['fire_name'])),
            longitude=_clean_number(row.get(SOURCE_COLUMNS['longitude'])),
            latitude=_clean_number(row.get(SOURCE_COLUMNS['latitude'])),
        )

    @property
    def is_sentinel(self) -> bool:
        return self.start_date is not None and self.start_date == SENTINEL_START

    @property
    def local_start(self) -> Optional[pd.Timestamp]:
        if self.start_date is None:
            return None
        return self.start_date.tz_convert(YEAR_TIMEZONE)

    @property
    def display_date(self) -> Optional[str]:
        """Calendar start date in the source timezone, e.g. ``2019-12-01``."""
        if self.start_date is None:
            return None
        return self.start_date.tz_convert(SOURCE_TIMEZONE).strftime('%Y-%m-%d')

    @property
    def year(self) -> Optional[int]:
        local = self.local_start
        return None if local is None else int(local.year)

    @property
    def month(self) -> Optional[int]:
        """Zero-based month of the start date (January is 0)."""
        local = self.local_start
        return None if local is None else int(local.month) - 1

    @property
    def area_or_zero(self) -> float:
        return self.area_ha or 0.0

    @property
    def has_area(self) -> bool:
        return bool(self.area_ha and self.area_ha > 0)

    @property
    def has_coordinates(self) -> bool:
        # Zero is treated as missing, matching how the source export blanks coordinates.
        return bool(self.longitude) and bool(self.latitude)

    @property
    def category(self) -> str:
        """Fire type folded to the two chart categories."""
        return PRESCRIBED_BURN if self.fire_type == PRESCRIBED_BURN else WILDFIRE

    @property
    def display_name(self) -> str:
        return self.label or self.fire_name or 'Unknown'


def is_valid(record: FireRecord, min_year: int = MIN_YEAR, max_year: int = MAX_YEAR) -> bool:
    if record.start_date is None or record.is_sentinel:
        return False
    return min_year <= record.year <= max_year


def valid_fires(
    records: Iterable[FireRecord],
    min_year: int = MIN_YEAR,
    max_year: int = MAX_YEAR,
) -> List[FireRecord]:
    return [record for record in records if is_valid(record, min_year, max_year)]


def records_from_frame(df: pd.DataFrame) -> List[FireRecord]:
    df = df.copy()
    for column in SOURCE_COLUMNS.values():
        if column not in df.columns:
            df[column] = None
    df['StartDate'] = pd.to_datetime(df['StartDate'], utc=True, errors='coerce', format='ISO8601')
    records = []
    for row in df.to_dict(orient='records'):
        start = row['StartDate']
        records.append(
            FireRecord(
                start_date=None if pd.isna(start) else start,
                area_ha=_clean_number(row['AreaHa']),
                fire_type=_clean_text(row['d_FireType']),
                label=_clean_text(row['Label']),
                fire_name=_clean_text(row['FireName']),
                longitude=_clean_number(row['longitude']),
                latitude=_clean_number(row['latitude']),
            )
        )
    return records
