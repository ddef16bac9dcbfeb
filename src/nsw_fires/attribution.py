"""Resolve fire coordinates to NSW suburb names.

Containment is tested with ray casting against the first ring of each
boundary (the first ring of the first part for a MultiPolygon; holes and the
remaining parts are ignored). When no boundary contains the point, the suburb
with the nearest planar centroid wins.
"""
from __future__ import annotations

import math
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from nsw_fires.records import FireRecord, valid_fires

UNKNOWN_REGION = 'Unknown'
NAME_KEYS = ('name', 'nsw_loca_2')

Point = Tuple[float, float]
Ring = Sequence[Sequence[float]]

_WORD_START = re.compile(r'\b\w')


def title_case(name: str) -> str:
    return _WORD_START.sub(lambda match: match.group(0).upper(), name.lower())


def feature_name(feature: Mapping) -> Optional[str]:
    properties = feature.get('properties') or {}
    for key in NAME_KEYS:
        value = properties.get(key)
        if value:
            return str(value)
    return None


def _outer_ring(geometry: Mapping) -> Ring:
    coords = geometry.get('coordinates') or []
    if geometry.get('type') == 'MultiPolygon':
        return coords[0][0] if coords and coords[0] else []
    return coords[0] if coords else []


def point_in_polygon(point: Point, geometry: Mapping) -> bool:
    x, y = point
    ring = _outer_ring(geometry)
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def _polygons(geometry: Mapping) -> List[Sequence[Ring]]:
    coords = geometry.get('coordinates') or []
    if geometry.get('type') == 'MultiPolygon':
        return list(coords)
    if geometry.get('type') == 'Polygon':
        return [coords]
    return []


def _ring_moments(ring: Ring) -> Tuple[float, float, float]:
    area = cx = cy = 0.0
    for (x0, y0, *_), (x1, y1, *_) in zip(ring, list(ring[1:]) + list(ring[:1])):
        cross = x0 * y1 - x1 * y0
        area += cross
        cx += (x0 + x1) * cross
        cy += (y0 + y1) * cross
    return area / 2, cx / 6, cy / 6


def geometry_centroid(geometry: Optional[Mapping]) -> Optional[Point]:
    """Area-weighted centroid of every polygon part, holes subtracted."""
    if not geometry:
        return None
    total_area = total_x = total_y = 0.0
    vertices: List[Sequence[float]] = []
    for polygon in _polygons(geometry):
        for index, ring in enumerate(polygon):
            if not ring:
                continue
            vertices.extend(ring)
            area, mx, my = _ring_moments(ring)
            # Exterior and hole windings are not trusted; the sign comes from the ring role.
            sign = 1.0 if index == 0 else -1.0
            if area < 0:
                area, mx, my = -area, -mx, -my
            total_area += sign * area
            total_x += sign * mx
            total_y += sign * my
    if not vertices:
        return None
    if abs(total_area) < 1e-15:
        return (
            sum(v[0] for v in vertices) / len(vertices),
            sum(v[1] for v in vertices) / len(vertices),
        )
    return total_x / total_area, total_y / total_area


def find_suburb(
    longitude: Optional[float],
    latitude: Optional[float],
    features: Sequence[Mapping],
) -> str:
    if longitude is None or latitude is None or not features:
        return UNKNOWN_REGION
    point = (longitude, latitude)

    for feature in features:
        geometry = feature.get('geometry')
        if geometry and point_in_polygon(point, geometry):
            name = feature_name(feature)
            return title_case(name) if name else UNKNOWN_REGION

    nearest: Optional[str] = None
    best_dist = float('inf')
    for feature in features:
        centroid = geometry_centroid(feature.get('geometry'))
        if centroid is None:
            continue
        dist = math.hypot(centroid[0] - longitude, centroid[1] - latitude)
        if dist < best_dist:
            best_dist = dist
            nearest = feature_name(feature)
    return title_case(nearest) if nearest else UNKNOWN_REGION


def attribute_regions(
    fires: Iterable[FireRecord],
    features: Sequence[Mapping],
    stride: int,
) -> List[Tuple[FireRecord, str]]:
    """Attach a suburb to every ``stride``-th valid fire that has coordinates.

    Attribution costs O(features) per fire, so callers pick the sampling
    stride; ``stride=1`` attributes every fire.
    """
    if stride < 1:
        raise ValueError(f"stride must be >= 1, got {stride}")
    located = [fire for fire in valid_fires(fires) if fire.has_coordinates]
    sampled = located[::stride]
    return [(fire, find_suburb(fire.longitude, fire.latitude, features)) for fire in sampled]


def regional_hotspots(
    fires: Iterable[FireRecord],
    features: Sequence[Mapping],
    stride: int,
    limit: int = 10,
) -> List[Dict]:
    totals: Dict[str, Dict] = {}
    for fire, region in attribute_regions(fires, features, stride):
        entry = totals.setdefault(region, {'location': region, 'count': 0, 'totalArea': 0.0})
        entry['count'] += 1
        entry['totalArea'] += fire.area_or_zero
    ordered = sorted(totals.values(), key=lambda entry: entry['count'], reverse=True)
    return ordered[:limit]
