"""
WGS84 <-> parcel-local coordinate conversion.

Equirectangular approximation around a centroid: accurate to well under a
meter for extents below ~10 km, which covers any single parcel.
"""

import math
from typing import List, Optional, Sequence, Tuple

from .polygon import LocalPoint, Polygon

# Meters per degree
METERS_PER_DEG_LNG_EQUATOR = 111320.0
METERS_PER_DEG_LAT = 110540.0


def wgs84_to_local(
    lng: float,
    lat: float,
    centroid_lng: float,
    centroid_lat: float,
) -> LocalPoint:
    """
    Convert a WGS84 coordinate to meters relative to a centroid.

    Args:
        lng, lat: Point in degrees
        centroid_lng, centroid_lat: Origin of the local frame in degrees

    Returns:
        LocalPoint with x east and z north
    """
    x = (lng - centroid_lng) * math.cos(math.radians(centroid_lat)) * METERS_PER_DEG_LNG_EQUATOR
    z = (lat - centroid_lat) * METERS_PER_DEG_LAT
    return LocalPoint(x, z)


def local_to_wgs84(
    x: float,
    z: float,
    centroid_lng: float,
    centroid_lat: float,
) -> Tuple[float, float]:
    """Inverse of wgs84_to_local. Returns (lng, lat)."""
    lng = x / (math.cos(math.radians(centroid_lat)) * METERS_PER_DEG_LNG_EQUATOR) + centroid_lng
    lat = z / METERS_PER_DEG_LAT + centroid_lat
    return lng, lat


def _open_ring(ring: Sequence[Sequence[float]]) -> Sequence[Sequence[float]]:
    """Drop the closing vertex of a GeoJSON ring when it repeats the first."""
    if len(ring) > 1 and ring[0][0] == ring[-1][0] and ring[0][1] == ring[-1][1]:
        return ring[:-1]
    return ring


def ring_centroid(ring: Sequence[Sequence[float]]) -> Optional[Tuple[float, float]]:
    """Vertex-average (lng, lat) of a ring, ignoring the closing vertex."""
    points = _open_ring(ring)
    if not points:
        return None
    n = len(points)
    return sum(p[0] for p in points) / n, sum(p[1] for p in points) / n


def geojson_ring_to_local(
    ring: Sequence[Sequence[float]],
    centroid_lng: Optional[float] = None,
    centroid_lat: Optional[float] = None,
) -> Polygon:
    """
    Convert a GeoJSON ring of [lng, lat] pairs to a local polygon.

    The closing duplicate vertex is removed. When no centroid is given the
    ring's vertex average is used as the origin.
    """
    points = _open_ring(ring)
    if not points:
        return []

    if centroid_lng is None or centroid_lat is None:
        centroid_lng, centroid_lat = ring_centroid(points)

    result: List[LocalPoint] = [
        wgs84_to_local(p[0], p[1], centroid_lng, centroid_lat) for p in points
    ]
    return result
