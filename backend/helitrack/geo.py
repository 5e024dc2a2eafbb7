"""
geo.py
~~~~~~
Pure geometry helpers: bounding boxes, great-circle distance, the
box → center/radius conversion used by radius-only providers, and the
quantized region keys the regional cache is indexed by.

All angles are decimal degrees. Longitude wrap-around (boxes crossing the
antimeridian) is not handled.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from .constants import EARTH_RADIUS_KM, KM_TO_NM

#: km per degree of latitude / of longitude at the equator
KM_PER_DEG_LAT = 111.0
KM_PER_DEG_LON = 111.32


class BoundingBox(NamedTuple):
    """Viewport rectangle; ``list(box)`` is the wire order."""

    south: float
    north: float
    west: float
    east: float


class CenterRadius(NamedTuple):
    center_lat: float
    center_lon: float
    radius_nm: int


def distance_km(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    """Great-circle distance in km between two lat/lon points (haversine)."""
    φ1, φ2 = map(math.radians, (lat_a, lat_b))
    dφ = math.radians(lat_b - lat_a)
    dλ = math.radians(lon_b - lon_a)
    a = math.sin(dφ / 2) ** 2 + math.cos(φ1) * math.cos(φ2) * math.sin(dλ / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def box_center(box: BoundingBox) -> tuple[float, float]:
    """Arithmetic midpoint of the corners (not the geodesic midpoint)."""
    return (box.south + box.north) / 2, (box.west + box.east) / 2


def box_to_center_radius(box: BoundingBox) -> CenterRadius:
    """
    Convert *box* into the smallest whole-nautical-mile circle covering it.

    The radius is measured to the farthest corner and rounded **up**;
    rounding down would drop aircraft near the box edge. On a sphere the
    corners nearer the equator sit slightly farther from the midpoint, so
    the north-east corner alone is not always enough.
    """
    lat, lon = box_center(box)
    radius_km = max(
        distance_km(lat, lon, corner_lat, corner_lon)
        for corner_lat in (box.south, box.north)
        for corner_lon in (box.west, box.east)
    )
    radius_nm = max(1, math.ceil(radius_km * KM_TO_NM))
    return CenterRadius(lat, lon, radius_nm)


def box_around(lat: float, lon: float, radius_km: float) -> BoundingBox:
    """Box extending *radius_km* from (lat, lon) in each direction."""
    lat_offset = radius_km / KM_PER_DEG_LAT
    # cos → 0 at the poles; clamp so the box stays finite
    cos_lat = max(math.cos(math.radians(lat)), 0.01)
    lon_offset = radius_km / (KM_PER_DEG_LON * cos_lat)
    return BoundingBox(
        south=max(-90.0, lat - lat_offset),
        north=min(90.0, lat + lat_offset),
        west=lon - lon_offset,
        east=lon + lon_offset,
    )


def contains(box: BoundingBox, lat: float, lon: float) -> bool:
    """Inclusive point-in-box test."""
    return box.south <= lat <= box.north and box.west <= lon <= box.east


def covers(outer: BoundingBox, inner: BoundingBox) -> bool:
    """True when *inner* lies entirely inside *outer* (edges included)."""
    return (
        outer.south <= inner.south
        and inner.north <= outer.north
        and outer.west <= inner.west
        and inner.east <= outer.east
    )


def _quantize(value: float, precision: int) -> float:
    # + 0.0 folds -0.0 into 0.0 so both sides of zero share one key
    return round(value, precision) + 0.0


def region_key(box: BoundingBox, precision: int) -> str:
    """
    Cache key for *box*: its center rounded to *precision* decimals.

    Any two boxes whose centers round to the same point share a key,
    whatever their extents.
    """
    lat, lon = box_center(box)
    return f"{_quantize(lat, precision):.{precision}f},{_quantize(lon, precision):.{precision}f}"


def region_cell(box: BoundingBox, precision: int, radius_km: float) -> BoundingBox:
    """Area fetched upstream for *box*'s region: a box around the quantized center."""
    lat, lon = box_center(box)
    return box_around(_quantize(lat, precision), _quantize(lon, precision), radius_km)


__all__ = [
    "BoundingBox",
    "CenterRadius",
    "distance_km",
    "box_center",
    "box_to_center_radius",
    "box_around",
    "contains",
    "covers",
    "region_key",
    "region_cell",
]
