"""
tests/test_geo.py
~~~~~~~~~~~~~~~~~
Great-circle distance, box → covering circle, region keys and cells.
"""

from __future__ import annotations

import math

import pytest

from helitrack.constants import KM_TO_NM
from helitrack.geo import (
    BoundingBox,
    box_around,
    box_center,
    box_to_center_radius,
    contains,
    covers,
    distance_km,
    region_cell,
    region_key,
)


def test_distance_one_degree_on_equator() -> None:
    assert distance_km(0.0, 0.0, 0.0, 1.0) == pytest.approx(111.195, abs=0.01)


def test_distance_is_symmetric_and_zero_on_same_point() -> None:
    assert distance_km(51.0, -114.0, 51.0, -114.0) == 0.0
    a = distance_km(51.0, -114.0, 49.0, -110.0)
    b = distance_km(49.0, -110.0, 51.0, -114.0)
    assert a == pytest.approx(b)


def test_center_is_arithmetic_midpoint() -> None:
    box = BoundingBox(50.70, 51.30, -114.40, -113.70)
    lat, lon = box_center(box)
    assert lat == pytest.approx(51.0)
    assert lon == pytest.approx(-114.05)


@pytest.mark.parametrize(
    "box",
    [
        BoundingBox(50.70, 51.30, -114.40, -113.70),
        BoundingBox(-34.2, -33.6, 150.8, 151.4),  # southern hemisphere
        BoundingBox(10.0, 12.5, -5.0, 5.0),  # wide
        BoundingBox(59.0, 64.0, 10.0, 11.0),  # tall, high latitude
        BoundingBox(-1.0, 1.0, -1.0, 1.0),  # straddles the equator
        BoundingBox(45.0, 45.0, 7.0, 7.0),  # degenerate point
    ],
)
def test_circle_covers_every_corner(box: BoundingBox) -> None:
    lat, lon, radius_nm = box_to_center_radius(box)
    assert isinstance(radius_nm, int) and radius_nm >= 1
    for corner_lat in (box.south, box.north):
        for corner_lon in (box.west, box.east):
            assert distance_km(lat, lon, corner_lat, corner_lon) * KM_TO_NM <= radius_nm


def test_radius_is_rounded_up_not_to_nearest() -> None:
    box = BoundingBox(50.70, 51.30, -114.40, -113.70)
    _, _, radius_nm = box_to_center_radius(box)
    lat, lon = box_center(box)
    farthest = max(
        distance_km(lat, lon, c_lat, c_lon)
        for c_lat in (box.south, box.north)
        for c_lon in (box.west, box.east)
    )
    assert radius_nm == math.ceil(farthest * KM_TO_NM)
    assert radius_nm >= distance_km(lat, lon, box.north, box.east) * KM_TO_NM


def test_box_around_is_symmetric() -> None:
    box = box_around(51.0, -114.0, 50.0)
    assert box.north - 51.0 == pytest.approx(51.0 - box.south)
    assert box.east - (-114.0) == pytest.approx(-114.0 - box.west)
    # 50 km ≈ 0.45° of latitude
    assert box.north - box.south == pytest.approx(100.0 / 111.0)
    # longitude degrees shrink with latitude, so the box is wider in degrees
    assert box.east - box.west > box.north - box.south


def test_box_around_stays_finite_near_pole() -> None:
    box = box_around(89.99, 0.0, 50.0)
    assert box.north <= 90.0
    assert all(math.isfinite(v) for v in box)


def test_contains_is_inclusive() -> None:
    box = BoundingBox(50.0, 51.0, -115.0, -114.0)
    assert contains(box, 50.0, -115.0)
    assert contains(box, 51.0, -114.0)
    assert not contains(box, 51.0001, -114.5)


def test_covers() -> None:
    outer = BoundingBox(50.0, 52.0, -116.0, -113.0)
    assert covers(outer, outer)
    assert covers(outer, BoundingBox(50.5, 51.5, -115.0, -114.0))
    assert not covers(outer, BoundingBox(49.9, 51.5, -115.0, -114.0))
    assert not covers(outer, BoundingBox(50.5, 51.5, -115.0, -112.9))


def test_boxes_with_same_rounded_center_share_key() -> None:
    small = BoundingBox(50.92, 51.12, -114.18, -113.98)  # center 51.02, -114.08
    large = BoundingBox(50.48, 51.48, -114.62, -113.62)  # center 50.98, -114.12
    assert region_key(small, 1) == region_key(large, 1) == "51.0,-114.1"
    # finer precision separates them
    assert region_key(small, 2) != region_key(large, 2)


def test_region_key_is_idempotent() -> None:
    box = BoundingBox(50.92, 51.12, -114.18, -113.98)
    assert region_key(box, 1) == region_key(box, 1)
    assert region_key(box, 2) == "51.02,-114.08"


def test_negative_zero_folds_into_zero() -> None:
    west_of_zero = BoundingBox(-0.06, 0.02, -0.03, 0.01)  # center -0.02, -0.01
    east_of_zero = BoundingBox(0.00, 0.04, 0.00, 0.02)  # center 0.02, 0.01
    assert region_key(west_of_zero, 1) == region_key(east_of_zero, 1) == "0.0,0.0"


def test_region_cell_is_centered_on_quantized_center() -> None:
    box = BoundingBox(50.92, 51.12, -114.18, -113.98)
    cell = region_cell(box, 1, 50.0)
    lat, lon = box_center(cell)
    assert lat == pytest.approx(51.0)
    assert lon == pytest.approx(-114.1)
    assert contains(cell, *box_center(box))
