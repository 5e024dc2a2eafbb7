"""viewport.py – clip a region's flights to the exact requested box."""

from __future__ import annotations

from typing import Iterable

from .flight_record import FlightRecord
from .geo import BoundingBox, contains


def clip(records: Iterable[FlightRecord], box: BoundingBox) -> list[FlightRecord]:
    """Records whose position lies inside *box* (edges included)."""
    return [r for r in records if contains(box, r.latitude, r.longitude)]


__all__ = ["clip"]
