"""
tests/conftest.py
~~~~~~~~~~~~~~~~~
Global pytest fixtures.

* ``counting_adapter`` – call-counting stand-in for an upstream adapter
  that returns canned :class:`FlightRecord` batches (no HTTP at all).
* ``canned_adsbfi``    – a real :class:`AdsbFiAdapter` whose HTTP round
  trip is replaced by a canned payload, so normalization and
  classification run for real.
* ``adsb_aircraft``    – builder for readsb-style aircraft dicts.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from helitrack.adsbfi_service import AdsbFiAdapter
from helitrack.flight_record import FlightRecord
from helitrack.geo import BoundingBox
from helitrack.upstream import FetchResult

pytest_plugins = ["pytest_asyncio"]


def make_record(lat: float, lon: float, icao: str = "abc123", **kw: Any) -> FlightRecord:
    fields: dict[str, Any] = dict(
        callsign=icao.upper(),
        aircraft_type="other",
        latitude=lat,
        longitude=lon,
        altitude_ft=1500,
        ground_speed_kt=90,
        heading_deg=180,
        status="active",
        operator_label=None,
        last_seen="2025-06-01T12:00:00+00:00",
        icao_address=icao,
        likely_rotorcraft=False,
    )
    fields.update(kw)
    return FlightRecord(**fields)


class CountingAdapter:
    """Duck-typed adapter: records every region asked for."""

    name = "stub"

    def __init__(
        self,
        records: tuple[FlightRecord, ...] = (),
        *,
        delay: float = 0.0,
        error: BaseException | None = None,
    ) -> None:
        self.records = records
        self.delay = delay
        self.error = error
        self.calls: list[BoundingBox] = []

    async def fetch(self, region: BoundingBox, timeout: float | None = None) -> FetchResult:
        self.calls.append(region)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return FetchResult(0.0, tuple(self.records))


class CannedAdsbFi(AdsbFiAdapter):
    """AdsbFiAdapter with the network replaced by *payload*."""

    def __init__(self, payload: dict[str, Any], **kw: Any) -> None:
        super().__init__(backoff=0.0, **kw)
        self.payload = payload
        self.queries: list[Any] = []

    async def _request(self, query, timeout):  # type: ignore[override]
        self.queries.append(query)
        return self.payload


@pytest.fixture
def counting_adapter() -> Callable[..., CountingAdapter]:
    return CountingAdapter


@pytest.fixture
def canned_adsbfi() -> Callable[..., CannedAdsbFi]:
    return CannedAdsbFi


@pytest.fixture
def record() -> Callable[..., FlightRecord]:
    return make_record


@pytest.fixture
def adsb_aircraft() -> Callable[..., dict[str, Any]]:
    """Return a builder for one readsb aircraft entry."""

    def _build(lat: Any = 51.0, lon: Any = -114.05, **kw: Any) -> dict[str, Any]:
        ac: dict[str, Any] = {
            "hex": "c0ffee",
            "flight": "STARS7  ",
            "lat": lat,
            "lon": lon,
            "alt_baro": 2500,
            "gs": 110.4,
            "track": 270.6,
            "seen_pos": 1.5,
            "seen": 0.5,
        }
        ac.update(kw)
        return ac

    return _build
