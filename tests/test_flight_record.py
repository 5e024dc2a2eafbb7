"""
tests/test_flight_record.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Per-provider mapping into the canonical FlightRecord.
"""

from __future__ import annotations

import dataclasses
import datetime as dt

import pytest

from helitrack.flight_record import (
    FlightRecord,
    finite,
    from_adsbfi,
    from_opensky,
    has_position,
    heading,
    nearest,
)

NOW = 1_717_243_200.0  # 2024-06-01T12:00:00Z


def _opensky_state(**overrides):
    state = [
        "c0ffee",  # 0 icao24
        "POL21   ",  # 1 callsign
        "Canada",  # 2 origin_country
        NOW - 4,  # 3 time_position
        NOW - 1,  # 4 last_contact
        -114.05,  # 5 longitude
        51.0,  # 6 latitude
        304.8,  # 7 baro_altitude (m)
        False,  # 8 on_ground
        51.4444,  # 9 velocity (m/s)
        90.4,  # 10 true_track
        0.0,  # 11 vertical_rate
        None,  # 12 sensors
        320.0,  # 13 geo_altitude (m)
        "1200",  # 14 squawk
        False,  # 15 spi
        0,  # 16 position_source
        8,  # 17 category
    ]
    for idx, value in overrides.items():
        state[int(idx.lstrip("_"))] = value
    return state


# ── adsb.fi ──────────────────────────────────────────────────────────────
def test_adsbfi_passes_feet_and_knots_through(adsb_aircraft) -> None:
    rec = from_adsbfi(adsb_aircraft(t="EC35", ownOp="STARS"), NOW)
    assert rec.altitude_ft == 2500
    assert rec.ground_speed_kt == 110
    assert rec.heading_deg == 271
    assert rec.status == "active"
    assert rec.aircraft_type == "EC35"
    assert rec.operator_label == "STARS"
    assert rec.callsign == "STARS7"
    assert rec.icao_address == "c0ffee"


def test_adsbfi_ground_sentinel_forces_landed(adsb_aircraft) -> None:
    rec = from_adsbfi(adsb_aircraft(alt_baro="ground", alt_geom=3400), NOW)
    assert rec.altitude_ft == 0
    assert rec.status == "landed"


def test_adsbfi_falls_back_to_geometric_altitude(adsb_aircraft) -> None:
    ac = adsb_aircraft(alt_geom=1234.6)
    del ac["alt_baro"]
    rec = from_adsbfi(ac, NOW)
    assert rec.altitude_ft == 1235
    assert rec.status == "active"


def test_adsbfi_blank_callsign_uses_hex(adsb_aircraft) -> None:
    rec = from_adsbfi(adsb_aircraft(flight="     "), NOW)
    assert rec.callsign == "c0ffee"
    assert from_adsbfi(adsb_aircraft(flight=None), NOW).callsign == "c0ffee"


def test_adsbfi_missing_fields_are_absent_not_zero(adsb_aircraft) -> None:
    ac = adsb_aircraft()
    for key in ("gs", "track", "alt_baro", "seen", "seen_pos"):
        ac.pop(key)
    rec = from_adsbfi(ac, NOW)
    assert rec.altitude_ft is None
    assert rec.ground_speed_kt is None
    assert rec.heading_deg is None
    assert rec.aircraft_type == "other"
    assert rec.operator_label is None
    # no age fields → fetch time
    assert rec.last_seen == "2024-06-01T12:00:00+00:00"


def test_adsbfi_heading_zero_is_kept(adsb_aircraft) -> None:
    assert from_adsbfi(adsb_aircraft(track=0), NOW).heading_deg == 0


def test_adsbfi_last_seen_uses_freshest_age(adsb_aircraft) -> None:
    rec = from_adsbfi(adsb_aircraft(seen_pos=30.0, seen=10.0), NOW)
    expected = dt.datetime.fromtimestamp(NOW - 10, dt.timezone.utc)
    assert dt.datetime.fromisoformat(rec.last_seen) == expected.replace(microsecond=0)


# ── OpenSky ──────────────────────────────────────────────────────────────
def test_opensky_converts_si_units() -> None:
    rec = from_opensky(_opensky_state(), NOW)
    assert rec.altitude_ft == 1000  # 304.8 m
    assert rec.ground_speed_kt == 100  # 51.4444 m/s
    assert rec.heading_deg == 90
    assert rec.status == "active"
    assert rec.callsign == "POL21"
    assert rec.aircraft_type == "other"
    assert rec.operator_label is None
    assert (rec.latitude, rec.longitude) == (51.0, -114.05)


def test_opensky_on_ground_forces_zero_altitude() -> None:
    rec = from_opensky(_opensky_state(_8=True), NOW)
    assert rec.altitude_ft == 0
    assert rec.status == "landed"


def test_opensky_geometric_fallback() -> None:
    rec = from_opensky(_opensky_state(_7=None), NOW)
    assert rec.altitude_ft == nearest(320.0, 3.28084)


def test_opensky_last_seen_is_freshest_timestamp() -> None:
    rec = from_opensky(_opensky_state(), NOW)
    assert dt.datetime.fromisoformat(rec.last_seen).timestamp() == pytest.approx(NOW - 1)


def test_opensky_missing_timestamps_use_fetch_time() -> None:
    rec = from_opensky(_opensky_state(_3=None, _4=None), NOW)
    assert dt.datetime.fromisoformat(rec.last_seen).timestamp() == pytest.approx(NOW)


# ── helpers / record ─────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "lat, lon, ok",
    [
        (51.0, -114.0, True),
        (0, 0, True),
        (None, -114.0, False),
        (51.0, float("nan"), False),
        (float("inf"), 1.0, False),
        ("51.0", -114.0, False),
        (True, 1.0, False),
    ],
)
def test_has_position(lat, lon, ok) -> None:
    assert has_position(lat, lon) is ok


def test_nearest_rounds_half_up() -> None:
    assert nearest(2.5) == 3
    assert nearest(3.5) == 4
    assert nearest(None) is None
    assert finite("12") is None


def test_record_is_immutable_and_serialises_wire_keys(adsb_aircraft) -> None:
    rec = from_adsbfi(adsb_aircraft(), NOW)
    with pytest.raises(dataclasses.FrozenInstanceError):
        rec.latitude = 0.0  # type: ignore[misc]
    wire = rec.to_dict()
    assert set(wire) == {
        "callsign",
        "aircraftType",
        "latitude",
        "longitude",
        "altitudeFeet",
        "groundSpeedKnots",
        "headingDegrees",
        "status",
        "operatorLabel",
        "lastSeenTimestamp",
        "icaoAddress",
        "likelyRotorcraft",
    }
    assert isinstance(rec, FlightRecord)
    assert wire["likelyRotorcraft"] is False


@pytest.mark.parametrize(
    "track, expected",
    [(359.7, 0), (359.4, 359), (0.0, 0), (360.0, 0), (-0.4, 0), (-10.0, 350), (None, None)],
)
def test_heading_stays_in_compass_range(track, expected) -> None:
    assert heading(track) == expected


def test_heading_wraps_for_both_providers(adsb_aircraft) -> None:
    assert from_adsbfi(adsb_aircraft(track=359.7), NOW).heading_deg == 0
    assert from_opensky(_opensky_state(_10=359.7), NOW).heading_deg == 0
