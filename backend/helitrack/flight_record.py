"""
flight_record.py
~~~~~~~~~~~~~~~~
The canonical, provider-independent aircraft record and the per-provider
mappings into it.

The JSON produced by :meth:`FlightRecord.to_dict` is the wire contract of
``/api/heli/live``: field names and units (feet, knots, degrees, ISO-8601
UTC) stay the same whichever provider is active.

Unit handling is a per-provider constant, never sniffed at runtime:

=========  ===========  ============
provider   altitude     ground speed
=========  ===========  ============
adsb.fi    feet         knots
OpenSky    metres → ft  m/s → knots
=========  ===========  ============
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Any, Final, Literal, Sequence

from dateutil import tz

from .constants import M_TO_FT, MPS_TO_KT

UTC: Final = tz.UTC

ACTIVE: Final = "active"
LANDED: Final = "landed"
UNKNOWN_TYPE: Final = "other"


@dataclass(frozen=True)
class FlightRecord:
    callsign: str
    aircraft_type: str
    latitude: float
    longitude: float
    altitude_ft: int | None
    ground_speed_kt: int | None
    heading_deg: int | None
    status: Literal["active", "landed"]
    operator_label: str | None
    last_seen: str  # ISO-8601 UTC
    icao_address: str
    likely_rotorcraft: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Wire representation (camelCase keys)."""
        return {
            "callsign": self.callsign,
            "aircraftType": self.aircraft_type,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitudeFeet": self.altitude_ft,
            "groundSpeedKnots": self.ground_speed_kt,
            "headingDegrees": self.heading_deg,
            "status": self.status,
            "operatorLabel": self.operator_label,
            "lastSeenTimestamp": self.last_seen,
            "icaoAddress": self.icao_address,
            "likelyRotorcraft": self.likely_rotorcraft,
        }


# ── small coercion helpers ───────────────────────────────────────────────
def finite(value: Any) -> float | None:
    """*value* as a float if it is a finite real number, else ``None``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def has_position(lat: Any, lon: Any) -> bool:
    """Both coordinates present and finite."""
    return finite(lat) is not None and finite(lon) is not None


def nearest(value: float | None, factor: float = 1.0) -> int | None:
    """Scale and round half-up to an int; ``None`` stays ``None``."""
    if value is None:
        return None
    return int(math.floor(value * factor + 0.5))


def heading(value: Any) -> int | None:
    """Track in whole degrees, 0..359."""
    rounded = nearest(finite(value))
    return None if rounded is None else rounded % 360


def iso_utc(epoch_sec: float) -> str:
    return dt.datetime.fromtimestamp(epoch_sec, UTC).isoformat(timespec="seconds")


def _callsign(raw: Any, icao: str) -> str:
    text = raw.strip() if isinstance(raw, str) else ""
    return text or icao


def _label(raw: Any) -> str | None:
    text = raw.strip() if isinstance(raw, str) else ""
    return text or None


# ── adsb.fi (readsb JSON) ────────────────────────────────────────────────
def from_adsbfi(ac: dict[str, Any], now: float) -> FlightRecord:
    """
    Map one adsb.fi ``aircraft`` entry (already known to have a position).

    Args:
        ac:  readsb-style aircraft dict.
        now: Payload reference time (epoch seconds); ``seen``/``seen_pos``
             are seconds *before* it.
    """
    icao = str(ac.get("hex", "")).strip().lower()
    on_ground = ac.get("alt_baro") == "ground"

    if on_ground:
        altitude, status = 0, LANDED
    else:
        baro = finite(ac.get("alt_baro"))
        altitude = nearest(baro if baro is not None else finite(ac.get("alt_geom")))
        status = ACTIVE

    ages = [a for a in (finite(ac.get("seen_pos")), finite(ac.get("seen"))) if a is not None]
    last_seen = now - min(ages) if ages else now

    return FlightRecord(
        callsign=_callsign(ac.get("flight"), icao),
        aircraft_type=_label(ac.get("t")) or UNKNOWN_TYPE,
        latitude=float(ac["lat"]),
        longitude=float(ac["lon"]),
        altitude_ft=altitude,
        ground_speed_kt=nearest(finite(ac.get("gs"))),
        heading_deg=heading(ac.get("track")),
        status=status,
        operator_label=_label(ac.get("ownOp")),
        last_seen=iso_utc(last_seen),
        icao_address=icao,
    )


# ── OpenSky state vectors ────────────────────────────────────────────────
# [0]=icao24 [1]=callsign [3]=time_position [4]=last_contact [5]=longitude
# [6]=latitude [7]=baro_altitude [8]=on_ground [9]=velocity [10]=true_track
# [13]=geo_altitude [17]=category (only with extended=1)
OPENSKY_MIN_FIELDS: Final[int] = 14


def _at(state: Sequence[Any], idx: int) -> Any:
    return state[idx] if len(state) > idx else None


def from_opensky(state: Sequence[Any], fetched_at: float) -> FlightRecord:
    """Map one OpenSky state vector (already known to have a position)."""
    icao = str(_at(state, 0) or "").strip().lower()
    on_ground = bool(_at(state, 8))

    if on_ground:
        altitude, status = 0, LANDED
    else:
        baro = finite(_at(state, 7))
        altitude = nearest(baro if baro is not None else finite(_at(state, 13)), M_TO_FT)
        status = ACTIVE

    stamps = [t for t in (finite(_at(state, 3)), finite(_at(state, 4))) if t is not None]

    return FlightRecord(
        callsign=_callsign(_at(state, 1), icao),
        aircraft_type=UNKNOWN_TYPE,
        latitude=float(state[6]),
        longitude=float(state[5]),
        altitude_ft=altitude,
        ground_speed_kt=nearest(finite(_at(state, 9)), MPS_TO_KT),
        heading_deg=heading(_at(state, 10)),
        status=status,
        operator_label=None,
        last_seen=iso_utc(max(stamps) if stamps else fetched_at),
        icao_address=icao,
    )


__all__ = [
    "FlightRecord",
    "from_adsbfi",
    "from_opensky",
    "has_position",
    "finite",
    "nearest",
    "heading",
    "iso_utc",
]
