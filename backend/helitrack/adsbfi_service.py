"""
adsbfi_service.py
~~~~~~~~~~~~~~~~~
Live traffic from the free **adsb.fi** open-data API (unfiltered ADS-B).

* No authentication.
* Queries by **center point + radius** only, so the region box is turned
  into the smallest covering circle (whole nautical miles, rounded up).
* Altitudes are already feet and speeds knots; ``alt_baro == "ground"``
  is the on-ground sentinel.
* Exposes emitter category, type code, description and owner/operator, so
  all four classifier tiers apply.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Iterable

from .flight_record import FlightRecord, finite, from_adsbfi
from .geo import CenterRadius
from .rotorcraft import TIERS, ClassificationPolicy, Evidence
from .upstream import CENTER_RADIUS, UpstreamAdapter, check_status, decode_json

LOG = logging.getLogger("adsbfi_service")

API_URL: Final = "https://opendata.adsb.fi/api/v2"

#: A7 is the DO-260B rotorcraft emitter category; A5 is what the first
#: deployment keyed on and is kept so existing clients see the same labels.
ROTORCRAFT_CATEGORIES: Final = frozenset({"A7", "A5"})
#: set-level "no ADS-B emitter category information"
NO_INFO_CATEGORIES: Final = frozenset({"A0", "B0", "C0", "D0"})

ADSBFI_POLICY: Final = ClassificationPolicy(
    tiers=frozenset(TIERS),
    categories=ROTORCRAFT_CATEGORIES,
    uninformative=NO_INFO_CATEGORIES,
)


def area_url(query: CenterRadius) -> str:
    """``/lat/{lat}/lon/{lon}/dist/{nm}/`` for *query*."""
    return (
        f"{API_URL}/lat/{query.center_lat:.6f}"
        f"/lon/{query.center_lon:.6f}/dist/{query.radius_nm}/"
    )


class AdsbFiAdapter(UpstreamAdapter):
    name = "adsbfi"
    query_shape = CENTER_RADIUS
    default_policy = ADSBFI_POLICY

    async def _request(self, query: CenterRadius, timeout: float) -> Any:
        resp = await self._send(
            "get", area_url(query), timeout=timeout, headers={"Accept": "application/json"}
        )
        check_status(resp, "adsb.fi")
        return decode_json(resp, "adsb.fi")

    def _entries(self, payload: Any) -> Iterable[dict[str, Any]]:
        if not isinstance(payload, dict):
            return ()
        aircraft = payload.get("aircraft")
        if aircraft is None:
            aircraft = payload.get("ac")  # v2 readsb name
        return [ac for ac in aircraft or () if isinstance(ac, dict)]

    def _position(self, raw: dict[str, Any]) -> tuple[Any, Any]:
        return raw.get("lat"), raw.get("lon")

    def _normalize(self, raw: dict[str, Any], payload: Any, fetched_at: float) -> FlightRecord:
        now_ms = finite(payload.get("now")) if isinstance(payload, dict) else None
        now = now_ms / 1000.0 if now_ms is not None else fetched_at
        return from_adsbfi(raw, now)

    def _evidence(self, raw: dict[str, Any], record: FlightRecord) -> Evidence:
        return Evidence(
            category=raw.get("category"),
            operator=record.operator_label,
            type_code=raw.get("t"),
            description=raw.get("desc"),
            altitude_ft=record.altitude_ft,
            speed_kt=record.ground_speed_kt,
        )


__all__ = ["AdsbFiAdapter", "ADSBFI_POLICY", "API_URL", "area_url"]
