"""
live_service.py
~~~~~~~~~~~~~~~
Glue between the HTTP layer and the core: read the viewport out of the
query string, pull the region from the cache, clip to the viewport and
build the response payload.

Public helpers
--------------
    parse_bbox(params, default) -> BoundingBox
    live_flights(box, cache)    -> {"ok", "time", "count", "bbox", "flights"}
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from .errors import MalformedInputError
from .geo import BoundingBox
from .regional_cache import RegionalCache
from .viewport import clip

LOG = logging.getLogger("live_service")

EDGE_PARAMS = ("lamin", "lamax", "lomin", "lomax")


def _to_box(values: list[Any]) -> BoundingBox:
    try:
        south, north, west, east = (float(str(v).strip()) for v in values)
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"not four numbers: {values!r}") from exc
    if not all(math.isfinite(v) for v in (south, north, west, east)):
        raise MalformedInputError(f"non-finite bounds: {values!r}")
    if south > north:
        raise MalformedInputError(f"south {south} > north {north}")
    return BoundingBox(south, north, west, east)


def bbox_from_params(params: Mapping[str, Any]) -> BoundingBox:
    """
    Read ``lamin/lamax/lomin/lomax`` or, failing that, ``bbox=s,n,w,e``.

    Raises:
        MalformedInputError: neither shape parses to four finite numbers.
    """
    errors: list[str] = []
    if any(params.get(p) not in (None, "") for p in EDGE_PARAMS):
        try:
            return _to_box([params.get(p) for p in EDGE_PARAMS])
        except MalformedInputError as exc:
            errors.append(f"edges: {exc}")
    raw = params.get("bbox")
    if raw:
        try:
            return _to_box(str(raw).split(","))
        except MalformedInputError as exc:
            errors.append(f"bbox: {exc}")
    raise MalformedInputError("; ".join(errors) or "no bounding box supplied")


def parse_bbox(params: Mapping[str, Any], default: BoundingBox) -> BoundingBox:
    """Like :func:`bbox_from_params` but never fails – falls back to *default*."""
    try:
        return bbox_from_params(params)
    except MalformedInputError as exc:
        LOG.debug("[live] using default bbox (%s)", exc)
        return default


async def live_flights(box: BoundingBox, cache: RegionalCache) -> dict[str, Any]:
    """
    Flights inside *box*, served from the regional cache.

    Raises:
        UpstreamError: the region had to be fetched and the provider failed.
    """
    entry = await cache.get(box)
    visible = clip(entry.records, box)
    return {
        "ok": True,
        "time": int(entry.fetched_at),
        "count": len(visible),
        "bbox": list(box),
        "flights": [r.to_dict() for r in visible],
    }


__all__ = ["parse_bbox", "bbox_from_params", "live_flights"]
