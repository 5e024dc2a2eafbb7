"""
upstream.py
~~~~~~~~~~~
Common machinery for live-traffic providers.

Every provider adapter answers one question – *which aircraft are inside
this region right now?* – through :meth:`UpstreamAdapter.fetch`, and always
returns normalized, classified :class:`~helitrack.flight_record.FlightRecord`
objects. Subclasses only supply:

* ``query_shape`` – ``"box"`` (bounds passed through) or
  ``"center_radius"`` (box converted with
  :func:`~helitrack.geo.box_to_center_radius` first);
* ``_request``   – one HTTP round trip returning decoded JSON;
* ``_entries`` / ``_position`` / ``_normalize`` / ``_evidence`` – how to
  walk and map the provider payload.

Timeouts, retries, status mapping and post-processing live here so they are
identical for every provider.
"""

from __future__ import annotations

import abc
import asyncio
import dataclasses
import logging
import time
from typing import Any, Awaitable, Callable, ClassVar, Iterable, NamedTuple

import httpx

from .api_logging import logged_request_async
from .constants import USER_AGENT
from .errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamRejectedError,
    UpstreamTransientError,
    is_transient,
)
from .flight_record import FlightRecord, has_position
from .geo import BoundingBox, CenterRadius, box_to_center_radius
from .retry import retry_async
from .rotorcraft import ClassificationPolicy, Evidence, classify

LOG = logging.getLogger("upstream")

BOX: str = "box"
CENTER_RADIUS: str = "center_radius"


class FetchResult(NamedTuple):
    fetched_at: float  # epoch seconds
    records: tuple[FlightRecord, ...]


def check_status(response: httpx.Response, provider: str) -> None:
    """Map a non-2xx response onto the error taxonomy."""
    code = response.status_code
    if 200 <= code < 300:
        return
    detail = f"{provider} API {code}: {(response.text or '').strip()[:200] or response.reason_phrase}"
    if code in (401, 403):
        raise UpstreamAuthError(code, detail)
    if code >= 500:
        raise UpstreamTransientError(code, detail)
    raise UpstreamRejectedError(code, detail)


def decode_json(response: httpx.Response, provider: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(response.status_code, f"{provider} sent malformed JSON: {exc}") from exc


class UpstreamAdapter(abc.ABC):
    """Fetch → drop positionless → normalize → classify, for one provider."""

    name: ClassVar[str]
    query_shape: ClassVar[str]
    default_policy: ClassVar[ClassificationPolicy]

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        retries: int = 2,
        backoff: float = 0.5,
        policy: ClassificationPolicy | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self.policy = policy or self.default_policy
        self._clock = clock
        self._sleep = sleep

    # ── public contract ─────────────────────────────────────────────────
    async def fetch(self, region: BoundingBox, timeout: float | None = None) -> FetchResult:
        """
        Return every aircraft the provider reports for *region*.

        Raises:
            UpstreamError: after the retry budget is spent, or at once for
                auth/4xx failures.
            ConfigError: credentials required by the provider are missing.
        """
        timeout = timeout or self.timeout
        query = self.shape_query(region)

        payload = await retry_async(
            lambda: self._attempt(query, timeout),
            attempts=self.retries + 1,
            base_delay=self.backoff,
            retryable=is_transient,
            sleep=self._sleep,
            label=self.name,
        )
        fetched_at = self._clock()
        records = self.build_records(payload, fetched_at)
        LOG.info("[%s] %d aircraft for %s", self.name, len(records), query)
        return FetchResult(fetched_at, records)

    def shape_query(self, region: BoundingBox) -> BoundingBox | CenterRadius:
        if self.query_shape == CENTER_RADIUS:
            return box_to_center_radius(region)
        return region

    def build_records(self, payload: Any, fetched_at: float) -> tuple[FlightRecord, ...]:
        """Drop entries without a finite position, normalize and tag the rest."""
        records = []
        for raw in self._entries(payload):
            if not has_position(*self._position(raw)):
                continue
            record = self._normalize(raw, payload, fetched_at)
            verdict = classify(self._evidence(raw, record), self.policy)
            records.append(dataclasses.replace(record, likely_rotorcraft=verdict.likely))
        return tuple(records)

    # ── transport helpers ───────────────────────────────────────────────
    async def _attempt(self, query: BoundingBox | CenterRadius, timeout: float) -> Any:
        try:
            return await asyncio.wait_for(self._request(query, timeout), timeout)
        except asyncio.TimeoutError as exc:
            raise UpstreamTransientError(None, f"{self.name} timed out after {timeout:.0f}s") from exc
        except httpx.TimeoutException as exc:
            raise UpstreamTransientError(None, f"{self.name} timed out: {exc!r}") from exc
        except httpx.RequestError as exc:
            raise UpstreamTransientError(None, f"{self.name} network error: {exc!r}") from exc

    async def _send(self, method: str, url: str, *, timeout: float, **kwargs: Any) -> httpx.Response:
        """One logged request, on the shared client if we were given one."""
        if self._client is not None:
            return await logged_request_async(
                self._client, method, url, provider=self.name, timeout=timeout, **kwargs
            )
        async with httpx.AsyncClient(
            timeout=timeout, headers={"User-Agent": USER_AGENT}
        ) as client:
            return await logged_request_async(client, method, url, provider=self.name, **kwargs)

    # ── provider hooks ──────────────────────────────────────────────────
    @abc.abstractmethod
    async def _request(self, query: BoundingBox | CenterRadius, timeout: float) -> Any:
        """Perform the HTTP call(s) and return decoded JSON."""

    @abc.abstractmethod
    def _entries(self, payload: Any) -> Iterable[Any]:
        """Raw aircraft entries inside *payload*."""

    @abc.abstractmethod
    def _position(self, raw: Any) -> tuple[Any, Any]:
        """``(lat, lon)`` of a raw entry, unvalidated."""

    @abc.abstractmethod
    def _normalize(self, raw: Any, payload: Any, fetched_at: float) -> FlightRecord:
        """Map a raw entry (known to have a position) to a record."""

    @abc.abstractmethod
    def _evidence(self, raw: Any, record: FlightRecord) -> Evidence:
        """Classifier input for a raw entry."""


__all__ = [
    "UpstreamAdapter",
    "FetchResult",
    "check_status",
    "decode_json",
    "BOX",
    "CENTER_RADIUS",
]
