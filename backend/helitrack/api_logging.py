"""
api_logging.py
~~~~~~~~~~~~~~
Issue one outbound provider request and print **one concise log line**
for it (provider, verb, URL, status, latency).

Status codes are *not* raised here – adapters map them onto the
:mod:`errors` taxonomy themselves.

Usage example
-------------
>>> async with httpx.AsyncClient() as cli:
...     resp = await logged_request_async(cli, "get", url, provider="adsb.fi")
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

LOG = logging.getLogger("extapi")


def _redact(url: str) -> str:
    """Drop the query string – it may carry credentials."""
    return url.split("?", 1)[0]


async def logged_request_async(
    client: Any,
    method: str,
    url: str,
    *args: Any,
    provider: str = "upstream",
    **kwargs: Any,
) -> httpx.Response:
    """
    Await ``client.<method>(url, …)`` and log the outcome.

    Parameters
    ----------
    client:
        ``httpx.AsyncClient`` (or anything with the same coroutine methods).
    method:
        HTTP verb – ``"get"``, ``"post"`` … lower-case.
    provider:
        Short tag for the log line, e.g. ``"opensky"``.

    Notes
    -----
    * **404** and other 4xx are logged at *INFO*; **≥500** at *WARNING*.
    * Network errors are logged at *WARNING* and re-raised untouched.
    """
    verb = method.upper()
    where = _redact(url)
    t0 = time.perf_counter()
    try:
        response = await getattr(client, method.lower())(url, *args, **kwargs)
    except Exception as exc:  # network error before we get a response
        latency_ms = (time.perf_counter() - t0) * 1000.0
        LOG.warning("[%s] FAIL %s %s %.0f ms %r", provider, verb, where, latency_ms, exc)
        raise

    latency_ms = (time.perf_counter() - t0) * 1000.0
    code = response.status_code

    if code >= 500:
        LOG.warning("[%s] %s %s → %s (%.0f ms)", provider, verb, where, code, latency_ms)
    else:
        LOG.info("[%s] %s %s → %s (%.0f ms)", provider, verb, where, code, latency_ms)

    return response


__all__ = ["logged_request_async"]
