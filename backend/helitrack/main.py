"""
main.py – FastAPI entry point
=============================

Routes
------
* ``GET /api/heli/live`` – flights inside ``?bbox=s,n,w,e`` (or
  ``?lamin=&lamax=&lomin=&lomax=``); unparseable input falls back to the
  configured default box.
* ``GET /api/version``   – deployed version string.
* ``GET /healthz``       – always ``{"ok": true}``; does not touch the cache
  or the provider.

Startup builds one shared ``httpx.AsyncClient``, the configured upstream
adapter and the regional cache, and (optionally) a background sweep that
evicts expired regions.
"""

from __future__ import annotations

# ─── Std-lib / third-party ────────────────────────────────────────────
import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

# ─── Project modules ──────────────────────────────────────────────────
from .config import load_settings
from .constants import USER_AGENT
from .errors import UpstreamError
from .live_service import live_flights, parse_bbox
from .providers import build_adapter
from .regional_cache import CacheStore, RegionalCache

# ---------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------
SETTINGS = load_settings()

# ─── Logging ──────────────────────────────────────────────────────────
LOG = logging.getLogger("heli_live")
LOG_BG = logging.getLogger("bg")

_PROJECT_LOGGERS = (
    "heli_live",
    "bg",
    "extapi",
    "upstream",
    "retry",
    "token_store",
    "providers",
    "regional_cache",
    "live_service",
    "adsbfi_service",
    "opensky_service",
)

# Configure project loggers to output to stdout
_handler = logging.StreamHandler(sys.stdout)
_handler.setFormatter(logging.Formatter("%(levelname)s:     %(name)s - %(message)s"))
for _name in _PROJECT_LOGGERS:
    _logger = logging.getLogger(_name)
    _logger.addHandler(_handler)
    _logger.setLevel(SETTINGS.log_level)

limiter = Limiter(key_func=get_remote_address)


# ---------------------------------------------------------------------
# Lifespan – shared client, adapter, cache, optional sweep
# ---------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: N802 – FastAPI naming style
    """Build the cache stack once; tear the HTTP client down on exit."""
    settings = SETTINGS
    client = httpx.AsyncClient(
        timeout=settings.upstream_timeout_sec, headers={"User-Agent": USER_AGENT}
    )
    adapter = build_adapter(settings, client)
    cache = RegionalCache(
        adapter,
        store=CacheStore(),
        ttl=settings.cache_ttl_sec,
        precision=settings.region_precision,
        radius_km=settings.region_radius_km,
    )
    app.state.cache = cache
    LOG.info(
        "Regional cache enabled: provider=%s TTL=%ss precision=%d radius=%skm",
        adapter.name,
        settings.cache_ttl_sec,
        settings.region_precision,
        settings.region_radius_km,
    )

    async def _sweep_loop() -> None:
        while True:
            await asyncio.sleep(settings.cache_sweep_sec)
            try:
                cache.sweep()
            except Exception as exc:
                LOG_BG.error("[sweep] crashed: %s", exc, exc_info=True)

    sweeper = (
        asyncio.create_task(_sweep_loop()) if settings.cache_sweep_sec > 0 else None
    )
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        await client.aclose()


# ---------------------------------------------------------------------
# FastAPI instance & middleware
# ---------------------------------------------------------------------
app = FastAPI(title="helitrack", lifespan=lifespan)

# Rate limiter state
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Return 429 when rate limit is exceeded."""
    return JSONResponse(
        status_code=429,
        content={"ok": False, "error": "rate_limited"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


# Health probe --------------------------------------------------------
@app.get("/healthz")
async def healthz() -> dict[str, bool]:
    """Return HTTP 200 ``{"ok": true}`` if the process is up."""
    return {"ok": True}


# ---------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------
@app.get("/api/version")
async def version() -> dict[str, str]:
    return {"version": SETTINGS.app_version}


@app.get("/api/heli/live")
@limiter.limit(SETTINGS.rate_limit)
async def heli_live(request: Request) -> JSONResponse:
    """
    Flights inside the client's viewport.

    * 200 – ``{ok, time, count, bbox, flights}``
    * 502 – provider failed after retries (``upstream_failure``)
    * 500 – anything else (``server_error``)
    """
    box = parse_bbox(request.query_params, SETTINGS.default_bbox)
    try:
        payload = await live_flights(box, request.app.state.cache)
    except UpstreamError as exc:
        LOG.warning("[live] upstream failure for %s: %s", list(box), exc)
        return JSONResponse(
            status_code=502,
            content={"ok": False, "error": "upstream_failure", "detail": str(exc)},
        )
    except Exception as exc:
        LOG.error("[live] route error: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "server_error"},
        )
    return JSONResponse(content=payload)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    LOG.info("helitrack proxy (%s) on http://%s:%d", SETTINGS.provider, SETTINGS.host, SETTINGS.port)
    uvicorn.run(app, host=SETTINGS.host, port=SETTINGS.port, log_level=SETTINGS.log_level.lower())


if __name__ == "__main__":
    run()
