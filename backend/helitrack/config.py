"""
config.py
~~~~~~~~~
Environment-driven settings, read once at startup.

``.env`` is honoured via python-dotenv (see :func:`load_settings`). Every
knob has a default, so an empty environment yields a working adsb.fi proxy.
Cache TTL and region precision are deliberately tunable: deployments have
run with both 30 s / one decimal and 5 s / two decimals.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Final, Mapping

from dotenv import load_dotenv

from .errors import ConfigError
from .geo import BoundingBox

PROVIDERS: Final = ("adsbfi", "opensky")
DEFAULT_BBOX: Final = "51.04,51.05,-114.08,-114.07"  # Calgary downtown


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration."""

    provider: str = "adsbfi"

    # regional cache
    cache_ttl_sec: float = 30.0
    cache_sweep_sec: float = 0.0  # 0 → no background sweep
    region_precision: int = 1
    region_radius_km: float = 50.0

    # upstream calls
    upstream_timeout_sec: float = 15.0
    upstream_retries: int = 2
    upstream_backoff_sec: float = 0.5
    token_refresh_margin_sec: float = 60.0

    # OpenSky credentials (OAuth2 client credentials preferred over basic)
    opensky_client_id: str | None = None
    opensky_client_secret: str | None = None
    opensky_username: str | None = None
    opensky_password: str | None = None

    #: overrides the active provider's classifier tiers when set
    rotorcraft_tiers: tuple[str, ...] | None = None

    default_bbox: BoundingBox = BoundingBox(51.04, 51.05, -114.08, -114.07)

    # HTTP front end
    app_version: str = "1.0.0"
    cors_origins: tuple[str, ...] = ("*",)
    rate_limit: str = "120/minute"
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"


# ── parsing helpers ─────────────────────────────────────────────────────
def _str(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name, "").strip()
    return value or None


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = _str(env, name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name}={raw!r} is not a valid {cast.__name__}") from exc
    if not math.isfinite(value) or value < 0:
        raise ConfigError(f"{name}={raw!r} must be a finite, non-negative number")
    return value


def _csv(env: Mapping[str, str], name: str) -> tuple[str, ...] | None:
    raw = _str(env, name)
    if raw is None:
        return None
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


def parse_bbox_setting(raw: str, name: str = "DEFAULT_BBOX") -> BoundingBox:
    """Parse ``south,north,west,east`` or raise :class:`ConfigError`."""
    try:
        south, north, west, east = (float(p) for p in raw.split(","))
    except ValueError as exc:
        raise ConfigError(f"{name}={raw!r} must be 'south,north,west,east'") from exc
    if not all(math.isfinite(v) for v in (south, north, west, east)) or south > north:
        raise ConfigError(f"{name}={raw!r} is not a valid bounding box")
    return BoundingBox(south, north, west, east)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build :class:`Settings` from *env* (default: ``os.environ`` after
    loading ``.env``).

    Raises:
        ConfigError: an unknown provider or an unparseable value.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    provider = (_str(env, "PROVIDER") or "adsbfi").lower()
    if provider not in PROVIDERS:
        raise ConfigError(f"PROVIDER={provider!r} – expected one of {PROVIDERS}")

    tiers = _csv(env, "ROTORCRAFT_TIERS")
    if tiers is not None:
        from .rotorcraft import TIERS  # late import: rotorcraft is config-free

        unknown = set(tiers) - set(TIERS)
        if unknown:
            raise ConfigError(
                f"ROTORCRAFT_TIERS has unknown tier(s) {sorted(unknown)}; "
                f"valid: {', '.join(TIERS)}"
            )

    return Settings(
        provider=provider,
        cache_ttl_sec=_number(env, "CACHE_TTL_SEC", 30.0, float),
        cache_sweep_sec=_number(env, "CACHE_SWEEP_SEC", 0.0, float),
        region_precision=_number(env, "REGION_PRECISION", 1, int),
        region_radius_km=_number(env, "REGION_RADIUS_KM", 50.0, float),
        upstream_timeout_sec=_number(env, "UPSTREAM_TIMEOUT_SEC", 15.0, float),
        upstream_retries=_number(env, "UPSTREAM_RETRIES", 2, int),
        upstream_backoff_sec=_number(env, "UPSTREAM_BACKOFF_SEC", 0.5, float),
        token_refresh_margin_sec=_number(env, "TOKEN_REFRESH_MARGIN_SEC", 60.0, float),
        opensky_client_id=_str(env, "OPENSKY_CLIENT_ID"),
        opensky_client_secret=_str(env, "OPENSKY_CLIENT_SECRET"),
        opensky_username=_str(env, "OPENSKY_USERNAME"),
        opensky_password=_str(env, "OPENSKY_PASSWORD"),
        rotorcraft_tiers=tiers,
        default_bbox=parse_bbox_setting(_str(env, "DEFAULT_BBOX") or DEFAULT_BBOX),
        app_version=_str(env, "APP_VERSION") or "1.0.0",
        cors_origins=tuple(
            o.strip() for o in (_str(env, "CORS_ORIGINS") or "*").split(",") if o.strip()
        ),
        rate_limit=_str(env, "RATE_LIMIT") or "120/minute",
        host=_str(env, "HOST") or "0.0.0.0",
        port=_number(env, "PORT", 4000, int),
        log_level=(_str(env, "LOG_LEVEL") or "INFO").upper(),
    )


__all__ = ["Settings", "load_settings", "parse_bbox_setting", "PROVIDERS"]
