"""
providers.py
~~~~~~~~~~~~
Pick and configure the upstream adapter named by ``Settings.provider``.
"""

from __future__ import annotations

import logging

import httpx

from .adsbfi_service import AdsbFiAdapter
from .config import Settings
from .errors import ConfigError
from .opensky_service import OpenSkyAdapter
from .upstream import UpstreamAdapter

LOG = logging.getLogger("providers")

ADAPTERS: dict[str, type[UpstreamAdapter]] = {
    AdsbFiAdapter.name: AdsbFiAdapter,
    OpenSkyAdapter.name: OpenSkyAdapter,
}


def build_adapter(settings: Settings, client: httpx.AsyncClient | None = None) -> UpstreamAdapter:
    """Instantiate the configured provider with its classification policy."""
    try:
        cls = ADAPTERS[settings.provider]
    except KeyError:
        raise ConfigError(f"unknown provider {settings.provider!r}") from None

    policy = cls.default_policy
    if settings.rotorcraft_tiers is not None:
        policy = policy.with_tiers(settings.rotorcraft_tiers)

    common = dict(
        client=client,
        timeout=settings.upstream_timeout_sec,
        retries=settings.upstream_retries,
        backoff=settings.upstream_backoff_sec,
        policy=policy,
    )
    if cls is OpenSkyAdapter:
        adapter: UpstreamAdapter = OpenSkyAdapter(
            client_id=settings.opensky_client_id,
            client_secret=settings.opensky_client_secret,
            username=settings.opensky_username,
            password=settings.opensky_password,
            token_margin=settings.token_refresh_margin_sec,
            **common,
        )
    else:
        adapter = cls(**common)

    LOG.info(
        "[providers] using %s (%s query, tiers=%s)",
        adapter.name,
        adapter.query_shape,
        ",".join(sorted(policy.tiers)) or "none",
    )
    return adapter


__all__ = ["build_adapter", "ADAPTERS"]
