"""
opensky_service.py
~~~~~~~~~~~~~~~~~~
Live traffic from the **OpenSky Network** REST API.

* Queries by bounding box directly (``lamin/lamax/lomin/lomax``) with
  ``extended=1`` so the emitter category comes back as field 17.
* Auth, in order of preference:

  1. OAuth2 client credentials – bearer token cached in a
     :class:`~helitrack.token_store.TokenStore`; a 401/403 triggers exactly
     one forced refresh and replay.
  2. HTTP basic auth with username/password (legacy accounts).

  With neither configured the first fetch raises :class:`ConfigError`.
* SI units (metres, m/s) converted by the normalizer.
* State vectors carry no type or operator, so the classifier runs the
  category tier **only** – no kinematic guessing for this provider.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Iterable, Sequence

from .errors import ConfigError, UpstreamAuthError
from .flight_record import OPENSKY_MIN_FIELDS, FlightRecord, from_opensky
from .geo import BoundingBox
from .rotorcraft import CATEGORY, ClassificationPolicy, Evidence
from .token_store import TokenStore
from .upstream import BOX, UpstreamAdapter, check_status, decode_json

LOG = logging.getLogger("opensky_service")

STATES_URL: Final = "https://opensky-network.org/api/states/all"
TOKEN_URL: Final = (
    "https://auth.opensky-network.org/auth/realms/opensky-network"
    "/protocol/openid-connect/token"
)
DEFAULT_TOKEN_LIFETIME_SEC: Final[float] = 1_800.0  # 30 min

#: OpenSky aircraft category 8 = "Rotorcraft"
ROTORCRAFT_CATEGORY: Final[int] = 8
CATEGORY_IDX: Final[int] = 17

OPENSKY_POLICY: Final = ClassificationPolicy(
    tiers=frozenset({CATEGORY}),
    categories=frozenset({ROTORCRAFT_CATEGORY}),
    # 0 = no information, 1 = no ADS-B emitter category information
    uninformative=frozenset({0, 1}),
)


def box_params(box: BoundingBox) -> dict[str, Any]:
    return {
        "lamin": box.south,
        "lamax": box.north,
        "lomin": box.west,
        "lomax": box.east,
        "extended": 1,
    }


class OpenSkyAdapter(UpstreamAdapter):
    name = "opensky"
    query_shape = BOX
    default_policy = OPENSKY_POLICY

    def __init__(
        self,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        username: str | None = None,
        password: str | None = None,
        token_store: TokenStore | None = None,
        token_margin: float = 60.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._client_id = client_id
        self._client_secret = client_secret
        self._basic = (username, password) if username and password else None
        if token_store is None and client_id and client_secret:
            token_store = TokenStore(self._fetch_token, margin=token_margin, clock=self._clock)
        self.tokens = token_store

    @property
    def auth_mode(self) -> str | None:
        if self.tokens is not None:
            return "oauth2"
        if self._basic is not None:
            return "basic"
        return None

    async def _request(self, query: BoundingBox, timeout: float) -> Any:
        params = box_params(query)

        if self.tokens is not None:
            token = await self.tokens.token()
            resp = await self._states(params, timeout, token)
            if resp.status_code in (401, 403):
                LOG.info("[opensky] token rejected (%s) – forcing refresh", resp.status_code)
                token = await self.tokens.refresh(rejected=token)
                resp = await self._states(params, timeout, token)
        elif self._basic is not None:
            resp = await self._send(
                "get", STATES_URL, params=params, auth=self._basic, timeout=timeout
            )
        else:
            raise ConfigError(
                "OpenSky needs OPENSKY_CLIENT_ID/OPENSKY_CLIENT_SECRET "
                "or OPENSKY_USERNAME/OPENSKY_PASSWORD"
            )

        check_status(resp, "OpenSky")
        return decode_json(resp, "OpenSky")

    async def _states(self, params: dict[str, Any], timeout: float, token: str):
        return await self._send(
            "get",
            STATES_URL,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )

    async def _fetch_token(self) -> tuple[str, float]:
        """Client-credentials grant → ``(access_token, expires_in)``."""
        resp = await self._send(
            "post",
            TOKEN_URL,
            data={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
            timeout=self.timeout,
        )
        if resp.status_code in (400, 401, 403):
            raise UpstreamAuthError(
                resp.status_code, f"OpenSky token endpoint refused credentials: {resp.text[:200]}"
            )
        check_status(resp, "OpenSky auth")
        data = decode_json(resp, "OpenSky auth")
        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise UpstreamAuthError(resp.status_code, "OpenSky token response had no access_token")
        return access_token, float(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SEC)

    # ── payload mapping ─────────────────────────────────────────────────
    def _entries(self, payload: Any) -> Iterable[Sequence[Any]]:
        if not isinstance(payload, dict):
            return ()
        return [
            s
            for s in payload.get("states") or ()
            if isinstance(s, (list, tuple)) and len(s) >= OPENSKY_MIN_FIELDS
        ]

    def _position(self, raw: Sequence[Any]) -> tuple[Any, Any]:
        return raw[6], raw[5]

    def _normalize(self, raw: Sequence[Any], payload: Any, fetched_at: float) -> FlightRecord:
        return from_opensky(raw, fetched_at)

    def _evidence(self, raw: Sequence[Any], record: FlightRecord) -> Evidence:
        return Evidence(
            category=raw[CATEGORY_IDX] if len(raw) > CATEGORY_IDX else None,
            altitude_ft=record.altitude_ft,
            speed_kt=record.ground_speed_kt,
        )


__all__ = ["OpenSkyAdapter", "OPENSKY_POLICY", "STATES_URL", "TOKEN_URL"]
