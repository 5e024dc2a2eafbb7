"""
token_store.py
~~~~~~~~~~~~~~
Bearer-token cache for OAuth2 client-credentials providers.

* Token fetched lazily on first use.
* Refreshed once it is within *margin* seconds of expiry, the margin being
  capped at half the token lifetime.
* Refresh is serialised by an :class:`asyncio.Lock`; callers that find the
  token stale at the same moment all wait for the one in-flight refresh
  instead of each hitting the token endpoint.
* :meth:`TokenStore.refresh` forces a new token after a 401, but only if
  nobody else has replaced the rejected one in the meantime.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, NamedTuple

LOG = logging.getLogger("token_store")


class AuthToken(NamedTuple):
    access_token: str
    expires_at: float  # epoch seconds
    refresh_at: float  # expires_at minus the effective margin


#: returns ``(access_token, expires_in_seconds)``
TokenFetcher = Callable[[], Awaitable["tuple[str, float]"]]


class TokenStore:
    """Process-wide holder of one :class:`AuthToken`."""

    def __init__(
        self,
        fetcher: TokenFetcher,
        *,
        margin: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher
        self._margin = margin
        self._clock = clock
        self._token: AuthToken | None = None
        self._lock = asyncio.Lock()
        self.refresh_count = 0

    @property
    def current(self) -> AuthToken | None:
        return self._token

    def _usable(self, token: AuthToken | None) -> bool:
        return token is not None and self._clock() < token.refresh_at

    async def token(self) -> str:
        """Return a usable access token, fetching one if needed."""
        if self._usable(self._token):
            return self._token.access_token  # type: ignore[union-attr]
        async with self._lock:
            if not self._usable(self._token):  # another waiter may have refreshed
                await self._fetch()
            return self._token.access_token  # type: ignore[union-attr]

    async def refresh(self, rejected: str | None = None) -> str:
        """
        Force a new token because *rejected* was refused upstream.

        If the stored token already differs from *rejected*, someone else
        refreshed while we waited and that token is returned as is.
        """
        async with self._lock:
            if self._token is None or self._token.access_token == rejected:
                await self._fetch()
            return self._token.access_token  # type: ignore[union-attr]

    async def _fetch(self) -> None:
        access_token, expires_in = await self._fetcher()
        lifetime = float(expires_in)
        margin = min(self._margin, lifetime / 2)
        expires_at = self._clock() + lifetime
        self._token = AuthToken(access_token, expires_at, expires_at - margin)
        self.refresh_count += 1
        LOG.info("[token] refreshed, valid for %.0fs", lifetime)


__all__ = ["AuthToken", "TokenStore"]
