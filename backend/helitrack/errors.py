"""
errors.py
~~~~~~~~~
Exception taxonomy shared by the adapters, the cache and the HTTP layer.

* :class:`ConfigError` – required settings/credentials missing or invalid.
* :class:`UpstreamError` – anything a provider did that we cannot recover
  from; the HTTP layer turns it into ``502 upstream_failure``.

  - :class:`UpstreamAuthError`      401/403 (one forced token refresh first)
  - :class:`UpstreamTransientError` network error, timeout, 5xx (retried)
  - :class:`UpstreamRejectedError`  any other 4xx (never retried)

* :class:`MalformedInputError` – unparseable client query; always replaced
  by defaults, never shown to the client.
"""

from __future__ import annotations


class HelitrackError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(HelitrackError):
    """Missing or unparseable configuration."""


class MalformedInputError(HelitrackError, ValueError):
    """Client-supplied query parameters could not be parsed."""


class UpstreamError(HelitrackError):
    """A provider call failed for good (after any retries)."""

    def __init__(self, status: int | None, detail: str) -> None:
        super().__init__(detail)
        self.status = status
        self.detail = detail

    def __str__(self) -> str:
        if self.status is None:
            return self.detail
        return f"HTTP {self.status}: {self.detail}"


class UpstreamAuthError(UpstreamError):
    """Provider rejected our credentials."""


class UpstreamTransientError(UpstreamError):
    """Network error, timeout or 5xx – worth another attempt."""


class UpstreamRejectedError(UpstreamError):
    """Non-auth 4xx – retrying will not help."""


def is_transient(exc: BaseException) -> bool:
    """Retry predicate used for every upstream call."""
    return isinstance(exc, UpstreamTransientError)


__all__ = [
    "HelitrackError",
    "ConfigError",
    "MalformedInputError",
    "UpstreamError",
    "UpstreamAuthError",
    "UpstreamTransientError",
    "UpstreamRejectedError",
    "is_transient",
]
