"""
GBIF API client.

Low-level HTTP client for the GBIF API v1: request building, response
caching, and rate-limit handling.

API docs: https://techdocs.gbif.org/en/openapi/
Occurrence search allows at most 300 records per page and can be paged up
to 100,000 records in total.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

import requests

from gbif_explorer.cache import DEFAULT_TTL, ResponseCache, canonical_key
from gbif_explorer.services.http import NO_RETRY, create_session

if TYPE_CHECKING:
    from gbif_explorer.config import Settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# API configuration
# ---------------------------------------------------------------------------
API_BASE = "https://api.gbif.org/v1"
OCCURRENCE_PAGE_MAX = 300  # API maximum per occurrence/search request
OCCURRENCE_MAX_TOTAL = 100_000  # ceiling for chunked fetching
REQUEST_TIMEOUT = 30.0  # seconds

# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------
CHUNK_DELAY = 0.4  # seconds between chunk requests
RATE_LIMIT_BACKOFF = 8.0  # seconds to wait on 429 without a usable Retry-After
RETRY_AFTER_MAX = 60.0
MAX_RETRIES_ON_429 = 2

Params = Mapping[str, Any] | Iterable[tuple[str, Any]]


class GbifApiError(Exception):
    """Upstream or network failure talking to GBIF."""

    def __init__(self, message: str, status: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class RateLimitError(GbifApiError):
    """GBIF kept answering 429 after the retry budget was spent."""


def retry_after_seconds(value: str | None) -> float:
    """Seconds to wait before retrying a 429.

    Honours a numeric ``Retry-After`` header (capped at 60s); HTTP-date
    values and missing headers fall back to a fixed 8s backoff.
    """
    if value is not None and value.strip().isdigit():
        return min(RETRY_AFTER_MAX, float(int(value.strip())))
    return RATE_LIMIT_BACKOFF


def _as_pairs(params: Params) -> list[tuple[str, Any]]:
    if isinstance(params, Mapping):
        return list(params.items())
    return list(params)


def _key_params(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """Collapse repeated keys into lists so they take part in the cache key."""
    out: dict[str, Any] = {}
    for name, value in pairs:
        if name in out:
            existing = out[name]
            out[name] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            out[name] = value
    return out


def _error_from_response(resp: requests.Response, fallback: str) -> GbifApiError:
    message: str | None = None
    code: str | None = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or None
        code = body.get("code") or None
    return GbifApiError(message or f"{fallback} (HTTP {resp.status_code})", resp.status_code, code)


class GbifClient:
    """Cached, rate-limit aware GET access to the GBIF API.

    Args:
        session: HTTP session; defaults to one without adapter retries so
            the 429 policy below is the only retry.
        cache: Shared response cache (one per session/process).
        sleep: Blocking sleep, injectable for tests.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        cache: ResponseCache | None = None,
        *,
        base_url: str = API_BASE,
        timeout: float = REQUEST_TIMEOUT,
        chunk_delay: float = CHUNK_DELAY,
        max_rate_limit_retries: int = MAX_RETRIES_ON_429,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session or create_session(retry=NO_RETRY, timeout=timeout)
        self.cache = cache if cache is not None else ResponseCache()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.chunk_delay = chunk_delay
        self.max_rate_limit_retries = max_rate_limit_retries
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, cache: ResponseCache | None = None) -> GbifClient:
        session = create_session(
            retry=NO_RETRY,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )
        return cls(
            session,
            cache,
            base_url=settings.gbif_api_base,
            timeout=settings.request_timeout,
            chunk_delay=settings.chunk_delay_seconds,
        )

    def get(
        self,
        endpoint: str,
        params: Params,
        *,
        cache_prefix: str,
        ttl: float = DEFAULT_TTL,
        fallback_message: str = "GBIF request failed",
    ) -> Any:
        """GET ``{base_url}/{endpoint}`` and return decoded JSON.

        Cached responses are returned without a network call. A 429 is
        retried up to ``max_rate_limit_retries`` times; every other failure
        raises ``GbifApiError`` immediately.
        """
        pairs = _as_pairs(params)
        key = canonical_key(cache_prefix, _key_params(pairs))
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        url = f"{self.base_url}/{endpoint}"
        for attempt in range(self.max_rate_limit_retries + 1):
            try:
                resp = self.session.get(url, params=pairs, timeout=self.timeout)
            except requests.RequestException as exc:
                raise GbifApiError(str(exc) or fallback_message) from exc

            if resp.status_code == 429:
                if attempt < self.max_rate_limit_retries:
                    wait = retry_after_seconds(resp.headers.get("Retry-After"))
                    logger.warning(
                        "GBIF rate limited %s; retry %d/%d in %.1fs",
                        endpoint,
                        attempt + 1,
                        self.max_rate_limit_retries,
                        wait,
                    )
                    self.sleep(wait)
                    continue
                raise RateLimitError(
                    "GBIF rate limit reached, please try again shortly", 429, "RATE_LIMITED"
                )

            if not resp.ok:
                raise _error_from_response(resp, fallback_message)

            try:
                data = resp.json()
            except ValueError as exc:
                raise GbifApiError(
                    f"{fallback_message}: invalid JSON response", resp.status_code
                ) from exc
            self.cache.set(key, data, ttl)
            return data

        # Unreachable: the loop either returns or raises on its last attempt.
        raise GbifApiError(fallback_message)
