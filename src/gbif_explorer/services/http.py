"""
Shared HTTP sessions with retry and default timeout.

Provides pre-configured ``requests.Session`` objects. ``create_session()``
retries transient network errors (timeouts, connection resets, 502/503/504)
with exponential backoff; ``NO_RETRY`` turns the adapter retries off for
clients that own their retry policy (the GBIF occurrence client handles
429 itself and must not retry anything else).

Usage::

    from gbif_explorer.services.http import session

    resp = session.get("https://nominatim.openstreetmap.org/search", params={...})
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

#: Default retry strategy for auxiliary lookups (places, species, media).
DEFAULT_RETRY = Retry(
    total=3,
    backoff_factor=1,  # 0s, 2s, 4s between retries
    status_forcelist=[502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

#: No adapter-level retries; the caller decides.
NO_RETRY = Retry(total=0, raise_on_status=False)

DEFAULT_TIMEOUT = 30  # seconds
USER_AGENT = "gbif-explorer/0.1 (biodiversity occurrence explorer)"


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = USER_AGENT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request.
        user_agent: Descriptive client identifier (required by Nominatim).
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = user_agent
    s.headers["Accept"] = "application/json"

    # Inject a default timeout so callers don't need to pass ``timeout=``.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session for auxiliary lookups; import and use directly.
session: requests.Session = create_session()
