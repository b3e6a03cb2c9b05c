"""
Place-name search via OpenStreetMap Nominatim.

Nominatim requires a descriptive User-Agent and allows ~1 req/sec.
API docs: https://nominatim.org/release-docs/latest/api/Search/
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from gbif_explorer.geometry import Bounds
from gbif_explorer.schemas import PlaceSearchResult
from gbif_explorer.services.http import session as default_session

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
MAX_RESULTS = 8
MIN_QUERY_LENGTH = 2


class PlaceSearchError(Exception):
    """Place lookup failed upstream."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _parse_place(item: dict[str, Any]) -> PlaceSearchResult | None:
    """Parse one Nominatim item; None if its bounding box is unusable.

    Nominatim orders ``boundingbox`` as [south, north, west, east].
    """
    bbox = item.get("boundingbox") or []
    if len(bbox) < 4:
        return None
    try:
        south, north, west, east = (float(v) for v in bbox[:4])
        place_id = int(item["place_id"])
    except (KeyError, TypeError, ValueError):
        return None
    return PlaceSearchResult(
        display_name=str(item.get("display_name", "")),
        place_id=place_id,
        bounds=Bounds(west=west, south=south, east=east, north=north),
    )


def search_places(
    q: str,
    *,
    session: requests.Session | None = None,
    url: str = NOMINATIM_URL,
    limit: int = MAX_RESULTS,
) -> list[PlaceSearchResult]:
    """
    Search places by name and return their bounds as west/south/east/north.

    Queries shorter than two characters return ``[]`` without a request.
    """
    query = (q or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    params = {"q": query, "format": "json", "limit": limit, "addressdetails": 0}
    http = session or default_session
    try:
        resp = http.get(url, params=params, headers={"Accept-Language": "en"})
    except requests.RequestException as exc:
        raise PlaceSearchError(f"Place search failed: {exc}") from exc
    if not resp.ok:
        raise PlaceSearchError(f"Place search failed (HTTP {resp.status_code})", resp.status_code)

    try:
        items: list[dict[str, Any]] = resp.json()
    except ValueError as exc:
        raise PlaceSearchError("Place search returned invalid JSON", resp.status_code) from exc
    results: list[PlaceSearchResult] = []
    for item in items:
        parsed = _parse_place(item)
        if parsed is None:
            logger.debug("Skipping place without bounding box: %s", item.get("display_name"))
            continue
        results.append(parsed)
    return results
