"""Species name suggest and vernacular-name search."""

from __future__ import annotations

from typing import Any

from gbif_explorer.cache import SPECIES_TTL
from gbif_explorer.datasources.gbif.client import GbifClient

MIN_QUERY_LENGTH = 2


def suggest_species(client: GbifClient, q: str, limit: int = 20) -> list[dict[str, Any]]:
    """
    GET /species/suggest: scientific-name autocomplete.

    Queries shorter than two characters return ``[]`` without a request.
    Results are cached for two minutes to absorb repeated keystrokes.
    """
    query = (q or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []
    data = client.get(
        "species/suggest",
        {"q": query, "limit": limit},
        cache_prefix="suggest",
        ttl=SPECIES_TTL,
        fallback_message="Species suggest failed",
    )
    return list(data or [])


def search_species_by_vernacular(
    client: GbifClient, q: str, limit: int = 20
) -> list[dict[str, Any]]:
    """
    GET /species/search?qField=VERNACULAR: search by common name.

    Each result's ``nubKey`` is the backbone taxon key usable as an
    occurrence ``taxonKey``.
    """
    query = (q or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []
    data = client.get(
        "species/search",
        {"q": query, "qField": "VERNACULAR", "status": "ACCEPTED", "limit": limit},
        cache_prefix="species-search-vernacular",
        ttl=SPECIES_TTL,
        fallback_message="Vernacular species search failed",
    )
    results: list[dict[str, Any]] = (data or {}).get("results") or []
    return results
