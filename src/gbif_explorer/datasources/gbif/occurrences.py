"""Occurrence search, chunked fetching and temporal facets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from gbif_explorer.cache import OCCURRENCE_TTL
from gbif_explorer.datasources.gbif.client import (
    OCCURRENCE_MAX_TOTAL,
    OCCURRENCE_PAGE_MAX,
    GbifClient,
)
from gbif_explorer.geometry import Bounds, bounds_to_polygon
from gbif_explorer.schemas import Occurrence, OccurrenceFilters

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "occurrence/search"

# =============================================================================
# Data Model
# =============================================================================


@dataclass(frozen=True)
class OccurrencePage:
    """One search response, or the aggregate of several chunked responses.

    ``count`` is the upstream's total match count, which can exceed
    ``len(results)`` when fetching stopped at the requested cap.
    """

    offset: int
    limit: int
    end_of_records: bool
    count: int
    results: list[Occurrence] = field(default_factory=list)
    facets: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> OccurrencePage:
        return cls(
            offset=int(data.get("offset", 0)),
            limit=int(data.get("limit", 0)),
            end_of_records=bool(data.get("endOfRecords", False)),
            count=int(data.get("count", 0)),
            results=list(data.get("results") or []),
            facets=list(data.get("facets") or []),
        )

    def facet_counts(self, name: str) -> dict[str, int]:
        """Counts for one facet field (e.g. ``"year"``), keyed by facet value."""
        for facet in self.facets:
            if str(facet.get("field", "")).upper() == name.upper():
                return {str(c["name"]): int(c["count"]) for c in facet.get("counts", [])}
        return {}


@dataclass(frozen=True)
class TemporalFacets:
    """Occurrence counts by year (and optionally month) for an area."""

    years: dict[int, int]
    months: dict[int, int]
    total_count: int


# =============================================================================
# Request building
# =============================================================================


def build_occurrence_params(filters: OccurrenceFilters) -> list[tuple[str, Any]]:
    """
    Translate a filter set into GBIF query parameters.

    Multiple taxon keys are sent as a repeated ``taxonKey`` parameter (GBIF
    ORs repeated values; a comma-joined value would not match). Continent
    and country codes are upper-cased. Empty values are omitted.
    """
    limit = filters.limit if filters.limit is not None else OCCURRENCE_PAGE_MAX
    pairs: list[tuple[str, Any]] = [("limit", limit), ("offset", filters.offset)]
    if filters.geometry:
        pairs.append(("geometry", filters.geometry))
    for key in filters.effective_taxon_keys:
        pairs.append(("taxonKey", key))

    optional: list[tuple[str, str | None]] = [
        ("year", filters.year),
        ("eventDate", filters.event_date),
        ("iucnRedListCategory", filters.iucn_red_list_category),
        ("basisOfRecord", filters.basis_of_record),
        ("continent", filters.continent.strip().upper() if filters.continent else None),
        ("country", filters.country.strip().upper() if filters.country else None),
        ("datasetKey", filters.dataset_key),
        ("institutionCode", filters.institution_code),
    ]
    pairs.extend((name, value) for name, value in optional if value)

    if filters.facet:
        pairs.append(("facet", ",".join(filters.facet)))
    if filters.facet_limit:
        pairs.append(("facetLimit", filters.facet_limit))
    return pairs


# =============================================================================
# API Fetching
# =============================================================================


def search_occurrences(client: GbifClient, filters: OccurrenceFilters) -> OccurrencePage:
    """GET /occurrence/search: one page, cached for 15 minutes."""
    data = client.get(
        SEARCH_ENDPOINT,
        build_occurrence_params(filters),
        cache_prefix="occ",
        ttl=OCCURRENCE_TTL,
        fallback_message="GBIF occurrence search failed",
    )
    return OccurrencePage.from_api(data)


def fetch_up_to(
    client: GbifClient,
    filters: OccurrenceFilters,
    max_total: int | None = None,
) -> OccurrencePage:
    """
    Fetch up to ``max_total`` occurrences with sequential paged requests.

    ``max_total`` defaults to ``filters.limit`` and is clamped to
    [1, 100000]. Pages are at most 300 records; a short page or
    ``endOfRecords`` ends the loop. Consecutive chunk requests are spaced
    by ``client.chunk_delay`` seconds. A failing chunk propagates and
    aborts the whole fetch.

    Returns:
        Aggregate page with every fetched record and the last reported
        total match count.
    """
    requested = max_total if max_total is not None else (filters.limit or OCCURRENCE_PAGE_MAX)
    target = min(max(1, requested), OCCURRENCE_MAX_TOTAL)

    if target <= OCCURRENCE_PAGE_MAX:
        return search_occurrences(client, filters.model_copy(update={"limit": target, "offset": 0}))

    results: list[Occurrence] = []
    count = 0
    end_of_records = False
    offset = 0
    while len(results) < target and not end_of_records:
        if offset:
            client.sleep(client.chunk_delay)
        limit = min(OCCURRENCE_PAGE_MAX, target - len(results))
        page = search_occurrences(client, filters.model_copy(update={"limit": limit, "offset": offset}))
        results.extend(page.results)
        count = page.count
        end_of_records = page.end_of_records
        logger.debug(
            "Chunk offset=%d limit=%d returned %d (total %d of %d)",
            offset,
            limit,
            len(page.results),
            len(results),
            count,
        )
        # A short page means the upstream ran out even if endOfRecords is unset
        if len(page.results) < limit or end_of_records:
            break
        offset += limit

    logger.info("Fetched %d occurrences (upstream count %d)", len(results), count)
    return OccurrencePage(
        offset=0,
        limit=len(results),
        end_of_records=end_of_records,
        count=count,
        results=results,
    )


def fetch_temporal_facets(
    client: GbifClient,
    bounds: Bounds,
    filters: OccurrenceFilters,
    *,
    facet_month: bool = False,
    facet_limit: int = 80,
) -> TemporalFacets:
    """Occurrence counts by year (and month) inside ``bounds``, without records."""
    facet_fields = ("year", "month") if facet_month else ("year",)
    page = search_occurrences(
        client,
        filters.model_copy(
            update={
                "geometry": bounds_to_polygon(bounds),
                "limit": 0,
                "offset": 0,
                "facet": facet_fields,
                "facet_limit": facet_limit,
            }
        ),
    )
    years = {int(k): v for k, v in page.facet_counts("year").items() if k.isdigit()}
    months = {int(k): v for k, v in page.facet_counts("month").items() if k.isdigit()}
    return TemporalFacets(years=years, months=months, total_count=page.count)
