"""GBIF occurrence and species data source.

Public API:
  - client: GbifClient (cached GET, 429 retry), GbifApiError, RateLimitError
  - occurrences: OccurrencePage, search_occurrences, fetch_up_to, fetch_temporal_facets
  - species: suggest_species, search_species_by_vernacular
  - media: occurrence_image_urls
"""

from gbif_explorer.datasources.gbif.client import (
    OCCURRENCE_MAX_TOTAL,
    OCCURRENCE_PAGE_MAX,
    GbifApiError,
    GbifClient,
    RateLimitError,
)
from gbif_explorer.datasources.gbif.media import occurrence_image_urls
from gbif_explorer.datasources.gbif.occurrences import (
    OccurrencePage,
    TemporalFacets,
    build_occurrence_params,
    fetch_temporal_facets,
    fetch_up_to,
    search_occurrences,
)
from gbif_explorer.datasources.gbif.species import (
    search_species_by_vernacular,
    suggest_species,
)

__all__ = [
    "OCCURRENCE_MAX_TOTAL",
    "OCCURRENCE_PAGE_MAX",
    "GbifApiError",
    "GbifClient",
    "OccurrencePage",
    "RateLimitError",
    "TemporalFacets",
    "build_occurrence_params",
    "fetch_temporal_facets",
    "fetch_up_to",
    "occurrence_image_urls",
    "search_occurrences",
    "search_species_by_vernacular",
    "suggest_species",
]
