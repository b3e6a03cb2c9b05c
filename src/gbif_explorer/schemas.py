"""
Domain models for gbif-explorer.

Pydantic models for query intent, persisted state and lookup results.
Occurrence records themselves stay plain ``dict[str, Any]`` in GBIF's
camelCase field names so exports carry every upstream field.

Key-space partition for occurrence ``key`` values:
  - positive: sourced from the GBIF API
  - negative: synthetic keys assigned to imported/local records
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from gbif_explorer.geometry import Bounds

#: One occurrence record, as returned by GBIF or parsed from an import.
Occurrence = dict[str, Any]


# =============================================================================
# Query intent
# =============================================================================


class OccurrenceFilters(BaseModel):
    """Filter set for an occurrence search.

    ``taxon_keys`` (species picked in search) takes precedence over the
    single ``taxon_key`` (taxonomic group preset) when both are present.
    """

    model_config = {"frozen": True, "str_strip_whitespace": True}

    geometry: str | None = Field(default=None, description="WKT polygon")
    taxon_key: int | None = None
    taxon_keys: tuple[int, ...] = ()
    year: str | None = Field(default=None, description="Single year or range '2010,2020'")
    event_date: str | None = Field(default=None, description="'YYYY-MM-DD,YYYY-MM-DD'")
    iucn_red_list_category: str | None = None
    basis_of_record: str | None = None
    continent: str | None = None
    country: str | None = Field(default=None, description="ISO 3166-1 alpha-2")
    dataset_key: str | None = None
    institution_code: str | None = None
    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
    facet: tuple[str, ...] = ()
    facet_limit: int | None = Field(default=None, ge=1)

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def has_taxon_filter(self) -> bool:
        return bool(self.taxon_keys) or self.taxon_key is not None

    @property
    def effective_taxon_keys(self) -> tuple[int, ...]:
        """Taxon keys that will be sent upstream (multi-select wins)."""
        if self.taxon_keys:
            return self.taxon_keys
        if self.taxon_key is not None:
            return (self.taxon_key,)
        return ()


# =============================================================================
# Persisted state
# =============================================================================


class FavoriteRegion(BaseModel):
    """A user-saved named region."""

    id: str
    name: str
    bounds: Bounds


class SceneMode(StrEnum):
    """Globe projection mode."""

    GLOBE_3D = "3D"
    FLAT_2D = "2D"
    COLUMBUS = "Columbus"


class BaseMap(StrEnum):
    """Base imagery layer."""

    BING = "bing"
    OSM = "osm"
    POSITRON = "positron"
    DARK_MATTER = "dark-matter"
    OPENTOPOMAP = "opentopomap"


class ViewPreferences(BaseModel):
    """Last-used view settings."""

    scene_mode: SceneMode = SceneMode.GLOBE_3D
    base_map: BaseMap = BaseMap.BING


# =============================================================================
# Lookup results
# =============================================================================


class PlaceSearchResult(BaseModel):
    """A geocoded place with its bounding box."""

    display_name: str
    place_id: int
    bounds: Bounds
