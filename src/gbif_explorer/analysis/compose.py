"""Compose the displayed occurrence set from API results and imports."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from gbif_explorer.analysis.occurrence_dates import occurrence_month, occurrence_year
from gbif_explorer.geometry import Bounds
from gbif_explorer.reference import (
    REGION_ID_CURRENT_VIEW,
    REGION_ID_DRAWN,
    REGION_ID_PLACE,
    get_region,
)
from gbif_explorer.schemas import FavoriteRegion, Occurrence, PlaceSearchResult


def merged_view(
    api_records: Sequence[Occurrence],
    imported_records: Sequence[Occurrence],
    year: int | None = None,
    month: int | None = None,
) -> list[Occurrence]:
    """
    API records followed by imported records, narrowed by the timeline.

    Imported records are always included (they are not subject to the
    result-count cap). With only a year selected, records lacking month
    data stay in; once a month is selected they drop out. A month without
    a year is ignored.
    """
    combined = [*api_records, *imported_records]
    if year is None:
        return combined
    in_year = [o for o in combined if occurrence_year(o) == year]
    if month is None:
        return in_year
    return [o for o in in_year if occurrence_month(o) == month]


def has_position(occ: Occurrence) -> bool:
    """True if the record has finite, in-range coordinates."""
    lat = occ.get("decimalLatitude")
    lon = occ.get("decimalLongitude")
    if isinstance(lat, bool) or isinstance(lon, bool):
        return False
    if not isinstance(lat, int | float) or not isinstance(lon, int | float):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def with_position(records: Iterable[Occurrence]) -> list[Occurrence]:
    """Records that can be placed on the map."""
    return [o for o in records if has_position(o)]


def resolve_region_bounds(
    region_id: str | None,
    favorites: Sequence[FavoriteRegion] = (),
    drawn: Bounds | None = None,
    place: PlaceSearchResult | None = None,
    view: Bounds | None = None,
) -> Bounds | None:
    """Bounds for the active region selection, or None if unresolved."""
    if not region_id:
        return None
    if region_id == REGION_ID_CURRENT_VIEW:
        return view
    if region_id == REGION_ID_DRAWN and drawn is not None:
        return drawn
    if region_id == REGION_ID_PLACE and place is not None:
        return place.bounds
    region = get_region(region_id)
    if region is not None:
        return region.bounds
    favorite = next((f for f in favorites if f.id == region_id), None)
    return favorite.bounds if favorite else None


def region_display_name(
    region_id: str | None,
    favorites: Sequence[FavoriteRegion] = (),
    place: PlaceSearchResult | None = None,
) -> str:
    """Human-readable name for the active region selection."""
    if not region_id:
        return ""
    if region_id == REGION_ID_CURRENT_VIEW:
        return "Current view"
    if region_id == REGION_ID_DRAWN:
        return "Drawn region"
    if region_id == REGION_ID_PLACE and place is not None:
        return place.display_name
    region = get_region(region_id)
    if region is not None:
        return region.name
    favorite = next((f for f in favorites if f.id == region_id), None)
    return favorite.name if favorite else region_id
