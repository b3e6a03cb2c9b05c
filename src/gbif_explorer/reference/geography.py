"""Predefined regions offered for quick selection (bounds in degrees)."""

from __future__ import annotations

from dataclasses import dataclass

from gbif_explorer.geometry import Bounds

# Region selection ids that are not predefined regions or favorites
REGION_ID_CURRENT_VIEW = "current-view"
REGION_ID_DRAWN = "drawn"
REGION_ID_PLACE = "place"


@dataclass(frozen=True)
class Region:
    """A named, selectable rectangle."""

    id: str
    name: str
    bounds: Bounds


REGIONS: tuple[Region, ...] = (
    Region("world", "World", Bounds(west=-180, south=-90, east=180, north=90)),
    Region("europe", "Europe", Bounds(west=-25, south=35, east=40, north=72)),
    Region("north-america", "North America", Bounds(west=-170, south=15, east=-50, north=72)),
    Region("south-america", "South America", Bounds(west=-82, south=-56, east=-35, north=12)),
    Region("africa", "Africa", Bounds(west=-18, south=-35, east=52, north=37)),
    Region("asia", "Asia", Bounds(west=60, south=-10, east=180, north=75)),
    Region("oceania", "Oceania", Bounds(west=110, south=-50, east=180, north=0)),
    Region("antarctica", "Antarctica", Bounds(west=-180, south=-90, east=180, north=-60)),
)

_REGIONS_BY_ID = {r.id: r for r in REGIONS}


def get_region(region_id: str) -> Region | None:
    return _REGIONS_BY_ID.get(region_id)


def get_region_bounds(region_id: str) -> Bounds | None:
    region = _REGIONS_BY_ID.get(region_id)
    return region.bounds if region else None
