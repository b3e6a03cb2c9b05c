"""Explorer session: the state behind one map page.

Ties together the refetch controller (API results), imported records,
persisted user state (favorites, saved occurrences, view preferences) and
the timeline selection. Renderers and the CLI read the composed dataset
from here.

Messages
--------
``RegionSelected``, ``CameraMoved`` and ``FiltersChanged`` come from
``gbif_explorer.refetch`` and are forwarded to the controller.
``SaveOccurrence`` is handled here against the saved-occurrence store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 — used at runtime, not just annotations
from typing import Literal

from gbif_explorer.analysis.compose import (
    merged_view,
    region_display_name,
    resolve_region_bounds,
    with_position,
)
from gbif_explorer.analysis.phenology import (
    FirstDetection,
    MonthCount,
    first_detections,
    phenology_by_month,
)
from gbif_explorer.analysis.species_summary import SpeciesSummary, build_species_summary
from gbif_explorer.cache import ResponseCache
from gbif_explorer.config import Settings, get_settings
from gbif_explorer.datasources.gbif import GbifClient, fetch_up_to
from gbif_explorer.datasources.gbif.occurrences import OccurrencePage
from gbif_explorer.datasources.imports import parse_occurrences_bytes, parse_occurrences_file
from gbif_explorer.geometry import Bounds, rectangle_to_bounds
from gbif_explorer.persistence import (
    FavoritesRepository,
    SavedOccurrencesRepository,
    load_view_preferences,
    save_view_preferences,
)
from gbif_explorer.reference.geography import REGION_ID_DRAWN, REGION_ID_PLACE
from gbif_explorer.refetch import (
    CameraMoved,
    FetchFn,
    FiltersChanged,
    RefetchController,
    RefetchMessage,
    RefetchState,
    RegionSelected,
)
from gbif_explorer.renderers.csv_export import to_csv
from gbif_explorer.renderers.geojson import to_geojson
from gbif_explorer.renderers.species_report import build_species_report_html
from gbif_explorer.schemas import (
    FavoriteRegion,
    Occurrence,
    OccurrenceFilters,
    PlaceSearchResult,
    ViewPreferences,
)
from gbif_explorer.store import JsonStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveOccurrence:
    """Add or remove a record from the saved list by occurrence key."""

    key: int
    action: Literal["add", "remove"]


SessionMessage = RefetchMessage | SaveOccurrence


class ExplorerSession:
    """Region, filters, timeline and local data for one exploration."""

    def __init__(
        self,
        fetch: FetchFn,
        store: JsonStore,
        *,
        debounce: float = 0.8,
        default_limit: int = 1000,
    ) -> None:
        self.controller = RefetchController(fetch, debounce=debounce, default_limit=default_limit)
        self.store = store
        self.favorites = FavoritesRepository(store)
        self.saved = SavedOccurrencesRepository(store)
        self.imported: list[Occurrence] = []
        self.selected_year: int | None = None
        self.selected_month: int | None = None
        self.region_id: str | None = None
        self.drawn_bounds: Bounds | None = None
        self.place: PlaceSearchResult | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ExplorerSession:
        """Session backed by the live GBIF API and a store under ``data_dir``."""
        settings = settings or get_settings()
        client = GbifClient.from_settings(settings, ResponseCache())

        def fetch(filters: OccurrenceFilters) -> OccurrencePage:
            return fetch_up_to(client, filters)

        return cls(
            fetch,
            JsonStore(settings.data_dir),
            debounce=settings.fetch_debounce_seconds,
            default_limit=settings.default_limit,
        )

    # -- messages -------------------------------------------------------------

    def handle(self, message: SessionMessage) -> None:
        if isinstance(message, SaveOccurrence):
            self._save_occurrence(message)
            return
        if isinstance(message, FiltersChanged):
            self._reset_timeline_on_taxon_change(message.filters)
        elif isinstance(message, RegionSelected):
            self.region_id = message.region_id
        self.controller.handle(message)

    def _reset_timeline_on_taxon_change(self, filters: OccurrenceFilters) -> None:
        previous = self.controller.filters
        changed = (previous.taxon_keys, previous.taxon_key) != (filters.taxon_keys, filters.taxon_key)
        if changed and filters.has_taxon_filter:
            self.selected_year = None
            self.selected_month = None

    def _save_occurrence(self, message: SaveOccurrence) -> None:
        if message.action == "add":
            occ = next((o for o in self.all_records() if o.get("key") == message.key), None)
            if occ is None:
                logger.warning("Cannot save occurrence %s: not in the current dataset", message.key)
                return
            self.saved.add(occ)
        elif message.action == "remove":
            self.saved.remove(message.key)
        else:
            msg = f"Unknown save action: {message.action!r}"
            raise ValueError(msg)

    # -- region selection -----------------------------------------------------

    def region_bounds(self, region_id: str | None = None) -> Bounds | None:
        return resolve_region_bounds(
            region_id if region_id is not None else self.region_id,
            self.favorites.list(),
            self.drawn_bounds,
            self.place,
            self.controller.view_bounds,
        )

    def region_name(self) -> str:
        return region_display_name(self.region_id, self.favorites.list(), self.place)

    def select_region(self, region_id: str | None) -> Bounds | None:
        """Select a predefined region, favorite, drawn box, place or the current view."""
        bounds = self.region_bounds(region_id) if region_id else None
        self.handle(RegionSelected(region_id, bounds))
        return bounds

    def draw_region(self, bounds: Bounds) -> None:
        self.drawn_bounds = bounds
        self.select_region(REGION_ID_DRAWN)

    def select_place(self, place: PlaceSearchResult) -> None:
        self.place = place
        self.select_region(REGION_ID_PLACE)

    def move_camera(self, bounds: Bounds) -> None:
        self.handle(CameraMoved(bounds))

    def move_camera_rectangle(
        self, west: float, south: float, east: float, north: float, *, in_radians: bool = True
    ) -> None:
        """Camera update from a globe view rectangle (radians by default)."""
        self.move_camera(rectangle_to_bounds(west, south, east, north, in_radians=in_radians))

    def set_filters(self, filters: OccurrenceFilters) -> None:
        self.handle(FiltersChanged(filters))

    def set_timeline(self, year: int | None, month: int | None = None) -> None:
        """Narrow the displayed records; this never triggers a refetch."""
        if month is not None and not 1 <= month <= 12:
            msg = f"month must be 1-12, got {month}"
            raise ValueError(msg)
        self.selected_year = year
        self.selected_month = month if year is not None else None

    # -- favorites and view ---------------------------------------------------

    def add_favorite(self, name: str, bounds: Bounds | None = None) -> FavoriteRegion | None:
        """Save ``bounds`` (default: the active region) under ``name``."""
        target = bounds or self.region_bounds()
        if target is None:
            return None
        return self.favorites.add(name, target)

    def remove_favorite(self, fav_id: str) -> None:
        self.favorites.remove(fav_id)
        if self.region_id == fav_id:
            self.select_region(None)

    def view_preferences(self) -> ViewPreferences:
        return load_view_preferences(self.store) or ViewPreferences()

    def set_view_preferences(self, prefs: ViewPreferences) -> None:
        save_view_preferences(self.store, prefs)

    # -- imports --------------------------------------------------------------

    def import_file(self, path: Path) -> int:
        """Replace imported records with those parsed from ``path``."""
        self.imported = parse_occurrences_file(path)
        logger.info("Imported %d occurrences from %s", len(self.imported), path.name)
        return len(self.imported)

    def import_bytes(self, data: bytes, filename: str) -> int:
        self.imported = parse_occurrences_bytes(data, filename)
        logger.info("Imported %d occurrences from %s", len(self.imported), filename)
        return len(self.imported)

    def clear_imports(self) -> None:
        self.imported = []

    # -- composed data --------------------------------------------------------

    @property
    def state(self) -> RefetchState:
        return self.controller.state

    def all_records(self) -> list[Occurrence]:
        """API results followed by imported records, ignoring the timeline."""
        return [*self.controller.state.occurrences, *self.imported]

    def displayed(self) -> list[Occurrence]:
        """Records shown on the map for the current timeline selection."""
        return merged_view(
            self.controller.state.occurrences,
            self.imported,
            self.selected_year,
            self.selected_month,
        )

    def mappable(self) -> list[Occurrence]:
        """Displayed records that have a valid position."""
        return with_position(self.displayed())

    def saved_occurrences(self) -> list[Occurrence]:
        return self.saved.list()

    def is_saved(self, key: int) -> bool:
        return self.saved.is_saved(key)

    def export_geojson(self) -> str:
        return to_geojson(self.all_records())

    def export_csv(self) -> str:
        return to_csv(self.all_records())

    def species_summary(self) -> list[SpeciesSummary]:
        return build_species_summary(self.all_records())

    def phenology(self) -> list[MonthCount]:
        return phenology_by_month(self.displayed())

    def first_detections(self) -> list[FirstDetection]:
        return first_detections(self.all_records())

    def export_report(self, map_image_url: str | None = None) -> str:
        return build_species_report_html(
            self.all_records(),
            filters=self.controller.filters,
            region_name=self.region_name() or None,
            map_image_url=map_image_url,
        )

    async def wait(self) -> None:
        await self.controller.wait()
