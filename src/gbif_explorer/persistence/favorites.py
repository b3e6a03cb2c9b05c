"""Favorite regions: user-named bounding boxes."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from gbif_explorer.geometry import Bounds
from gbif_explorer.schemas import FavoriteRegion
from gbif_explorer.store import JsonStore

logger = logging.getLogger(__name__)

STORE_KEY = "favorites"
_BOUND_NAMES = ("west", "south", "east", "north")


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _parse_favorite(raw: Any) -> FavoriteRegion | None:
    if not isinstance(raw, dict):
        return None
    fav_id, name, bounds = raw.get("id"), raw.get("name"), raw.get("bounds")
    if not isinstance(fav_id, str) or not isinstance(name, str) or not isinstance(bounds, dict):
        return None
    if not all(_is_number(bounds.get(k)) for k in _BOUND_NAMES):
        return None
    return FavoriteRegion(id=fav_id, name=name, bounds=Bounds(**{k: float(bounds[k]) for k in _BOUND_NAMES}))


def _to_json(fav: FavoriteRegion) -> dict[str, Any]:
    return {"id": fav.id, "name": fav.name, "bounds": fav.bounds.as_dict()}


class FavoritesRepository:
    """List, add and remove favorite regions.

    Ids are ``fav-<milliseconds since epoch>``; ``clock`` returns seconds
    and can be swapped out in tests.
    """

    def __init__(self, store: JsonStore, clock: Callable[[], float] = time.time) -> None:
        self._store = store
        self._clock = clock

    def list(self) -> list[FavoriteRegion]:
        """Stored favorites in insertion order; invalid entries are dropped."""
        raw = self._store.get(STORE_KEY)
        if not isinstance(raw, list):
            return []
        favorites = [fav for fav in (_parse_favorite(item) for item in raw) if fav is not None]
        if len(favorites) != len(raw):
            logger.warning("Dropped %d invalid favorite entries", len(raw) - len(favorites))
        return favorites

    def add(self, name: str, bounds: Bounds) -> FavoriteRegion:
        favorites = self.list()
        taken = {f.id for f in favorites}
        millis = int(self._clock() * 1000)
        fav_id = f"fav-{millis}"
        while fav_id in taken:
            millis += 1
            fav_id = f"fav-{millis}"
        favorite = FavoriteRegion(id=fav_id, name=name, bounds=bounds)
        favorites.append(favorite)
        self._save(favorites)
        return favorite

    def remove(self, fav_id: str) -> None:
        self._save([f for f in self.list() if f.id != fav_id])

    def get(self, fav_id: str) -> FavoriteRegion | None:
        return next((f for f in self.list() if f.id == fav_id), None)

    def get_bounds(self, fav_id: str) -> Bounds | None:
        favorite = self.get(fav_id)
        return favorite.bounds if favorite else None

    def _save(self, favorites: list[FavoriteRegion]) -> None:
        self._store.set(STORE_KEY, [_to_json(f) for f in favorites])
