"""Tests for favorites, saved occurrences and view preferences."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from gbif_explorer.geometry import Bounds
from gbif_explorer.persistence import (
    FavoritesRepository,
    SavedOccurrencesRepository,
    load_view_preferences,
    save_view_preferences,
)
from gbif_explorer.schemas import BaseMap, SceneMode, ViewPreferences
from gbif_explorer.store import JsonStore

if TYPE_CHECKING:
    from pathlib import Path

OSLO = Bounds(west=10.4, south=59.8, east=10.9, north=60.1)


@pytest.fixture
def store(tmp_path: Path) -> JsonStore:
    return JsonStore(tmp_path)


class TestFavoritesRepository:
    def test_add_and_list(self, store: JsonStore) -> None:
        repo = FavoritesRepository(store, clock=lambda: 1700000000.5)
        favorite = repo.add("Oslo", OSLO)
        assert favorite.id == "fav-1700000000500"
        assert repo.list() == [favorite]
        assert repo.get_bounds(favorite.id) == OSLO

    def test_ids_unique_within_same_millisecond(self, store: JsonStore) -> None:
        repo = FavoritesRepository(store, clock=lambda: 1.0)
        first = repo.add("A", OSLO)
        second = repo.add("B", OSLO)
        assert first.id == "fav-1000"
        assert second.id == "fav-1001"

    def test_remove(self, store: JsonStore) -> None:
        repo = FavoritesRepository(store, clock=lambda: 1.0)
        favorite = repo.add("A", OSLO)
        repo.remove(favorite.id)
        assert repo.list() == []
        assert repo.get(favorite.id) is None

    def test_invalid_entries_dropped(self, store: JsonStore) -> None:
        store.set(
            "favorites",
            [
                {"id": "fav-1", "name": "Ok", "bounds": {"west": 1, "south": 2, "east": 3, "north": 4}},
                {"id": "fav-2", "name": "Bad", "bounds": {"west": "1", "south": 2, "east": 3, "north": 4}},
                {"id": 3, "name": "Bad id", "bounds": {"west": 1, "south": 2, "east": 3, "north": 4}},
                {"id": "fav-4", "name": "Bool", "bounds": {"west": True, "south": 2, "east": 3, "north": 4}},
                "garbage",
            ],
        )
        assert [f.id for f in FavoritesRepository(store).list()] == ["fav-1"]

    def test_non_list_payload(self, store: JsonStore) -> None:
        store.set("favorites", {"not": "a list"})
        assert FavoritesRepository(store).list() == []


class TestSavedOccurrencesRepository:
    def test_add_is_idempotent(self, store: JsonStore) -> None:
        repo = SavedOccurrencesRepository(store)
        assert repo.add({"key": 42, "scientificName": "Lynx lynx"}) is True
        assert repo.add({"key": 42, "scientificName": "Lynx lynx"}) is False
        assert repo.is_saved(42)
        assert len(repo.list()) == 1

    def test_rejects_records_without_integer_key(self, store: JsonStore) -> None:
        repo = SavedOccurrencesRepository(store)
        assert repo.add({"scientificName": "no key"}) is False
        assert repo.add({"key": "42"}) is False
        assert repo.add({"key": True}) is False

    def test_imported_records_can_be_saved(self, store: JsonStore) -> None:
        repo = SavedOccurrencesRepository(store)
        assert repo.add({"key": -3})
        assert repo.is_saved(-3)

    def test_remove(self, store: JsonStore) -> None:
        repo = SavedOccurrencesRepository(store)
        repo.add({"key": 1})
        repo.add({"key": 2})
        repo.remove(1)
        assert [o["key"] for o in repo.list()] == [2]

    def test_malformed_entries_ignored(self, store: JsonStore) -> None:
        store.set("saved-occurrences", [{"key": 1}, {"key": "x"}, 7])
        assert SavedOccurrencesRepository(store).list() == [{"key": 1}]


class TestViewPreferences:
    def test_round_trip(self, store: JsonStore) -> None:
        prefs = ViewPreferences(scene_mode=SceneMode.FLAT_2D, base_map=BaseMap.OSM)
        save_view_preferences(store, prefs)
        assert load_view_preferences(store) == prefs

    def test_nothing_stored(self, store: JsonStore) -> None:
        assert load_view_preferences(store) is None

    def test_one_invalid_value_falls_back(self, store: JsonStore) -> None:
        store.set("view", {"sceneMode": "4D", "baseMap": "positron"})
        prefs = load_view_preferences(store)
        assert prefs == ViewPreferences(scene_mode=SceneMode.GLOBE_3D, base_map=BaseMap.POSITRON)

    def test_both_invalid(self, store: JsonStore) -> None:
        store.set("view", {"sceneMode": ["3D"], "baseMap": 5})
        assert load_view_preferences(store) is None
