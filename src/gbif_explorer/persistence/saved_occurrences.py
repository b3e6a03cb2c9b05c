"""Occurrence records the user saved from the info box."""

from __future__ import annotations

from typing import Any

from gbif_explorer.schemas import Occurrence
from gbif_explorer.store import JsonStore

STORE_KEY = "saved-occurrences"


def _has_integer_key(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("key"), int) and not isinstance(item["key"], bool)


class SavedOccurrencesRepository:
    """Saved records keyed by their integer occurrence ``key``."""

    def __init__(self, store: JsonStore) -> None:
        self._store = store

    def list(self) -> list[Occurrence]:
        raw = self._store.get(STORE_KEY)
        if not isinstance(raw, list):
            return []
        return [item for item in raw if _has_integer_key(item)]

    def add(self, occurrence: Occurrence) -> bool:
        """Save a record; returns False if it has no integer key or is already saved."""
        if not _has_integer_key(occurrence):
            return False
        saved = self.list()
        if any(o["key"] == occurrence["key"] for o in saved):
            return False
        saved.append(dict(occurrence))
        self._store.set(STORE_KEY, saved)
        return True

    def remove(self, key: int) -> None:
        self._store.set(STORE_KEY, [o for o in self.list() if o["key"] != key])

    def is_saved(self, key: int) -> bool:
        return any(o["key"] == key for o in self.list())
