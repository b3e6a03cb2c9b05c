"""Last-used scene mode and base map."""

from __future__ import annotations

from gbif_explorer.schemas import BaseMap, SceneMode, ViewPreferences
from gbif_explorer.store import JsonStore

STORE_KEY = "view"


def load_view_preferences(store: JsonStore) -> ViewPreferences | None:
    """
    Read stored view settings.

    An invalid value falls back to its default. Returns None when nothing
    is stored or neither value is recognised.
    """
    raw = store.get(STORE_KEY)
    if not isinstance(raw, dict):
        return None
    scene_mode = raw.get("sceneMode")
    base_map = raw.get("baseMap")
    scene_ok = scene_mode in [m.value for m in SceneMode]
    base_ok = base_map in [m.value for m in BaseMap]
    if not scene_ok and not base_ok:
        return None
    return ViewPreferences(
        scene_mode=SceneMode(scene_mode) if scene_ok else SceneMode.GLOBE_3D,
        base_map=BaseMap(base_map) if base_ok else BaseMap.BING,
    )


def save_view_preferences(store: JsonStore, prefs: ViewPreferences) -> None:
    store.set(STORE_KEY, {"sceneMode": prefs.scene_mode.value, "baseMap": prefs.base_map.value})
