"""Local persistence of user state on top of ``JsonStore``.

Modules:
  - favorites: named regions saved by the user
  - saved_occurrences: occurrence records bookmarked from the info box
  - view_preferences: last-used scene mode and base map

Every reader tolerates missing or malformed data and returns defaults;
writers replace the whole stored list.
"""

from gbif_explorer.persistence.favorites import FavoritesRepository as FavoritesRepository
from gbif_explorer.persistence.saved_occurrences import (
    SavedOccurrencesRepository as SavedOccurrencesRepository,
)
from gbif_explorer.persistence.view_preferences import (
    load_view_preferences as load_view_preferences,
)
from gbif_explorer.persistence.view_preferences import (
    save_view_preferences as save_view_preferences,
)
