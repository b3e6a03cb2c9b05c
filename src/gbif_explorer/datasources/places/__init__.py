"""Place-name search (Nominatim geocoder).

Public API:
  - client: search_places, PlaceSearchError
"""

from gbif_explorer.datasources.places.client import PlaceSearchError, search_places

__all__ = ["PlaceSearchError", "search_places"]
