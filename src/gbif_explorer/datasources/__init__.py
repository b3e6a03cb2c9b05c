"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, errors, HTTP access
    └── {feature}.py      # Fetch/parse functions (one per endpoint/concept)

Sources:
  - gbif/      Occurrence search (cached, chunked), species lookup, media
  - places/    Place-name geocoding (Nominatim)
  - imports/   User-supplied CSV/JSON/ZIP occurrence files

Adding a new datasource
-----------------------
1. Create ``datasources/{name}/`` with files above.
   See ``places/`` for a minimal example, ``gbif/`` for a richer one.

2. Write fetch functions that return dicts or models::

       from gbif_explorer.services.http import session

       def fetch_something(q: str) -> list[dict[str, Any]]:
           resp = session.get(API_URL, params={...})
           resp.raise_for_status()
           return resp.json()

3. Re-export public API in ``__init__.py`` with ``__all__``.

4. Add tests in ``tests/test_{name}.py``.
"""
