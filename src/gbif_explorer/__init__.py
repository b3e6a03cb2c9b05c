"""GBIF Explorer - fetch, filter, compose and export biodiversity occurrences.

Architecture::

    datasources/   External inputs (GBIF API, Nominatim places, imported files)
    cache.py       In-memory TTL response cache shared by the GBIF client
    analysis/      Pure logic over records (merge + timeline, species summary)
    renderers/     Pure records -> GeoJSON / CSV / HTML report
    refetch.py     Debounced, last-request-wins refetch controller
    session.py     One exploration: region, filters, imports, saved records
    persistence/   Favorites, saved occurrences, view preferences (JsonStore)
    flows/         Prefect orchestration (export flow)
    services/      Shared utilities (HTTP session with timeouts, logging)

Data flow: region/filter change -> refetch -> datasources (cache) ->
analysis (merge with imports, timeline) -> renderers -> exports

Occurrence keys: records from GBIF have positive keys; imported records get
synthetic negative keys (-1, -2, ...), so the two never collide.

Extension points — see each package's docstring for step-by-step guides:
  - New data source:   datasources/__init__.py
  - New analysis:      analysis/__init__.py
  - New export format: renderers/__init__.py
"""

__version__ = "0.1.0"

from gbif_explorer.config import Settings

__all__ = ["Settings", "__version__"]
