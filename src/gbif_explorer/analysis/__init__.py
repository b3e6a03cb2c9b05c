"""Dataset composition and derived summaries.

Pure functions over occurrence records (``dict[str, Any]``). This is the
domain logic layer between datasources and renderers.

Dependency rule: analysis/ never fetches data or produces output formats.

Modules:
  - occurrence_dates: year/month derivation (structured fields, then eventDate)
  - compose: merged API + imported view with timeline filter, region resolution
  - species_summary: per-species aggregation for reports
  - phenology: counts by month, first detections per taxon

Adding an analysis module
-------------------------
1. Create ``analysis/{name}.py`` with a pure function over records.
2. No I/O, no HTTP, no Prefect decorators.
3. Re-export here and add tests in ``tests/test_{name}.py``.
"""

from gbif_explorer.analysis.compose import (
    has_position,
    merged_view,
    region_display_name,
    resolve_region_bounds,
    with_position,
)
from gbif_explorer.analysis.occurrence_dates import occurrence_month, occurrence_year
from gbif_explorer.analysis.phenology import (
    FirstDetection,
    MonthCount,
    first_detections,
    phenology_by_month,
)
from gbif_explorer.analysis.species_summary import (
    SpeciesSummary,
    build_species_summary,
    species_key,
)

__all__ = [
    "FirstDetection",
    "MonthCount",
    "SpeciesSummary",
    "build_species_summary",
    "first_detections",
    "has_position",
    "merged_view",
    "occurrence_month",
    "occurrence_year",
    "phenology_by_month",
    "region_display_name",
    "resolve_region_bounds",
    "species_key",
    "with_position",
]
