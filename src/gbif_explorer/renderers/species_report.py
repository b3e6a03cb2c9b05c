"""Species summary report renderer.

Builds a standalone HTML report: header with region and active filters,
optional map snapshot, and one table row per species. Printing the page
(or any HTML-to-PDF tool) produces the PDF report.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from gbif_explorer.analysis.phenology import phenology_by_month
from gbif_explorer.analysis.species_summary import SpeciesSummary, build_species_summary
from gbif_explorer.renderers import render_template
from gbif_explorer.schemas import Occurrence, OccurrenceFilters

GBIF_URL = "https://www.gbif.org"
MAX_NAME_LENGTH = 40
MAX_VERNACULAR_LENGTH = 22
MAX_TAXONOMY_LENGTH = 28


def _truncate(text: str | None, limit: int) -> str:
    if not text:
        return "—"
    return text if len(text) <= limit else text[: limit - 1] + "…"


def _with_ellipsis(values: list[str], more: bool) -> str:
    if not values:
        return "—"
    return ", ".join(values) + ("…" if more else "")


def filter_lines(filters: OccurrenceFilters | None) -> list[str]:
    """Human-readable description of the active filters."""
    if filters is None:
        return []
    lines: list[str] = []
    if filters.taxon_keys:
        lines.append("Taxon keys: " + ", ".join(str(k) for k in filters.taxon_keys))
    elif filters.taxon_key is not None:
        lines.append(f"Taxon key: {filters.taxon_key}")
    labelled = [
        ("Year", filters.year),
        ("Event date", filters.event_date),
        ("IUCN category", filters.iucn_red_list_category),
        ("Basis of record", filters.basis_of_record),
        ("Continent", filters.continent),
        ("Country", filters.country),
        ("Dataset", filters.dataset_key),
        ("Institution", filters.institution_code),
    ]
    lines.extend(f"{label}: {value}" for label, value in labelled if value)
    if filters.limit:
        lines.append(f"Result limit: {filters.limit}")
    return lines


def summary_rows(summaries: Sequence[SpeciesSummary]) -> list[dict[str, str | int]]:
    """Table cells for each species, truncated for print layout."""
    rows: list[dict[str, str | int]] = []
    for s in summaries:
        coordinate = (
            f"{s.example_coordinate[0]:.4f}, {s.example_coordinate[1]:.4f}"
            if s.example_coordinate
            else "—"
        )
        rows.append(
            {
                "scientific_name": _truncate(s.scientific_name, MAX_NAME_LENGTH),
                "vernacular_name": _truncate(s.vernacular_name, MAX_VERNACULAR_LENGTH),
                "count": s.count,
                "iucn": s.iucn_category or "—",
                "year_range": s.year_range or "—",
                "countries": _with_ellipsis(s.countries, s.more_countries),
                "coordinate": coordinate,
                "taxonomy": _truncate(s.taxonomy, MAX_TAXONOMY_LENGTH),
                "basis": _with_ellipsis(s.basis_of_record, s.more_basis),
            }
        )
    return rows


def build_species_report_html(
    records: Sequence[Occurrence],
    *,
    filters: OccurrenceFilters | None = None,
    region_name: str | None = None,
    map_image_url: str | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Render the species report page for ``records``."""
    summaries = build_species_summary(records)
    generated = generated_at or datetime.now(UTC)
    return render_template(
        "species_report.html.j2",
        title="GBIF occurrence report",
        region_name=region_name,
        generated_at=generated.strftime("%Y-%m-%d %H:%M UTC"),
        filter_lines=filter_lines(filters),
        total_records=len(records),
        species_count=len(summaries),
        map_image_url=map_image_url,
        rows=summary_rows(summaries),
        month_counts=phenology_by_month(records),
        gbif_url=GBIF_URL,
    )
