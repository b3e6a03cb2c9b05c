"""
Prefect flow for exporting GBIF occurrences of a region to files.

Fetches occurrences for a region and taxon selection (chunked, cached,
rate-limit aware), merges any imported files, narrows by the timeline
year/month and writes GeoJSON, CSV and/or the HTML species report.

Run locally:
    python -m gbif_explorer.flows.export

Run with Prefect dashboard:
    prefect server start &
    python -m gbif_explorer.flows.export
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from prefect import flow, task

from gbif_explorer.analysis.compose import merged_view
from gbif_explorer.cache import ResponseCache
from gbif_explorer.config import get_settings
from gbif_explorer.datasources.gbif import GbifClient, fetch_up_to
from gbif_explorer.datasources.imports import parse_occurrences_file
from gbif_explorer.geometry import Bounds, bbox_to_bounds, bounds_to_polygon
from gbif_explorer.reference.geography import get_region
from gbif_explorer.renderers import EXPORT_FORMATS
from gbif_explorer.renderers.csv_export import to_csv
from gbif_explorer.renderers.geojson import to_geojson
from gbif_explorer.renderers.species_report import build_species_report_html
from gbif_explorer.schemas import Occurrence, OccurrenceFilters

EXPORT_BASENAME = "gbif-occurrences"
DEFAULT_FORMATS = ("geojson", "csv")


def make_client() -> GbifClient:
    """GBIF client configured from settings, with a fresh response cache."""
    return GbifClient.from_settings(get_settings(), ResponseCache())


def resolve_bounds(region: str | None, bbox: list[float] | None) -> tuple[Bounds | None, str | None]:
    """Bounds and display name from a predefined region id or a raw bbox."""
    if bbox is not None:
        return bbox_to_bounds(bbox), "Custom bounding box"
    if region is None:
        return None, None
    match = get_region(region)
    if match is None:
        msg = f"Unknown region: {region}"
        raise ValueError(msg)
    return match.bounds, match.name


@task(name="fetch-occurrences")
def fetch_occurrences(filters: OccurrenceFilters, max_total: int) -> dict[str, Any]:
    """Chunked occurrence fetch; 429 backoff is handled by the client."""
    page = fetch_up_to(make_client(), filters, max_total)
    return {"count": page.count, "results": page.results}


@task(name="load-imports")
def load_imports(paths: list[str]) -> list[Occurrence]:
    """Parse every import file; later files continue the synthetic key sequence."""
    records: list[Occurrence] = []
    for p in paths:
        parsed = parse_occurrences_file(Path(p))
        offset = len([r for r in records if isinstance(r.get("key"), int) and r["key"] < 0])
        for occ in parsed:
            key = occ.get("key")
            if isinstance(key, int) and key < 0:
                occ["key"] = key - offset
        print(f"Imported {len(parsed)} records from {p}")
        records.extend(parsed)
    return records


@task(name="write-export")
def write_export(content: str, path: Path) -> Path:
    """Write one export file, creating the directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(content)
    return path


@flow(name="export-occurrences", log_prints=True)
def export_occurrences(  # noqa: PLR0913
    region: str | None = None,
    bbox: list[float] | None = None,
    taxon_keys: list[int] | None = None,
    limit: int | None = None,
    imports: list[str] | None = None,
    year: int | None = None,
    month: int | None = None,
    country: str | None = None,
    continent: str | None = None,
    iucn_red_list_category: str | None = None,
    basis_of_record: str | None = None,
    out_dir: str = "exports",
    formats: list[str] | None = None,
) -> dict[str, Any]:
    """
    Fetch, merge and export occurrences.

    A taxon selection is required before anything is fetched from GBIF;
    without one only imported records are exported.
    """
    unknown = [f for f in formats or () if f not in EXPORT_FORMATS]
    if unknown:
        msg = f"Unknown export format(s): {', '.join(unknown)}"
        raise ValueError(msg)

    settings = get_settings()
    bounds, region_name = resolve_bounds(region, bbox)
    filters = OccurrenceFilters(
        geometry=bounds_to_polygon(bounds) if bounds else None,
        taxon_keys=tuple(taxon_keys or ()),
        country=country,
        continent=continent,
        iucn_red_list_category=iucn_red_list_category,
        basis_of_record=basis_of_record,
        limit=limit or settings.default_limit,
    )

    api_records: list[Occurrence] = []
    total_count = 0
    if filters.has_taxon_filter:
        print(f"Fetching up to {filters.limit} occurrences for {region_name or 'all regions'}...")
        fetched = fetch_occurrences(filters, filters.limit)
        api_records = fetched["results"]
        total_count = fetched["count"]
        print(f"Fetched {len(api_records)} of {total_count} matching occurrences")
    else:
        print("No taxon selected, skipping GBIF fetch.")

    imported = load_imports(imports or [])
    records = merged_view(api_records, imported, year, month)
    print(f"Exporting {len(records)} records")

    outputs: dict[str, str] = {}
    out = Path(out_dir)
    for name in formats or DEFAULT_FORMATS:
        export_format = EXPORT_FORMATS[name]
        if name == "geojson":
            content = to_geojson(records)
        elif name == "csv":
            content = to_csv(records)
        else:
            content = build_species_report_html(records, filters=filters, region_name=region_name)
        path = write_export(content, out / f"{EXPORT_BASENAME}{export_format.extension}")
        outputs[name] = str(path)
        print(f"Wrote {path}")

    return {
        "fetched": len(api_records),
        "total_count": total_count,
        "imported": len(imported),
        "exported": len(records),
        "outputs": outputs,
    }


if __name__ == "__main__":
    result = export_occurrences()
    print(f"Flow complete: {result}")
