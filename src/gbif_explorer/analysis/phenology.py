"""Seasonality and first-detection summaries from loaded occurrences."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from gbif_explorer.analysis.occurrence_dates import occurrence_month, occurrence_year
from gbif_explorer.schemas import Occurrence

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class MonthCount:
    month: int
    count: int
    label: str


@dataclass(frozen=True)
class FirstDetection:
    """Earliest year a taxon appears in the dataset."""

    taxon_key: int
    scientific_name: str
    vernacular_name: str | None
    first_year: int
    count: int


def phenology_by_month(records: Iterable[Occurrence]) -> list[MonthCount]:
    """Occurrence counts per calendar month; records without a month are skipped."""
    counts = [0] * 12
    for occ in records:
        month = occurrence_month(occ)
        if month is not None:
            counts[month - 1] += 1
    return [MonthCount(month=i + 1, count=c, label=MONTH_LABELS[i]) for i, c in enumerate(counts)]


def first_detections(records: Iterable[Occurrence]) -> list[FirstDetection]:
    """First year and dated-record count per taxon, earliest first."""
    years_by_taxon: dict[int, list[int]] = {}
    names: dict[int, tuple[str, str | None]] = {}
    for occ in records:
        taxon_key = next(
            (occ[k] for k in ("speciesKey", "genusKey", "taxonKey", "key") if occ.get(k) is not None),
            None,
        )
        year = occurrence_year(occ)
        if taxon_key is None or year is None:
            continue
        years_by_taxon.setdefault(taxon_key, []).append(year)
        names.setdefault(
            taxon_key,
            (occ.get("scientificName") or f"Taxon {taxon_key}", occ.get("vernacularName")),
        )

    detections = [
        FirstDetection(
            taxon_key=key,
            scientific_name=names[key][0],
            vernacular_name=names[key][1],
            first_year=min(years),
            count=len(years),
        )
        for key, years in years_by_taxon.items()
    ]
    return sorted(detections, key=lambda d: (d.first_year, d.scientific_name))
