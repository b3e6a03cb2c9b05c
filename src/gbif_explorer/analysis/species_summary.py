"""Per-species summary of an occurrence set, for reports."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from gbif_explorer.analysis.occurrence_dates import occurrence_year
from gbif_explorer.schemas import Occurrence

MAX_COUNTRIES = 5
MAX_BASIS = 2
UNKNOWN = "Unknown"


@dataclass
class SpeciesSummary:
    """Aggregated facts about one species in the current dataset."""

    scientific_name: str
    vernacular_name: str | None
    count: int = 0
    iucn_category: str | None = None
    years: list[int] = field(default_factory=list)
    countries: list[str] = field(default_factory=list)
    more_countries: bool = False
    example_coordinate: tuple[float, float] | None = None
    basis_of_record: list[str] = field(default_factory=list)
    more_basis: bool = False
    kingdom: str | None = None
    order: str | None = None
    family: str | None = None

    @property
    def year_range(self) -> str | None:
        """``"2019"`` or ``"2015–2020"``; None without dated records."""
        if not self.years:
            return None
        low, high = min(self.years), max(self.years)
        return str(low) if low == high else f"{low}–{high}"

    @property
    def taxonomy(self) -> str | None:
        parts = [p for p in (self.kingdom, self.order, self.family) if p]
        return " › ".join(parts) if parts else None


def _text(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def species_key(occ: Occurrence) -> str:
    """Grouping key: scientific name, else species, else genus, else Unknown."""
    for name in ("scientificName", "species", "genus"):
        value = _text(occ.get(name))
        if value:
            return value
    return UNKNOWN


def _coordinate(occ: Occurrence) -> tuple[float, float] | None:
    lat = occ.get("decimalLatitude")
    lon = occ.get("decimalLongitude")
    if isinstance(lat, int | float) and isinstance(lon, int | float):
        if math.isfinite(lat) and math.isfinite(lon):
            return (float(lat), float(lon))
    return None


def _add_bounded(values: list[str], value: str | None, limit: int) -> bool:
    """Add a distinct value while under ``limit``; True if it overflowed."""
    if value is None or value in values:
        return False
    if len(values) >= limit:
        return True
    values.append(value)
    return False


def build_species_summary(records: Iterable[Occurrence]) -> list[SpeciesSummary]:
    """Group records by species, sorted by occurrence count (descending)."""
    by_key: dict[str, SpeciesSummary] = {}
    for occ in records:
        key = species_key(occ)
        summary = by_key.get(key)
        if summary is None:
            summary = SpeciesSummary(
                scientific_name=key,
                vernacular_name=_text(occ.get("vernacularName")),
                kingdom=_text(occ.get("kingdom")),
                order=_text(occ.get("order")),
                family=_text(occ.get("family")),
            )
            by_key[key] = summary

        summary.count += 1
        if summary.iucn_category is None:
            summary.iucn_category = _text(occ.get("iucnRedListCategory"))
        year = occurrence_year(occ)
        if year is not None:
            summary.years.append(year)
        if _add_bounded(summary.countries, _text(occ.get("countryCode")), MAX_COUNTRIES):
            summary.more_countries = True
        basis = _text(occ.get("basisOfRecord"))
        if _add_bounded(summary.basis_of_record, basis.replace("_", " ") if basis else None, MAX_BASIS):
            summary.more_basis = True
        if summary.example_coordinate is None:
            summary.example_coordinate = _coordinate(occ)

    return sorted(by_key.values(), key=lambda s: s.count, reverse=True)
