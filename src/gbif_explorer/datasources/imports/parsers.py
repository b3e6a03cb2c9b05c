"""
Parse GBIF / Darwin Core occurrence exports from CSV, JSON, or ZIP.

Rows without usable coordinates are dropped. Imported records get negative
synthetic keys (-1, -2, ...) so they never collide with positive GBIF
occurrence keys; a JSON object that already carries a positive integer
``key`` keeps it.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
import re
import zipfile
from pathlib import Path
from typing import Any

from gbif_explorer.schemas import Occurrence

logger = logging.getLogger(__name__)


class ImportParseError(ValueError):
    """An import could not be read as CSV/JSON or had no usable rows."""


# Lower-cased, space-collapsed header -> Darwin Core field name
CSV_HEADER_ALIASES: dict[str, str] = {
    "decimal latitude": "decimalLatitude",
    "decimal longitude": "decimalLongitude",
    "decimallatitude": "decimalLatitude",
    "decimallongitude": "decimalLongitude",
    "latitude": "decimalLatitude",
    "longitude": "decimalLongitude",
    "scientific name": "scientificName",
    "scientificname": "scientificName",
    "vernacular name": "vernacularName",
    "vernacularname": "vernacularName",
    "event date": "eventDate",
    "eventdate": "eventDate",
    "country code": "countryCode",
    "countrycode": "countryCode",
    "basis of record": "basisOfRecord",
    "basisofrecord": "basisOfRecord",
    "iucn red list category": "iucnRedListCategory",
    "iucnredlistcategory": "iucnRedListCategory",
    "recorded by": "recordedBy",
    "recordedby": "recordedBy",
    "institution code": "institutionCode",
    "institutioncode": "institutionCode",
    "dataset name": "datasetName",
    "datasetname": "datasetName",
    "taxon rank": "taxonRank",
    "taxonrank": "taxonRank",
    "occurrence id": "occurrenceID",
    "occurrenceid": "occurrenceID",
    "dataset key": "datasetKey",
    "datasetkey": "datasetKey",
}

# Text fields copied from a row onto the imported record
TEXT_FIELDS: tuple[str, ...] = (
    "scientificName",
    "vernacularName",
    "eventDate",
    "countryCode",
    "basisOfRecord",
    "iucnRedListCategory",
    "kingdom",
    "phylum",
    "class",
    "order",
    "family",
    "genus",
    "species",
    "taxonRank",
    "locality",
    "recordedBy",
    "institutionCode",
    "datasetName",
    "occurrenceID",
    "datasetKey",
)

_DELIMITERS = (",", ";", "\t")
_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Field helpers
# =============================================================================


def normalize_header(header: str) -> str:
    """Map a column header to its Darwin Core field name."""
    trimmed = header.strip()
    collapsed = _WHITESPACE.sub(" ", trimmed.lower())
    return CSV_HEADER_ALIASES.get(collapsed) or _WHITESPACE.sub("", trimmed)


def parse_number(value: Any, *, decimal_comma: bool = False) -> float | None:
    """
    Finite float from a number or numeric text.

    Commas are thousands separators, except with ``decimal_comma`` where a
    single comma in text without a dot is the decimal point (``"59,91"``).
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    else:
        text = str(value).strip()
        if decimal_comma and text.count(",") == 1 and "." not in text:
            text = text.replace(",", ".")
        try:
            number = float(text.replace(",", ""))
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_year(value: Any) -> int | None:
    number = parse_number(value)
    if number is not None and 1000 <= number <= 9999:
        return int(number)
    if isinstance(value, str) and len(value) >= 4 and value[:4].isdigit():
        return int(value[:4])
    return None


def _parse_month(value: Any) -> int | None:
    number = parse_number(value)
    if number is not None and number.is_integer() and 1 <= number <= 12:
        return int(number)
    return None


def _valid_position(lat: float | None, lon: float | None) -> bool:
    return lat is not None and lon is not None and -90 <= lat <= 90 and -180 <= lon <= 180


def _lookup(row: dict[str, Any], name: str) -> Any:
    value = row.get(name)
    if value is None:
        value = row.get(name.lower())
    return value


def row_to_occurrence(
    row: dict[str, Any], key: int, *, decimal_comma: bool = False
) -> Occurrence:
    """Build an occurrence record from a parsed row; absent fields are omitted."""
    lat = _lookup(row, "decimalLatitude")
    lon = _lookup(row, "decimalLongitude")
    record: Occurrence = {
        "key": key,
        "decimalLatitude": parse_number(lat, decimal_comma=decimal_comma),
        "decimalLongitude": parse_number(lon, decimal_comma=decimal_comma),
    }
    event_date = _lookup(row, "eventDate")
    year = parse_year(_lookup(row, "year"))
    if year is None and event_date:
        year = parse_year(str(event_date)[:4])
    if year is not None:
        record["year"] = year
    month = _parse_month(_lookup(row, "month"))
    if month is not None:
        record["month"] = month

    for name in TEXT_FIELDS:
        value = _lookup(row, name)
        if isinstance(value, str) and value.strip():
            record[name] = value.strip()
    return record


# =============================================================================
# Parsers
# =============================================================================


def _detect_delimiter(header_line: str) -> str:
    return max(_DELIMITERS, key=header_line.count)


def parse_occurrences_csv(text: str) -> list[Occurrence]:
    """
    Parse CSV text with a header row (``,`` ``;`` or tab separated).

    Returns records with valid decimalLatitude/decimalLongitude, keyed
    -1, -2, ... in row order. With ``;`` or tab separators a comma inside
    a coordinate is read as a decimal point. Quoted fields may span lines.
    """
    header_line = next((line for line in text.splitlines() if line.strip()), None)
    if header_line is None:
        return []

    delimiter = _detect_delimiter(header_line)
    decimal_comma = delimiter != ","
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    rows = (r for r in reader if any(c.strip() for c in r))
    headers = [normalize_header(h) for h in next(rows, [])]
    results: list[Occurrence] = []
    synthetic_key = -1
    dropped = 0
    for values in rows:
        row = {h: v.strip() for h, v in zip(headers, values, strict=False) if h}
        lat = parse_number(row.get("decimalLatitude"), decimal_comma=decimal_comma)
        lon = parse_number(row.get("decimalLongitude"), decimal_comma=decimal_comma)
        if not _valid_position(lat, lon):
            dropped += 1
            continue
        results.append(row_to_occurrence(row, synthetic_key, decimal_comma=decimal_comma))
        synthetic_key -= 1
    if dropped:
        logger.info("Dropped %d CSV rows without valid coordinates", dropped)
    return results


def parse_occurrences_json(text: str) -> list[Occurrence]:
    """
    Parse a JSON array of occurrence objects, or ``{"results": [...]}``.

    Invalid JSON yields ``[]``.
    """
    try:
        data = json.loads(text)
    except ValueError:
        return []
    if isinstance(data, dict):
        data = data.get("results")
    if not isinstance(data, list):
        return []

    results: list[Occurrence] = []
    synthetic_key = -1
    for item in data:
        if not isinstance(item, dict):
            continue
        lat = parse_number(_lookup(item, "decimalLatitude"))
        lon = parse_number(_lookup(item, "decimalLongitude"))
        if not _valid_position(lat, lon):
            continue
        existing = item.get("key")
        if isinstance(existing, int) and not isinstance(existing, bool) and existing > 0:
            key = existing
        else:
            key = synthetic_key
            synthetic_key -= 1
        results.append(row_to_occurrence(item, key))
    return results


def _parse_text(text: str, filename: str) -> list[Occurrence]:
    ext = Path(filename).suffix.lower()
    if ext == ".json":
        return parse_occurrences_json(text)
    if ext in (".csv", ".txt", ".tsv"):
        return parse_occurrences_csv(text)
    return parse_occurrences_json(text) or parse_occurrences_csv(text)


def _zip_member_text(data: bytes) -> tuple[str, str] | None:
    """Pick the CSV (or else JSON, or else first regular file) inside a ZIP."""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = [n for n in archive.namelist() if not n.endswith("/")]
        candidate = (
            next((n for n in names if n.lower().endswith(".csv")), None)
            or next((n for n in names if n.lower().endswith(".json")), None)
            or next((n for n in names if not n.startswith("__")), None)
        )
        if candidate is None:
            return None
        return candidate, archive.read(candidate).decode("utf-8-sig", errors="replace")


def parse_occurrences_bytes(data: bytes, filename: str) -> list[Occurrence]:
    """
    Parse uploaded file content, dispatching on the filename extension.

    Raises:
        ImportParseError: Unreadable archive, or no rows with valid coordinates.
    """
    if Path(filename).suffix.lower() == ".zip":
        try:
            member = _zip_member_text(data)
        except zipfile.BadZipFile as exc:
            raise ImportParseError(f"{filename} is not a valid ZIP archive") from exc
        if member is None:
            raise ImportParseError(f"{filename} contains no CSV or JSON file")
        member_name, text = member
        records = _parse_text(text, member_name)
    else:
        records = _parse_text(data.decode("utf-8-sig", errors="replace"), filename)

    if not records:
        msg = f"No occurrences with valid decimalLatitude/decimalLongitude found in {filename}"
        raise ImportParseError(msg)
    logger.info("Imported %d occurrences from %s", len(records), filename)
    return records


def parse_occurrences_file(path: Path | str) -> list[Occurrence]:
    """Read and parse an occurrence file from disk."""
    file_path = Path(path)
    return parse_occurrences_bytes(file_path.read_bytes(), file_path.name)
