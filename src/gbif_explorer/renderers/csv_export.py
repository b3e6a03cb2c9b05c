"""CSV export of occurrence records."""

from __future__ import annotations

import csv
import io
import json
import math
from collections.abc import Sequence
from typing import Any

from gbif_explorer.schemas import Occurrence

# Common GBIF fields first; any other keys follow alphabetically
PREFERRED_ORDER: tuple[str, ...] = (
    "key",
    "scientificName",
    "vernacularName",
    "decimalLatitude",
    "decimalLongitude",
    "year",
    "month",
    "day",
    "eventDate",
    "locality",
    "countryCode",
    "iucnRedListCategory",
    "basisOfRecord",
    "datasetKey",
    "datasetName",
    "occurrenceID",
    "institutionCode",
    "recordedBy",
)


def csv_headers(records: Sequence[Occurrence]) -> list[str]:
    """Union of all record keys, preferred fields first."""
    keys: set[str] = set()
    for occ in records:
        keys.update(occ.keys())
    preferred = [k for k in PREFERRED_ORDER if k in keys]
    extras = sorted(keys.difference(PREFERRED_ORDER))
    return preferred + extras


def cell_text(value: Any) -> str:
    """Plain text for one value; missing and non-finite values are empty."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, list | tuple):
        return ",".join(cell_text(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def to_csv(records: Sequence[Occurrence]) -> str:
    """
    CSV with one row per record.

    Missing values render as empty fields. Fields containing a comma, quote
    or line break are quoted with internal quotes doubled. Lines are joined
    with ``\\n`` and there is no trailing newline.
    """
    headers = csv_headers(records)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(headers)
    for occ in records:
        writer.writerow([cell_text(occ.get(h)) for h in headers])
    return buf.getvalue().removesuffix("\n")
