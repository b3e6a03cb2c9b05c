"""Year/month derivation for occurrence records.

Structured ``year``/``month`` fields win; otherwise the leading ``YYYY`` or
``YYYY-MM`` of ``eventDate`` is used. A year-only date has no month, so it
never lands in a January bucket.
"""

from __future__ import annotations

import math
import re
from typing import Any

from gbif_explorer.schemas import Occurrence

_YEAR_PREFIX = re.compile(r"^(\d{4})")
_MONTH_PREFIX = re.compile(r"^\d{4}-(\d{2})")


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value) or not float(value).is_integer():
        return None
    return int(value)


def occurrence_year(occ: Occurrence) -> int | None:
    """Year (e.g. 2020), or None if not determinable."""
    year = _as_int(occ.get("year"))
    if year is not None:
        return year
    event_date = occ.get("eventDate")
    if isinstance(event_date, str):
        match = _YEAR_PREFIX.match(event_date)
        if match:
            return int(match.group(1))
    return None


def occurrence_month(occ: Occurrence) -> int | None:
    """Month 1-12 only when explicitly present; None for year-only dates."""
    month = _as_int(occ.get("month"))
    if month is not None and 1 <= month <= 12:
        return month
    event_date = occ.get("eventDate")
    if isinstance(event_date, str):
        match = _MONTH_PREFIX.match(event_date)
        if match:
            parsed = int(match.group(1))
            return parsed if 1 <= parsed <= 12 else None
    return None
