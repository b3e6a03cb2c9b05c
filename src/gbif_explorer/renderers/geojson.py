"""GeoJSON export of occurrence records."""

from __future__ import annotations

import json
import math
from collections.abc import Iterable
from typing import Any

from gbif_explorer.analysis.compose import has_position
from gbif_explorer.schemas import Occurrence


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats with None so the output stays valid JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_json_safe(v) for v in value]
    return value


def to_feature(occ: Occurrence) -> dict[str, Any]:
    """Point feature carrying the full record as properties."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "Point",
            "coordinates": [occ["decimalLongitude"], occ["decimalLatitude"]],
        },
        "properties": _json_safe(dict(occ)),
    }


def to_geojson(records: Iterable[Occurrence]) -> str:
    """
    FeatureCollection of every record with a valid position.

    Records without coordinates are skipped (they still appear in CSV
    exports). Output order follows input order.
    """
    features = [to_feature(o) for o in records if has_position(o)]
    collection = {"type": "FeatureCollection", "features": features}
    return json.dumps(collection, indent=2, ensure_ascii=False)
