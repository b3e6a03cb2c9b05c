"""Bounds and WKT geometry helpers.

GBIF's ``geometry`` parameter expects a WKT polygon in longitude-latitude
order with a counter-clockwise, closed outer ring.

Rectangles crossing the antimeridian are not handled specially, and
``rectangle_to_bounds`` does no wrapping or clamping.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Bounds:
    """West/south/east/north rectangle in degrees."""

    west: float
    south: float
    east: float
    north: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)

    def as_bbox(self) -> tuple[float, float, float, float]:
        """Return ``(west, south, east, north)``."""
        return (self.west, self.south, self.east, self.north)


def _fmt(value: float) -> str:
    """Shortest text for a coordinate; integral values drop the ``.0``."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def bounds_to_polygon(bounds: Bounds) -> str:
    """
    Build the WKT polygon for a bounding box.

    Ring order is SW -> NW -> NE -> SE -> SW::

        >>> bounds_to_polygon(Bounds(west=10, south=58, east=20, north=62))
        'POLYGON((10 58, 10 62, 20 62, 20 58, 10 58))'
    """
    w, s, e, n = bounds.west, bounds.south, bounds.east, bounds.north
    ring = [(w, s), (w, n), (e, n), (e, s), (w, s)]
    points = ", ".join(f"{_fmt(lon)} {_fmt(lat)}" for lon, lat in ring)
    return f"POLYGON(({points}))"


def rectangle_to_bounds(
    west: float,
    south: float,
    east: float,
    north: float,
    in_radians: bool = False,
) -> Bounds:
    """Build Bounds from a camera rectangle, converting radians when asked."""
    if in_radians:
        return Bounds(
            west=math.degrees(west),
            south=math.degrees(south),
            east=math.degrees(east),
            north=math.degrees(north),
        )
    return Bounds(west=west, south=south, east=east, north=north)


def bbox_to_bounds(bbox: Sequence[float]) -> Bounds:
    """GeoJSON-style ``[west, south, east, north]`` to Bounds."""
    if len(bbox) < 4:
        msg = "bbox must have at least 4 elements [west, south, east, north]"
        raise ValueError(msg)
    try:
        west, south, east, north = (float(v) for v in bbox[:4])
    except (TypeError, ValueError):
        msg = f"bbox components must be numeric: {list(bbox)!r}"
        raise ValueError(msg) from None
    return Bounds(west=west, south=south, east=east, north=north)

