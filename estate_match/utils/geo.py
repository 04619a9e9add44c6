"""Geographic primitives: haversine distance and planar point-in-polygon.

Positions follow GeoJSON order, ``[longitude, latitude]``. Containment is a
planar test on those raw degree values; distances are great-circle meters.
"""

import math
from typing import Any, Sequence

from estate_match.utils.errors import GeometryError

EARTH_RADIUS_M = 6371000.0

Position = tuple[float, float]


def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the great-circle distance in meters between two points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def to_position(value: Any) -> Position:
    """Coerce a ``[lng, lat]`` pair into a float tuple, or raise GeometryError."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) < 2:
        raise GeometryError(f"Invalid position: {value!r}")

    lng, lat = value[0], value[1]
    if isinstance(lng, bool) or isinstance(lat, bool):
        raise GeometryError(f"Invalid position: {value!r}")
    try:
        lng_f = float(lng)
        lat_f = float(lat)
    except (TypeError, ValueError) as e:
        raise GeometryError(f"Non-numeric position {value!r}: {e}") from e

    if not (math.isfinite(lng_f) and math.isfinite(lat_f)):
        raise GeometryError(f"Non-finite position: {value!r}")
    return lng_f, lat_f


def close_ring(ring: Sequence[Any]) -> list[Any]:
    """Append the first position when the ring is not already closed."""
    coords = list(ring)
    if not coords:
        return coords
    first, last = coords[0], coords[-1]
    if first[0] != last[0] or first[1] != last[1]:
        coords.append(first)
    return coords


def build_polygon(rings: Any) -> list[list[Position]]:
    """
    Validate GeoJSON polygon rings and return them as float positions.

    Each ring needs at least four positions with the last equal to the first.
    The first ring is the outer boundary, any further rings are holes.
    """
    if not isinstance(rings, Sequence) or isinstance(rings, (str, bytes)) or not rings:
        raise GeometryError("Polygon requires at least one linear ring", geometry_type="Polygon")

    polygon = []
    for ring in rings:
        if not isinstance(ring, Sequence) or isinstance(ring, (str, bytes)):
            raise GeometryError(f"Invalid linear ring: {ring!r}", geometry_type="Polygon")
        positions = [to_position(p) for p in ring]
        if len(positions) < 4:
            raise GeometryError(
                "Each LinearRing of a Polygon must have 4 or more Positions",
                geometry_type="Polygon"
            )
        if positions[0] != positions[-1]:
            raise GeometryError(
                "First and last Position are not equivalent",
                geometry_type="Polygon"
            )
        polygon.append(positions)
    return polygon


def _on_segment(x: float, y: float, a: Position, b: Position) -> bool:
    cross = (x - a[0]) * (b[1] - a[1]) - (y - a[1]) * (b[0] - a[0])
    if cross != 0:
        return False
    return min(a[0], b[0]) <= x <= max(a[0], b[0]) and min(a[1], b[1]) <= y <= max(a[1], b[1])


def point_in_ring(point: Position, ring: Sequence[Position], include_boundary: bool = True) -> bool:
    """Ray-casting containment test against a single closed ring."""
    x, y = point
    inside = False
    n = len(ring)
    j = n - 1
    for i in range(n):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if _on_segment(x, y, ring[j], ring[i]):
            return include_boundary
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def point_in_polygon(point: Position, polygon: Sequence[Sequence[Position]]) -> bool:
    """
    Test a ``(lng, lat)`` point against validated polygon rings.

    Points on the outer boundary are inside. Points strictly inside a hole are
    outside; points on a hole's boundary stay inside.
    """
    if not polygon or not point_in_ring(point, polygon[0], include_boundary=True):
        return False
    for hole in polygon[1:]:
        if point_in_ring(point, hole, include_boundary=False):
            return False
    return True
