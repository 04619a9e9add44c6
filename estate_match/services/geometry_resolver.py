"""Geometry resolver: listing coordinates and buyer search areas.

Normalizes the heterogeneous shapes stored for listing locations and buyer
search areas, and answers whether a listing lies inside a buyer's area.
Geometry problems never escape this module: they are logged and reported as
"not in area".
"""

import json
import math
from typing import Any, Optional

from pydantic import ValidationError

from estate_match.models.geo import GeoPoint
from estate_match.models.listing import BaseListing
from estate_match.models.policy import MatchingPolicy
from estate_match.models.search_area import (
    CircleArea,
    CoordinateRingArea,
    InvalidSearchArea,
    PolygonFeatureArea,
    SearchArea,
    UnsupportedGeometryArea,
    ZoneCollectionArea,
)
from estate_match.utils.logging import StructuredLogger, get_structured_logger

logger = get_structured_logger(__name__)


def _to_coordinate(value: Any) -> Optional[float]:
    """Parse a numeric or numeric-string coordinate; None if not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _decode_json(value: Any) -> Any:
    """Decode JSON strings, returning the value untouched otherwise."""
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except (TypeError, ValueError):
            return value
    return value


def extract_coordinates(listing: BaseListing) -> Optional[GeoPoint]:
    """
    Resolve a listing's coordinates.

    The nested ``location`` object wins (possibly JSON-encoded); the flat
    ``latitude``/``longitude`` fields are the fallback. Returns None when no
    finite pair is found.
    """
    if listing.location:
        location = _decode_json(listing.location)
        if isinstance(location, dict) and "lat" in location and "lng" in location:
            lat = _to_coordinate(location.get("lat"))
            lng = _to_coordinate(location.get("lng"))
            if lat is not None and lng is not None:
                return GeoPoint(lat=lat, lng=lng)

    if listing.latitude is not None and listing.longitude is not None:
        lat = _to_coordinate(listing.latitude)
        lng = _to_coordinate(listing.longitude)
        if lat is not None and lng is not None:
            return GeoPoint(lat=lat, lng=lng)

    return None


def has_search_area(raw: Any) -> bool:
    """Empty values (None, {}, [], "") mean the buyer set no geographic filter."""
    return bool(raw)


def _is_circle(raw: dict) -> bool:
    center = raw.get("center")
    return (
        isinstance(center, dict)
        and center.get("lat") is not None
        and center.get("lng") is not None
        and bool(raw.get("radius"))
    )


def resolve_search_area(raw: Any) -> Optional[SearchArea]:
    """
    Normalize a stored search area into one ``SearchArea`` variant.

    Shapes are tried in priority order: FeatureCollection, circle, bare
    Feature, raw coordinate ring. Returns None when the buyer set no area and
    ``InvalidSearchArea`` when an area is present but unrecognized.
    """
    if not has_search_area(raw):
        return None

    area = _decode_json(raw)
    if not has_search_area(area):
        return None

    if isinstance(area, dict):
        if area.get("type") == "FeatureCollection" and isinstance(area.get("features"), list):
            return ZoneCollectionArea(features=area["features"])

        if _is_circle(area):
            try:
                return CircleArea(center=area["center"], radius=area["radius"])
            except ValidationError as e:
                return InvalidSearchArea(reason=f"invalid circle: {e.error_count()} validation error(s)")

        if area.get("type") == "Feature" and isinstance(area.get("geometry"), dict):
            geometry = area["geometry"]
            if geometry.get("type") == "Polygon" and geometry.get("coordinates"):
                return PolygonFeatureArea(rings=geometry["coordinates"])
            return UnsupportedGeometryArea(geometry_type=geometry.get("type"))

    if isinstance(area, list) and len(area) >= 3:
        return CoordinateRingArea(ring=area)

    return InvalidSearchArea(reason=f"unrecognized search area of type {type(area).__name__}")


def is_point_in_search_area(
    point: GeoPoint,
    area: SearchArea,
    policy: MatchingPolicy,
    log: Optional[StructuredLogger] = None,
    **context: Any
) -> bool:
    """
    Containment test with the failure policy applied.

    Any exception while evaluating the geometry is logged and treated as
    "outside".
    """
    log = (log or logger).bind(**context)

    if isinstance(area, UnsupportedGeometryArea):
        log.warning("Unsupported search area geometry", geometry_type=area.geometry_type)
        return False
    if isinstance(area, InvalidSearchArea):
        log.warning("Invalid search area", reason=area.reason)
        return False

    try:
        if isinstance(area, ZoneCollectionArea):
            zone = area.find_zone(point, policy)
            log.debug(
                "Zone collection containment evaluated",
                inside=zone is not None,
                zone=zone,
                zones=len(area.features)
            )
            return zone is not None

        if isinstance(area, CircleArea):
            distance = area.distance_to(point)
            inside = area.within_radius(distance)
            log.debug(
                "Circle containment evaluated",
                inside=inside,
                distance_m=round(distance),
                radius_m=area.radius
            )
        else:
            inside = area.contains(point, policy)
            log.debug(
                "Polygon containment evaluated",
                inside=inside,
                area_kind=area.kind,
                lng=point.lng,
                lat=point.lat
            )
        return inside
    except Exception as e:
        log.error(
            "Search area evaluation failed, treating as outside",
            area_kind=getattr(area, "kind", None),
            error=str(e),
            error_type=type(e).__name__
        )
        return False


def is_listing_in_search_area(
    listing: BaseListing,
    raw_search_area: Any,
    policy: MatchingPolicy,
    log: Optional[StructuredLogger] = None,
    **context: Any
) -> bool:
    """
    Geography check for one pair.

    No search area passes unconditionally; a search area with a listing
    that has no coordinates fails.
    """
    log = (log or logger).bind(**context)

    area = resolve_search_area(raw_search_area)
    if area is None:
        return True

    point = extract_coordinates(listing)
    if point is None:
        log.debug("Listing has no coordinates but buyer requires a search area")
        return False

    return is_point_in_search_area(point, area, policy, log=log)
