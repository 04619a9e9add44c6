"""Search-area shapes a buyer can draw on the map.

Each shape is a variant of the ``SearchArea`` tagged union, discriminated by
``kind``. Variants answer ``contains(point, policy)``; geometry problems raise
``GeometryError`` from here and are turned into a non-match by the resolver.
"""

from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from estate_match.models.geo import GeoPoint
from estate_match.models.policy import MatchingPolicy
from estate_match.utils.errors import GeometryError
from estate_match.utils.geo import (
    build_polygon,
    close_ring,
    haversine_distance_m,
    point_in_polygon,
    to_position,
)


def _zone_label(feature: dict, index: int) -> str:
    properties = feature.get("properties") or {}
    if isinstance(properties, dict):
        label = properties.get("name") or properties.get("zoneName")
        if label:
            return str(label)
    return f"unnamed#{index}"


class ZoneCollectionArea(BaseModel):
    """GeoJSON FeatureCollection of named zones: Polygon, MultiPolygon or Point."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["zone_collection"] = "zone_collection"
    features: list[Any] = Field(default_factory=list, description="Raw GeoJSON features")

    def find_zone(self, point: GeoPoint, policy: MatchingPolicy) -> Optional[str]:
        """Return the label of the first zone containing ``point``, if any."""
        position = point.as_position()
        for index, feature in enumerate(self.features):
            if not isinstance(feature, dict) or not isinstance(feature.get("geometry"), dict):
                raise GeometryError(f"Feature #{index} has no geometry")

            geometry = feature["geometry"]
            geometry_type = geometry.get("type")
            coordinates = geometry.get("coordinates")
            if not coordinates:
                continue

            if geometry_type == "Polygon":
                if point_in_polygon(position, build_polygon(coordinates)):
                    return _zone_label(feature, index)
            elif geometry_type == "MultiPolygon":
                for polygon_coords in coordinates:
                    if point_in_polygon(position, build_polygon(polygon_coords)):
                        return _zone_label(feature, index)
            elif geometry_type == "Point":
                center_lng, center_lat = to_position(coordinates)
                distance = haversine_distance_m(point.lat, point.lng, center_lat, center_lng)
                if distance <= policy.point_zone_radius_m:
                    return _zone_label(feature, index)
            # Other geometry types do not describe a zone
        return None

    def contains(self, point: GeoPoint, policy: MatchingPolicy) -> bool:
        return self.find_zone(point, policy) is not None


class CircleArea(BaseModel):
    """Center and radius in meters."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["circle"] = "circle"
    center: GeoPoint
    radius: float = Field(..., gt=0, description="Radius in meters")

    def distance_to(self, point: GeoPoint) -> float:
        return haversine_distance_m(point.lat, point.lng, self.center.lat, self.center.lng)

    def within_radius(self, distance_m: float) -> bool:
        return distance_m <= self.radius

    def contains(self, point: GeoPoint, policy: MatchingPolicy) -> bool:
        return self.within_radius(self.distance_to(point))


class PolygonFeatureArea(BaseModel):
    """Bare GeoJSON Feature with a Polygon geometry."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["polygon_feature"] = "polygon_feature"
    rings: Any = Field(..., description="Polygon coordinates: outer ring then holes")

    def contains(self, point: GeoPoint, policy: MatchingPolicy) -> bool:
        return point_in_polygon(point.as_position(), build_polygon(self.rings))


class CoordinateRingArea(BaseModel):
    """Raw list of [lng, lat] pairs, closed on demand."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["coordinate_ring"] = "coordinate_ring"
    ring: list[Any] = Field(..., min_length=3)

    @property
    def closed_ring(self) -> list[Any]:
        return close_ring(self.ring)

    def contains(self, point: GeoPoint, policy: MatchingPolicy) -> bool:
        return point_in_polygon(point.as_position(), build_polygon([self.closed_ring]))


class UnsupportedGeometryArea(BaseModel):
    """Bare Feature whose geometry is not a Polygon. Never contains anything."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["unsupported_geometry"] = "unsupported_geometry"
    geometry_type: Optional[str] = None

    def contains(self, point: GeoPoint, policy: MatchingPolicy) -> bool:
        return False


class InvalidSearchArea(BaseModel):
    """Search area present but in no recognized shape. Never contains anything."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["invalid"] = "invalid"
    reason: str = ""

    def contains(self, point: GeoPoint, policy: MatchingPolicy) -> bool:
        return False


SearchArea = Annotated[
    Union[
        ZoneCollectionArea,
        CircleArea,
        PolygonFeatureArea,
        CoordinateRingArea,
        UnsupportedGeometryArea,
        InvalidSearchArea,
    ],
    Field(discriminator="kind"),
]
