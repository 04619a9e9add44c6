"""Tests for the search area variants."""

import pytest
from pydantic import TypeAdapter, ValidationError

from estate_match.models.geo import GeoPoint
from estate_match.models.search_area import (
    CircleArea,
    CoordinateRingArea,
    InvalidSearchArea,
    PolygonFeatureArea,
    SearchArea,
    UnsupportedGeometryArea,
    ZoneCollectionArea,
)
from estate_match.utils.errors import GeometryError
from tests.fixtures.search_areas import (
    DUOMO,
    MILAN_SQUARE_RING,
    PAVIA_SQUARE_RING,
    feature_collection,
    milan_square_feature,
    multipolygon_feature,
    point_feature,
    point_north_of,
)

INSIDE_MILAN = GeoPoint(lat=45.45, lng=9.2)
OUTSIDE_MILAN = GeoPoint(lat=45.6, lng=9.2)


@pytest.mark.unit
def test_geo_point_position_order():
    assert GeoPoint(lat=45.46, lng=9.19).as_position() == (9.19, 45.46)


@pytest.mark.unit
def test_zone_collection_returns_first_matching_label(policy):
    area = ZoneCollectionArea(features=[
        point_feature({"lat": 41.9, "lng": 12.5}, name="Roma"),
        milan_square_feature(),
        point_feature(DUOMO, name="Duomo"),
    ])
    assert area.find_zone(INSIDE_MILAN, policy) == "Milano"
    assert area.contains(OUTSIDE_MILAN, policy) is False


@pytest.mark.unit
def test_zone_collection_multipolygon(policy):
    area = ZoneCollectionArea(features=[
        multipolygon_feature([[PAVIA_SQUARE_RING], [MILAN_SQUARE_RING]], name="Pavia+Milano"),
    ])
    assert area.find_zone(INSIDE_MILAN, policy) == "Pavia+Milano"
    assert area.contains(GeoPoint(lat=45.05, lng=9.05), policy) is True
    assert area.contains(GeoPoint(lat=45.2, lng=9.05), policy) is False


@pytest.mark.unit
def test_zone_collection_point_uses_policy_radius(policy, legacy_policy):
    area = ZoneCollectionArea(features=[point_feature(DUOMO)])
    listing_point = GeoPoint(**point_north_of(DUOMO, 1500))

    assert area.contains(listing_point, policy) is True
    assert area.contains(listing_point, legacy_policy) is False


@pytest.mark.unit
def test_zone_collection_unnamed_label(policy):
    feature = milan_square_feature()
    feature["properties"] = None
    area = ZoneCollectionArea(features=[feature])
    assert area.find_zone(INSIDE_MILAN, policy) == "unnamed#0"


@pytest.mark.unit
def test_zone_collection_skips_other_geometries(policy):
    line = {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[9.1, 45.4], [9.3, 45.5]]}}
    area = ZoneCollectionArea(features=[line, milan_square_feature()])
    assert area.contains(INSIDE_MILAN, policy) is True


@pytest.mark.unit
def test_zone_collection_feature_without_geometry_raises(policy):
    area = ZoneCollectionArea(features=[{"type": "Feature", "properties": {}}])
    with pytest.raises(GeometryError):
        area.contains(INSIDE_MILAN, policy)


@pytest.mark.unit
def test_empty_zone_collection_contains_nothing(policy):
    assert ZoneCollectionArea(features=[]).contains(INSIDE_MILAN, policy) is False


@pytest.mark.unit
def test_circle_contains(policy):
    area = CircleArea(center=DUOMO, radius=1000)
    assert area.contains(GeoPoint(**point_north_of(DUOMO, 999)), policy) is True
    assert area.contains(GeoPoint(**point_north_of(DUOMO, 1001)), policy) is False


@pytest.mark.unit
def test_circle_requires_positive_radius():
    with pytest.raises(ValidationError):
        CircleArea(center=DUOMO, radius=0)


@pytest.mark.unit
def test_polygon_feature_contains(policy):
    area = PolygonFeatureArea(rings=[MILAN_SQUARE_RING])
    assert area.contains(INSIDE_MILAN, policy) is True
    assert area.contains(OUTSIDE_MILAN, policy) is False


@pytest.mark.unit
def test_coordinate_ring_closes_itself():
    area = CoordinateRingArea(ring=[[9.1, 45.4], [9.2, 45.4], [9.2, 45.5]])
    assert area.closed_ring == [[9.1, 45.4], [9.2, 45.4], [9.2, 45.5], [9.1, 45.4]]


@pytest.mark.unit
def test_coordinate_ring_needs_three_points():
    with pytest.raises(ValidationError):
        CoordinateRingArea(ring=[[9.1, 45.4], [9.2, 45.4]])


@pytest.mark.unit
def test_never_matching_variants(policy):
    assert UnsupportedGeometryArea(geometry_type="LineString").contains(INSIDE_MILAN, policy) is False
    assert InvalidSearchArea(reason="bad").contains(INSIDE_MILAN, policy) is False


@pytest.mark.unit
def test_search_area_union_discriminates_on_kind():
    adapter = TypeAdapter(SearchArea)

    circle = adapter.validate_python({"kind": "circle", "center": DUOMO, "radius": 500})
    ring = adapter.validate_python({"kind": "coordinate_ring", "ring": MILAN_SQUARE_RING})
    zones = adapter.validate_python({"kind": "zone_collection", "features": feature_collection()["features"]})

    assert isinstance(circle, CircleArea)
    assert isinstance(ring, CoordinateRingArea)
    assert isinstance(zones, ZoneCollectionArea)
    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "hexagon"})
