"""End-to-end tests: stored CRM records to ranked matches."""

import json
from unittest.mock import patch

import pytest

from estate_match.services import batch_matcher
from estate_match.services.batch_matcher import match_buyer_against_listings, match_listing_against_buyers
from estate_match.services.score_calculator import compute_match_score
from estate_match.utils.logging_config import LoggingConfig
from tests.fixtures.listings import (
    buyer_for_milan,
    imported_listing_with_flat_coordinates,
    owned_apartment_in_milan,
    shared_listing_with_json_location,
)
from tests.fixtures.search_areas import (
    DUOMO,
    circle,
    duomo_point_zones,
    milan_donut_feature,
    milan_square_feature,
    open_triangle_ring,
)
from tests.utils.assertions import assert_valid_summary


@pytest.fixture
def stored_buyers():
    """Buyer rows as read from the CRM, one per search area shape."""
    return [
        {**buyer_for_milan(milan_square_feature()), "id": 1},                     # polygon, 100
        {**buyer_for_milan(milan_donut_feature()), "id": 2},                      # listing sits in the hole
        {"id": 3, "maxPrice": 280000, "searchArea": circle(DUOMO, 2000), "rating": 4},  # ~1.4 km away, 71
        {"id": 4, "searchArea": json.dumps(duomo_point_zones()), "rating": 3},    # point zone, 100
        {"id": 5, "minSize": 120, "searchArea": open_triangle_ring(), "rating": 2},  # too small
        {"id": 6, "rating": "eccellente"},                                         # unreadable row
        {"id": 7, "propertyType": "villa", "rating": 5},
    ]


@pytest.mark.integration
def test_new_listing_is_offered_to_matching_buyers(stored_buyers):
    """A new owned listing is ranked against every stored buyer."""
    summary = match_listing_against_buyers(owned_apartment_in_milan(), stored_buyers)

    assert_valid_summary(summary)
    assert summary.total_candidates == 6
    assert [(r.buyer_id, r.score) for r in summary.results] == [(1, 100), (4, 100), (3, 71)]
    assert len(summary.errors) == 1
    assert "Invalid buyer 6" in summary.errors[0]


@pytest.mark.integration
def test_legacy_policy_narrows_point_zones(monkeypatch, stored_buyers):
    """The legacy 1 km point-zone radius drops the Duomo buyer."""
    monkeypatch.setenv("MATCH_POLICY", "legacy")
    summary = match_listing_against_buyers(owned_apartment_in_milan(), stored_buyers)

    assert [(r.buyer_id, r.score) for r in summary.results] == [(1, 100), (3, 71)]


@pytest.mark.integration
def test_high_rating_buyers_only(stored_buyers):
    summary = match_listing_against_buyers(owned_apartment_in_milan(), stored_buyers, high_rating_only=True)

    assert summary.total_candidates == 4
    assert [r.buyer_id for r in summary.results] == [1, 3]


@pytest.mark.integration
def test_buyer_sees_owned_listings_from_every_source():
    """Nested, flat-string and JSON-string coordinates all resolve."""
    buyer = buyer_for_milan(milan_square_feature())
    sold = {**owned_apartment_in_milan(), "id": 103, "status": "sold"}
    listings = [
        owned_apartment_in_milan(),
        imported_listing_with_flat_coordinates(),
        shared_listing_with_json_location(),
        sold,
    ]

    summary = match_buyer_against_listings(buyer, listings)

    assert_valid_summary(summary)
    assert [(r.listing_id, r.score) for r in summary.results] == [(101, 100), (102, 100)]


@pytest.mark.integration
def test_buyer_sees_shared_listings():
    buyer = {
        **buyer_for_milan(milan_square_feature()),
        "propertyType": "penthouse",
        "minSize": 100,
        "maxPrice": 420000,
    }

    summary = match_buyer_against_listings(buyer, [shared_listing_with_json_location()], shared=True)

    # 450000 on 420000: -28.57
    assert [(r.listing_id, r.score, r.shared) for r in summary.results] == [(501, 71, True)]
    assert compute_match_score(shared_listing_with_json_location(), buyer) == 71


@pytest.mark.integration
def test_only_matching_pairs_are_scored(stored_buyers):
    with patch.object(batch_matcher, "score_matched_pair", wraps=batch_matcher.score_matched_pair) as scorer:
        summary = match_listing_against_buyers(owned_apartment_in_milan(), stored_buyers, min_score=0)

    assert scorer.call_count == 3
    assert summary.matches_found == 3


@pytest.mark.integration
def test_json_logs_carry_correlation_id(restore_logging, capsys, stored_buyers):
    """With JSON logging configured, the batch summary line is machine readable."""
    LoggingConfig.setup_logging(level="INFO", log_format="json")
    summary = match_listing_against_buyers(owned_apartment_in_milan(), stored_buyers)

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    finished = next(line for line in lines if line["message"] == "Completed match_listing_against_buyers")
    assert finished["correlation_id"] == summary.correlation_id
    assert finished["matches_found"] == 3
    assert finished["level"] == "INFO"
    assert all(line["correlation_id"] == summary.correlation_id for line in lines)
