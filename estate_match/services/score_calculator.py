"""Score calculator: 0-100 desirability of a listing that passed the matcher."""

import math
from typing import Optional, Union

from estate_match.models.buyer import BuyerCriteria
from estate_match.models.listing import BaseListing, Listing, SharedListing
from estate_match.models.policy import MatchingPolicy
from estate_match.services.criteria_matcher import (
    as_buyer,
    as_listing,
    as_shared_listing,
    is_listing_matching_buyer,
    is_shared_listing_matching_buyer,
)
from estate_match.utils.logging import StructuredLogger
from estate_match.utils.matching_config import resolve_policy


def size_overshoot_penalty(size: Optional[float], min_size: Optional[float], policy: MatchingPolicy) -> float:
    """Penalty for listings much larger than the buyer asked for."""
    if not min_size or not size or size <= min_size * policy.size_overshoot_threshold:
        return 0.0
    size_difference = (size - min_size) / min_size
    return min(policy.size_penalty_cap, size_difference * policy.size_penalty_rate)


def price_deviation_penalty(price: Optional[float], max_price: Optional[float], policy: MatchingPolicy) -> float:
    """Penalty for listings priced above the budget, or well below it."""
    if not max_price or price is None:
        return 0.0
    price_percentage = price / max_price
    if price_percentage > 1:
        return min(policy.over_price_penalty_cap, (price_percentage - 1) * policy.over_price_penalty_rate)
    if price_percentage < policy.under_price_floor:
        return min(
            policy.under_price_penalty_cap,
            (policy.under_price_floor - price_percentage) * policy.under_price_penalty_rate
        )
    return 0.0


def score_matched_pair(listing: BaseListing, buyer: BuyerCriteria, policy: MatchingPolicy) -> int:
    """Desirability of a pair already known to match. Does not re-run the matcher."""
    score = 100.0
    score -= size_overshoot_penalty(listing.size, buyer.min_size, policy)
    score -= price_deviation_penalty(listing.price, buyer.max_price, policy)
    # Half-up rounding
    return int(max(0, min(100, math.floor(score + 0.5))))


def compute_match_score(
    listing: Union[Listing, dict],
    buyer: Union[BuyerCriteria, dict],
    policy: Optional[MatchingPolicy] = None,
    log: Optional[StructuredLogger] = None
) -> int:
    """
    Score an agency-owned listing for a buyer.

    Returns 0 when the listing fails the hard criteria, otherwise 100 minus
    the size overshoot and price deviation penalties, clamped to [0, 100].
    """
    policy = resolve_policy(policy)
    listing = as_listing(listing)
    buyer = as_buyer(buyer)
    if not is_listing_matching_buyer(listing, buyer, policy=policy, log=log):
        return 0
    return score_matched_pair(listing, buyer, policy)


def compute_shared_match_score(
    shared_listing: Union[SharedListing, dict],
    buyer: Union[BuyerCriteria, dict],
    policy: Optional[MatchingPolicy] = None,
    log: Optional[StructuredLogger] = None
) -> int:
    """Same as ``compute_match_score`` for a shared/multi-agency listing."""
    policy = resolve_policy(policy)
    shared_listing = as_shared_listing(shared_listing)
    buyer = as_buyer(buyer)
    if not is_shared_listing_matching_buyer(shared_listing, buyer, policy=policy, log=log):
        return 0
    return score_matched_pair(shared_listing, buyer, policy)
