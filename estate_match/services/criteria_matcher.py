"""Criteria matcher: hard filters deciding whether a listing fits a buyer.

Checks run in a fixed order and stop at the first failure: availability,
property type, size floor, price ceiling, geography. A criterion the buyer
left empty is skipped, except that a buyer search area requires the listing
to have coordinates.
"""

from typing import Optional, Union

from estate_match.models.buyer import BuyerCriteria
from estate_match.models.listing import BaseListing, Listing, ListingStatus, SharedListing
from estate_match.models.policy import MatchingPolicy
from estate_match.services.geometry_resolver import is_listing_in_search_area
from estate_match.utils.logging import StructuredLogger, get_structured_logger
from estate_match.utils.matching_config import resolve_policy

logger = get_structured_logger(__name__)

PROPERTY_TYPE_SYNONYMS = {
    "appartamento": "apartment",
    "apartment": "apartment",
    "monolocale": "apartment",
    "attico": "penthouse",
    "penthouse": "penthouse",
    "villa": "villa",
    "loft": "loft",
}


def normalize_property_type(property_type: Optional[str]) -> str:
    """Lowercase, trim and map known synonyms; unknown types pass through normalized."""
    if not property_type:
        return ""
    normalized = property_type.lower().strip()
    return PROPERTY_TYPE_SYNONYMS.get(normalized, normalized)


def as_listing(listing: Union[Listing, dict]) -> Listing:
    if isinstance(listing, BaseListing):
        return listing if isinstance(listing, Listing) else Listing.model_validate(listing.model_dump())
    return Listing.model_validate(listing)


def as_shared_listing(listing: Union[SharedListing, dict]) -> SharedListing:
    if isinstance(listing, BaseListing):
        return listing if isinstance(listing, SharedListing) else SharedListing.model_validate(listing.model_dump())
    return SharedListing.model_validate(listing)


def as_buyer(buyer: Union[BuyerCriteria, dict]) -> BuyerCriteria:
    if isinstance(buyer, BuyerCriteria):
        return buyer
    return BuyerCriteria.model_validate(buyer)


def _matches_criteria(
    listing: BaseListing,
    buyer: BuyerCriteria,
    policy: MatchingPolicy,
    log: StructuredLogger,
    kind: str
) -> bool:
    log = log.bind(listing_id=listing.id, buyer_id=buyer.display_id, listing_kind=kind)

    # Property type: strict equality after normalization
    if buyer.property_type:
        buyer_type = normalize_property_type(buyer.property_type)
        listing_type = normalize_property_type(listing.property_type)
        if buyer_type and listing_type != buyer_type:
            log.debug(
                "Listing rejected: property type mismatch",
                listing_type=listing.property_type,
                listing_type_normalized=listing_type,
                buyer_type=buyer.property_type,
                buyer_type_normalized=buyer_type
            )
            return False

    # Size floor, no upper bound
    if buyer.min_size and listing.size:
        min_acceptable = buyer.min_size * policy.size_tolerance
        if listing.size < min_acceptable:
            log.debug(
                "Listing rejected: size below tolerance",
                size=listing.size,
                min_size=buyer.min_size,
                min_acceptable=round(min_acceptable, 2)
            )
            return False

    # Price ceiling
    if buyer.max_price and listing.price is not None:
        max_acceptable = buyer.max_price * policy.price_tolerance
        if listing.price > max_acceptable:
            log.debug(
                "Listing rejected: price above tolerance",
                price=listing.price,
                max_price=buyer.max_price,
                max_acceptable=round(max_acceptable, 2)
            )
            return False

    if not is_listing_in_search_area(listing, buyer.search_area, policy, log=log):
        log.debug("Listing rejected: outside buyer search area")
        return False

    return True


def is_listing_matching_buyer(
    listing: Union[Listing, dict],
    buyer: Union[BuyerCriteria, dict],
    policy: Optional[MatchingPolicy] = None,
    log: Optional[StructuredLogger] = None
) -> bool:
    """
    Check an agency-owned listing against a buyer's criteria.

    A listing with a status must be ``available``; a missing status counts
    as available.
    """
    listing = as_listing(listing)
    buyer = as_buyer(buyer)
    log = log or logger

    if listing.status is not None and listing.status != ListingStatus.AVAILABLE.value:
        log.debug(
            "Listing rejected: not available",
            listing_id=listing.id,
            buyer_id=buyer.display_id,
            status=listing.status
        )
        return False

    return _matches_criteria(listing, buyer, resolve_policy(policy), log, "owned")


def is_shared_listing_matching_buyer(
    shared_listing: Union[SharedListing, dict],
    buyer: Union[BuyerCriteria, dict],
    policy: Optional[MatchingPolicy] = None,
    log: Optional[StructuredLogger] = None
) -> bool:
    """Check a shared/multi-agency listing against a buyer's criteria. Shared listings are always available."""
    shared_listing = as_shared_listing(shared_listing)
    buyer = as_buyer(buyer)
    return _matches_criteria(shared_listing, buyer, resolve_policy(policy), log or logger, "shared")


def is_matching(
    listing: Union[BaseListing, dict],
    buyer: Union[BuyerCriteria, dict],
    shared: bool = False,
    policy: Optional[MatchingPolicy] = None,
    log: Optional[StructuredLogger] = None
) -> bool:
    """Dispatch to the owned or shared matcher."""
    if shared or isinstance(listing, SharedListing):
        return is_shared_listing_matching_buyer(listing, buyer, policy=policy, log=log)
    return is_listing_matching_buyer(listing, buyer, policy=policy, log=log)
