"""Batch matching: one listing against many buyers, or one buyer against many listings.

Every pair is scored independently. A record that fails validation adds an
entry to the summary's ``errors`` and the batch carries on.
"""

from typing import Iterable, Optional, Union

from pydantic import ValidationError

from estate_match.models.buyer import BuyerCriteria
from estate_match.models.listing import BaseListing
from estate_match.models.match import BatchMatchSummary, MatchResult
from estate_match.models.policy import MatchingPolicy
from estate_match.services.criteria_matcher import as_buyer, as_listing, as_shared_listing, is_matching
from estate_match.services.score_calculator import score_matched_pair
from estate_match.utils.errors import MatchInputError
from estate_match.utils.logging import (
    StructuredLogger,
    correlation_context,
    get_structured_logger,
    log_timing,
)
from estate_match.utils.matching_config import MatchingConfig, resolve_policy

logger = get_structured_logger(__name__)

ListingInput = Union[BaseListing, dict]
BuyerInput = Union[BuyerCriteria, dict]


def _record_id(record: Union[BaseListing, BuyerCriteria, dict]) -> Optional[str]:
    if isinstance(record, dict):
        value = record.get("id")
    else:
        value = getattr(record, "id", None)
    return None if value is None else str(value)


def _validate_listing(listing: ListingInput, shared: bool) -> BaseListing:
    try:
        return as_shared_listing(listing) if shared else as_listing(listing)
    except ValidationError as e:
        raise MatchInputError(
            f"Invalid listing {_record_id(listing)}: {e.error_count()} validation error(s)",
            record_id=_record_id(listing)
        ) from e


def _validate_buyer(buyer: BuyerInput) -> BuyerCriteria:
    try:
        return as_buyer(buyer)
    except ValidationError as e:
        raise MatchInputError(
            f"Invalid buyer {_record_id(buyer)}: {e.error_count()} validation error(s)",
            record_id=_record_id(buyer)
        ) from e


def score_pair(
    listing: BaseListing,
    buyer: BuyerCriteria,
    shared: bool,
    policy: MatchingPolicy,
    log: Optional[StructuredLogger] = None
) -> MatchResult:
    """Score one validated pair."""
    matched = is_matching(listing, buyer, shared=shared, policy=policy, log=log)
    return MatchResult(
        listing_id=listing.id,
        buyer_id=buyer.id,
        client_id=buyer.client_id,
        shared=shared,
        is_match=matched,
        score=score_matched_pair(listing, buyer, policy) if matched else 0,
    )


def _resolve_threshold(min_score: Optional[int]) -> int:
    return MatchingConfig.get_score_threshold() if min_score is None else min_score


def match_listing_against_buyers(
    listing: ListingInput,
    buyers: Iterable[BuyerInput],
    shared: bool = False,
    min_score: Optional[int] = None,
    high_rating_only: bool = False,
    policy: Optional[MatchingPolicy] = None,
    log: Optional[StructuredLogger] = None
) -> BatchMatchSummary:
    """
    Find the buyers a listing suits.

    Args:
        listing: Owned listing, or shared listing when ``shared`` is true
        buyers: Buyer criteria records
        shared: Treat the listing as a shared/multi-agency listing
        min_score: Score threshold (default: MATCH_SCORE_THRESHOLD)
        high_rating_only: Only consider buyers rated MATCH_HIGH_RATING_MIN or above
        policy: Matching policy (default: configured policy)

    Returns:
        BatchMatchSummary with matches sorted by score, best first
    """
    log = log or logger
    policy = resolve_policy(policy)
    threshold = _resolve_threshold(min_score)
    min_rating = MatchingConfig.get_high_rating_min() if high_rating_only else None

    with correlation_context() as correlation_id:
        summary = BatchMatchSummary(correlation_id=correlation_id, min_score=threshold)

        try:
            listing = _validate_listing(listing, shared)
        except MatchInputError as e:
            log.error("Batch aborted: invalid listing", error=str(e), record_id=e.record_id)
            summary.errors.append(str(e))
            return summary

        with log_timing(
            "match_listing_against_buyers", logger=log, listing_id=listing.id, shared=shared
        ) as timing:
            for raw_buyer in buyers:
                try:
                    buyer = _validate_buyer(raw_buyer)
                except MatchInputError as e:
                    log.warning("Skipping invalid buyer", error=str(e), record_id=e.record_id)
                    summary.errors.append(str(e))
                    continue

                if min_rating is not None and (buyer.rating or 0) < min_rating:
                    continue

                summary.total_candidates += 1
                result = score_pair(listing, buyer, shared, policy, log=log)
                if result.is_match and result.score >= threshold:
                    summary.results.append(result)

            summary.results.sort(key=lambda r: r.score, reverse=True)
            summary.matches_found = len(summary.results)
            timing.update(
                candidates=summary.total_candidates,
                matches_found=summary.matches_found,
                errors=len(summary.errors)
            )
        return summary


def match_buyer_against_listings(
    buyer: BuyerInput,
    listings: Iterable[ListingInput],
    shared: bool = False,
    min_score: Optional[int] = None,
    policy: Optional[MatchingPolicy] = None,
    log: Optional[StructuredLogger] = None
) -> BatchMatchSummary:
    """Find the listings that suit a buyer, best score first."""
    log = log or logger
    policy = resolve_policy(policy)
    threshold = _resolve_threshold(min_score)

    with correlation_context() as correlation_id:
        summary = BatchMatchSummary(correlation_id=correlation_id, min_score=threshold)

        try:
            buyer = _validate_buyer(buyer)
        except MatchInputError as e:
            log.error("Batch aborted: invalid buyer", error=str(e), record_id=e.record_id)
            summary.errors.append(str(e))
            return summary

        with log_timing(
            "match_buyer_against_listings", logger=log, buyer_id=buyer.display_id, shared=shared
        ) as timing:
            for raw_listing in listings:
                try:
                    listing = _validate_listing(raw_listing, shared)
                except MatchInputError as e:
                    log.warning("Skipping invalid listing", error=str(e), record_id=e.record_id)
                    summary.errors.append(str(e))
                    continue

                summary.total_candidates += 1
                result = score_pair(listing, buyer, shared, policy, log=log)
                if result.is_match and result.score >= threshold:
                    summary.results.append(result)

            summary.results.sort(key=lambda r: r.score, reverse=True)
            summary.matches_found = len(summary.results)
            timing.update(
                candidates=summary.total_candidates,
                matches_found=summary.matches_found,
                errors=len(summary.errors)
            )
        return summary
