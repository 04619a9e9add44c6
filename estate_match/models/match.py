"""Match result models."""

from typing import Optional, Union
from pydantic import BaseModel, Field


class MatchResult(BaseModel):
    """Outcome of scoring one (listing, buyer) pair."""
    listing_id: Optional[Union[int, str]] = Field(None, description="Listing ID")
    buyer_id: Optional[Union[int, str]] = Field(None, description="Buyer ID")
    client_id: Optional[Union[int, str]] = Field(None, description="Buyer's client ID")
    shared: bool = Field(default=False, description="Whether the listing is a shared/multi-agency listing")
    is_match: bool = Field(..., description="Hard criteria outcome")
    score: int = Field(..., ge=0, le=100, description="Desirability score, 0 when not matching")


class BatchMatchSummary(BaseModel):
    """Summary of one listing scored against many buyers, or the reverse."""
    correlation_id: Optional[str] = Field(None, description="Correlation ID of the run")
    total_candidates: int = Field(default=0, description="Candidates considered after rating filter")
    matches_found: int = Field(default=0, description="Pairs at or above the score threshold")
    min_score: int = Field(..., ge=0, le=100, description="Score threshold applied")
    results: list[MatchResult] = Field(default_factory=list, description="Matches, best score first")
    errors: list[str] = Field(default_factory=list, description="Per-record failures")
