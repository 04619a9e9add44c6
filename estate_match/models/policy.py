"""Matching policy: tolerance bands and score penalty constants."""

from pydantic import BaseModel, ConfigDict, Field


class MatchingPolicy(BaseModel):
    """Tolerances for the hard filters and weights for the desirability score."""
    model_config = ConfigDict(frozen=True)

    # Hard filters
    size_tolerance: float = Field(0.8, gt=0, description="Listing size must be >= min_size * size_tolerance")
    price_tolerance: float = Field(1.20, gt=0, description="Listing price must be <= max_price * price_tolerance")
    point_zone_radius_m: float = Field(2000.0, gt=0, description="Implicit radius around Point zones, meters")

    # Score penalties
    size_overshoot_threshold: float = Field(1.5, gt=0, description="Size above min_size * threshold is penalized")
    size_penalty_rate: float = Field(30.0, ge=0, description="Points lost per unit of relative size excess")
    size_penalty_cap: float = Field(30.0, ge=0, description="Maximum size overshoot penalty")
    over_price_penalty_rate: float = Field(400.0, ge=0, description="Points lost per unit of price ratio above 1")
    over_price_penalty_cap: float = Field(40.0, ge=0, description="Maximum over-budget penalty")
    under_price_floor: float = Field(0.8, ge=0, description="Price ratio below which a listing is penalized")
    under_price_penalty_rate: float = Field(75.0, ge=0, description="Points lost per unit of ratio below the floor")
    under_price_penalty_cap: float = Field(15.0, ge=0, description="Maximum under-budget penalty")

    @classmethod
    def legacy(cls) -> "MatchingPolicy":
        """Narrow bands used by the older matching code: -10% size, +10% price, 1 km zones."""
        return cls(size_tolerance=0.9, price_tolerance=1.10, point_zone_radius_m=1000.0)


DEFAULT_POLICY = MatchingPolicy()
