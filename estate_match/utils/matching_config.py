"""Matching configuration from environment variables."""

import os
from typing import Optional

from pydantic import ValidationError

from estate_match.models.policy import MatchingPolicy
from estate_match.utils.errors import ConfigurationError


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


class MatchingConfig:
    """Environment-driven matching configuration.

    Values are read on every call so a process picks up changes made by its
    deployment tooling (and tests can monkeypatch them).
    """

    POLICY_ENV = "MATCH_POLICY"
    PRICE_TOLERANCE_ENV = "MATCH_PRICE_TOLERANCE"
    SIZE_TOLERANCE_ENV = "MATCH_SIZE_TOLERANCE"
    ZONE_RADIUS_ENV = "MATCH_ZONE_RADIUS_M"
    SCORE_THRESHOLD_ENV = "MATCH_SCORE_THRESHOLD"
    HIGH_RATING_MIN_ENV = "MATCH_HIGH_RATING_MIN"

    DEFAULT_SCORE_THRESHOLD = 50
    DEFAULT_HIGH_RATING_MIN = 4

    @classmethod
    def get_policy(cls) -> MatchingPolicy:
        """Build the active policy: named base policy plus per-constant overrides."""
        name = os.environ.get(cls.POLICY_ENV, "current").strip().lower()
        if name == "current":
            base = MatchingPolicy()
        elif name == "legacy":
            base = MatchingPolicy.legacy()
        else:
            raise ConfigurationError(f"{cls.POLICY_ENV} must be 'current' or 'legacy', got {name!r}")

        overrides = {}
        for field, env_name in (
            ("price_tolerance", cls.PRICE_TOLERANCE_ENV),
            ("size_tolerance", cls.SIZE_TOLERANCE_ENV),
            ("point_zone_radius_m", cls.ZONE_RADIUS_ENV),
        ):
            value = _env_float(env_name)
            if value is not None:
                overrides[field] = value

        if not overrides:
            return base
        try:
            return MatchingPolicy(**{**base.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid matching policy override: {e}") from e

    @classmethod
    def get_score_threshold(cls) -> int:
        threshold = _env_int(cls.SCORE_THRESHOLD_ENV, cls.DEFAULT_SCORE_THRESHOLD)
        if not 0 <= threshold <= 100:
            raise ConfigurationError(f"{cls.SCORE_THRESHOLD_ENV} must be between 0 and 100, got {threshold}")
        return threshold

    @classmethod
    def get_high_rating_min(cls) -> int:
        rating = _env_int(cls.HIGH_RATING_MIN_ENV, cls.DEFAULT_HIGH_RATING_MIN)
        if not 1 <= rating <= 5:
            raise ConfigurationError(f"{cls.HIGH_RATING_MIN_ENV} must be between 1 and 5, got {rating}")
        return rating


def resolve_policy(policy: Optional[MatchingPolicy] = None) -> MatchingPolicy:
    """Return ``policy`` if given, otherwise the configured one."""
    return policy if policy is not None else MatchingConfig.get_policy()
