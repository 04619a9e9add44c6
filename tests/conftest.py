"""Shared pytest fixtures and configuration."""

import logging
import os
import pytest

# Set test environment variables
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from estate_match.models.policy import MatchingPolicy  # noqa: E402
from estate_match.utils.logging_config import DECISION_LOGGERS  # noqa: E402
from tests.fixtures.listings import (  # noqa: E402
    buyer_for_milan,
    imported_listing_with_flat_coordinates,
    owned_apartment_in_milan,
    shared_listing_with_json_location,
)
from tests.fixtures.search_areas import milan_square_feature  # noqa: E402
from tests.utils.helpers import RecordingLogger  # noqa: E402

MATCH_ENV_VARS = (
    "MATCH_POLICY",
    "MATCH_PRICE_TOLERANCE",
    "MATCH_SIZE_TOLERANCE",
    "MATCH_ZONE_RADIUS_M",
    "MATCH_SCORE_THRESHOLD",
    "MATCH_HIGH_RATING_MIN",
)


@pytest.fixture(autouse=True)
def clean_matching_environment(monkeypatch):
    """Every test starts from the default matching configuration."""
    for name in MATCH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def policy():
    """Default (wide tolerance) matching policy."""
    return MatchingPolicy()


@pytest.fixture
def legacy_policy():
    return MatchingPolicy.legacy()


@pytest.fixture
def recording_logger():
    """Injected logger that keeps every structured call."""
    return RecordingLogger()


@pytest.fixture
def sample_listing():
    return owned_apartment_in_milan()


@pytest.fixture
def sample_imported_listing():
    return imported_listing_with_flat_coordinates()


@pytest.fixture
def sample_shared_listing():
    return shared_listing_with_json_location()


@pytest.fixture
def sample_buyer():
    """Buyer with a polygon search area over Milan."""
    return buyer_for_milan(search_area=milan_square_feature())


@pytest.fixture
def scenario_buyer():
    """Buyer from the price tolerance scenarios."""
    return {"id": 1, "maxPrice": 300000, "minSize": 50, "propertyType": "apartment"}


@pytest.fixture
def restore_logging():
    """Undo LoggingConfig.setup_logging() changes after the test."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    saved_decision_levels = {name: logging.getLogger(name).level for name in DECISION_LOGGERS}
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    for name, level in saved_decision_levels.items():
        logging.getLogger(name).setLevel(level)
