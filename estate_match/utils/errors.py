"""Error handling utilities."""

from typing import Optional


class EstateMatchError(Exception):
    """Base exception for the matching core."""
    pass


class GeometryError(EstateMatchError):
    """Malformed search-area geometry or listing coordinates."""

    def __init__(self, message: str, geometry_type: Optional[str] = None):
        super().__init__(message)
        self.geometry_type = geometry_type


class ConfigurationError(EstateMatchError):
    """Invalid matching configuration value."""
    pass


class MatchInputError(EstateMatchError):
    """Listing or buyer record that cannot be validated."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
