"""Geographic point model."""

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """A WGS84 coordinate in degrees."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Latitude in degrees")
    lng: float = Field(..., description="Longitude in degrees")

    def as_position(self) -> tuple[float, float]:
        """GeoJSON position order: (lng, lat)."""
        return self.lng, self.lat
