"""Buyer search criteria model."""

from typing import Any, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BuyerCriteria(BaseModel):
    """Stored search profile of a buyer-type client."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[Union[int, str]] = Field(None, description="Buyer ID")
    client_id: Optional[Union[int, str]] = Field(
        None,
        validation_alias=AliasChoices("clientId", "client_id"),
        description="Owning client ID"
    )
    property_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("propertyType", "property_type"),
        description="Required property category (normalized before comparison)"
    )
    min_size: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("minSize", "min_size"),
        description="Minimum surface in square meters"
    )
    max_price: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("maxPrice", "max_price"),
        description="Maximum budget"
    )
    search_area: Optional[Any] = Field(
        None,
        validation_alias=AliasChoices("searchArea", "search_area"),
        description="FeatureCollection, circle, Polygon Feature or raw [lng, lat] ring"
    )
    rating: Optional[int] = Field(None, description="Agent rating of the buyer, nominally 1-5; not used for matching")

    @property
    def display_id(self) -> Optional[Union[int, str]]:
        return self.id if self.id is not None else self.client_id
