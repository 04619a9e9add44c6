"""Listing models."""

from enum import Enum
from typing import Any, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ListingStatus(str, Enum):
    """Owned listing status values."""
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"


class BaseListing(BaseModel):
    """Fields shared by owned and multi-agency listings."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[Union[int, str]] = Field(None, description="Listing ID")
    address: Optional[str] = Field(None, description="Street address")
    property_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("type", "propertyType", "property_type"),
        description="Free-text category: apartment, penthouse, villa, loft..."
    )
    size: Optional[float] = Field(None, description="Surface in square meters")
    price: Optional[float] = Field(None, description="Asking price")
    location: Optional[Any] = Field(
        None,
        description="Object {lat, lng} or its JSON encoding"
    )
    latitude: Optional[Union[float, str]] = Field(None, description="Flat latitude (imported listings)")
    longitude: Optional[Union[float, str]] = Field(None, description="Flat longitude (imported listings)")


class Listing(BaseListing):
    """Agency-owned listing."""
    # Raw string, not ListingStatus: unknown or differently cased values
    # must load and then fail the availability check.
    status: Optional[str] = Field(
        None,
        description="Listing status: available, pending, sold; other values are kept as given"
    )


class SharedListing(BaseListing):
    """Shared, multi-agency or competitor listing. Carries no status and is always matchable."""
    agency_name: Optional[str] = Field(None, validation_alias=AliasChoices("agencyName", "agency_name"))
    owner_name: Optional[str] = Field(None, validation_alias=AliasChoices("ownerName", "owner_name"))
    owner_phone: Optional[str] = Field(None, validation_alias=AliasChoices("ownerPhone", "owner_phone"))
    source_url: Optional[str] = Field(None, validation_alias=AliasChoices("url", "sourceUrl", "source_url"))
    is_acquired: bool = Field(
        default=False,
        validation_alias=AliasChoices("isAcquired", "is_acquired"),
        description="Whether the agency has taken over the listing"
    )
