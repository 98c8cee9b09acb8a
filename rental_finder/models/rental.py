"""
Pydantic models for rental search functionality.

These models define the data structures exchanged between the UI, the
rental search client and the proxy, and the records persisted locally.
Wire names are camelCase; Python attributes are snake_case.
"""

import math
import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HousingType = Literal["any", "apartment", "house", "condo", "townhouse"]

# Source tag carried by the synthetic property the client returns when a
# response cannot be interpreted.
ERROR_MARKER_SOURCE = "error"

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


def coerce_count(value: Any) -> int:
    """
    Coerce a bedroom/bathroom count to an integer.

    The completion service does not reliably emit numbers even when a
    schema is requested, so "2", "2.5", "3+" and 2.0 are all accepted.
    Anything without a leading integer, and non-finite floats, become 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if value is None:
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def _as_text(value: Any) -> Any:
    """Render numbers as text and None as an empty string."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class SearchCriteria(BaseModel):
    """
    Search criteria collected by the form.

    All values are opaque text, numeric ones included. Only the location
    is required and only the housing type is validated.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location: str = Field(
        ...,
        min_length=1,
        description="City, neighbourhood or address to search around",
        examples=["San Francisco, CA"],
    )
    min_price: str = Field(default="", alias="minPrice", description="Minimum monthly rent")
    max_price: str = Field(default="", alias="maxPrice", description="Maximum monthly rent")
    bedrooms: str = Field(default="any", description="Bedroom count or 'any'")
    bathrooms: str = Field(default="any", description="Bathroom count or 'any'")
    housing_type: HousingType = Field(
        default="any",
        alias="housingType",
        description="Kind of housing; 'any' places no constraint",
    )

    @field_validator("min_price", "max_price", "bedrooms", "bathrooms", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("location")
    @classmethod
    def location_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("location must not be blank")
        return v

    def to_payload(self) -> dict:
        """Serialize with the camelCase names used on the wire."""
        return self.model_dump(by_alias=True)


class SavedSearch(SearchCriteria):
    """A SearchCriteria persisted by the user, identified by ``id``."""

    id: int = Field(description="Identifier unique within the saved list")

    def criteria(self) -> SearchCriteria:
        """Strip the id and return the plain criteria."""
        return SearchCriteria.model_validate(self.model_dump(exclude={"id"}))


class RentalProperty(BaseModel):
    """
    A single rental listing returned by the completion service.

    ``url`` is the identity key: favorites and de-duplication compare it
    with exact string equality.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default="", description="Listing headline")
    price: str = Field(default="", description="Currency-formatted rent, e.g. '$2,400/mo'")
    bedrooms: int = Field(default=0, description="Number of bedrooms")
    bathrooms: int = Field(default=0, description="Number of bathrooms")
    location: str = Field(default="", description="Address or neighbourhood")
    source: str = Field(default="", description="Site the listing was found on")
    url: str = Field(default="", description="Link to the listing")
    description: Optional[str] = Field(default=None, description="Optional free text")

    @field_validator("bedrooms", "bathrooms", mode="before")
    @classmethod
    def coerce_counts(cls, v: Any) -> int:
        return coerce_count(v)

    @field_validator("title", "price", "location", "source", "url", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Any:
        return _as_text(v)

    @property
    def is_error_marker(self) -> bool:
        return self.source == ERROR_MARKER_SOURCE


class PromptRequest(BaseModel):
    """Raw prompt body accepted by the proxy for older clients."""

    prompt: str = Field(..., min_length=1, description="Prompt forwarded verbatim")


class GeneratedTextPayload(BaseModel):
    """Wrapper returned by the proxy when the service answered in free text."""

    model_config = ConfigDict(populate_by_name=True)

    generated_text: str = Field(alias="generatedText")


class ErrorResponse(BaseModel):
    """Body of every non-success proxy response."""

    message: str
