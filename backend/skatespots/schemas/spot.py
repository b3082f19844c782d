"""
SkateSpots Backend - Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract with the frontend.
How:   Python attributes are snake_case; the wire format is camelCase
       (`ratingFlat`, `imageUrl`) through a shared alias generator. Input
       accepts either spelling.

Numeric fields are permissive: numeric strings are coerced ("4" → 4.0),
empty strings become null.
A value that cannot be coerced fails validation, which the spot service
reports as a persistence failure.
"""

import uuid
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

_camel_config = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


# ══════════════════════════════════════════════════════════════════════════
# Spot Records
# ══════════════════════════════════════════════════════════════════════════

class Coords(BaseModel):
    """Geographic point of a spot. No range validation is applied."""

    lat: Optional[float] = Field(default=None, description="Latitude")
    lng: Optional[float] = Field(default=None, description="Longitude")

    model_config = {"extra": "ignore"}

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class SpotCreate(BaseModel):
    """
    What:  Fields accepted by POST /api/spots.
    Who:   Built by the spot route from multipart form fields or a JSON body.

    Images are not part of this model: uploads arrive as files and are
    stored before the record is inserted.
    """

    name: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    category: Optional[float] = None
    rating_flat: Optional[float] = None
    rating_crowd: Optional[float] = None
    coords: Coords = Field(default_factory=Coords)

    model_config = {**_camel_config, "extra": "ignore", "coerce_numbers_to_str": True}

    @field_validator("category", "rating_flat", "rating_crowd", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Form fields submit "" for an untouched number input."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class SpotResponse(BaseModel):
    """
    What:  Full representation of a spot.
    Who:   Returned by every spot endpoint (single object or array items).

    imageUrl always has at least one entry: uploaded images, or the
    default sentinel when none were ever attached.
    """

    id: uuid.UUID = Field(description="Unique spot identifier (UUID)")
    name: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    category: Optional[float] = None
    rating_flat: Optional[float] = None
    rating_crowd: Optional[float] = None
    coords: Optional[Coords] = None
    image_url: List[str] = Field(description="Ordered image paths, e.g. /uploads/<name>")

    model_config = {**_camel_config, "from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Misc Responses
# ══════════════════════════════════════════════════════════════════════════

class ReverseGeocodeResponse(BaseModel):
    """Locality name resolved for a lat/lon pair."""

    city: str = Field(description="City, town or village name, or the unknown sentinel")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "spot with ID '...' was not found",
            "request_id": "1a2b3c4d"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
