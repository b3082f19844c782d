"""
SkateSpots Backend - Reverse Geocoding Route
==============================================

What:  GET /api/reverse?lat=..&lon=.. → {"city": "..."}
Who:   The "add spot" form, to prefill the city from the picked map point.

The browser cannot set Nominatim's required User-Agent, so the lookup goes
through the backend.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from skatespots.schemas.spot import ErrorResponse, ReverseGeocodeResponse
from skatespots.services.geocode_service import geocode_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Geocoding"])


@router.get(
    "/reverse",
    response_model=ReverseGeocodeResponse,
    responses={
        400: {"description": "lat or lon missing", "model": ErrorResponse},
        500: {"description": "Geocoding service failed", "model": ErrorResponse},
    },
    summary="Resolve coordinates to a city name",
)
async def reverse_geocode(
    lat: Optional[str] = Query(default=None, description="Latitude"),
    lon: Optional[str] = Query(default=None, description="Longitude"),
) -> ReverseGeocodeResponse:
    """
    Both parameters are plain strings and forwarded as given; only their
    presence is checked (by the service, before any upstream call).
    """
    city = await geocode_service.reverse(lat, lon)
    return ReverseGeocodeResponse(city=city)
