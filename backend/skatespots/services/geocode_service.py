"""
SkateSpots Backend - Reverse Geocoding Proxy
===============================================

What:  Resolves a lat/lon pair to a locality name through Nominatim.
How:   One GET to `{NOMINATIM_URL}/reverse` per call with httpx, asking for
       JSON and Finnish names, identified by the configured User-Agent.
       The first of address.city / town / village wins; otherwise the
       unknown-city sentinel is returned.
Who:   Called by GET /api/reverse.

Failure policy:
    Missing lat or lon → ValidationError (400), upstream is not contacted.
    Network error, timeout, non-2xx, body that is not JSON → GeocodingError
    (500). The upstream message is logged, never returned. No retries.
"""

import logging
import time
from typing import Any, Optional

import httpx

from skatespots.config import settings
from skatespots.exceptions import GeocodingError, ValidationError

logger = logging.getLogger(__name__)

# Address keys tried in order
LOCALITY_KEYS = ("city", "town", "village")


class GeocodeService:
    """Thin async client for the Nominatim reverse endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url:  Override NOMINATIM_URL.
            transport: Custom httpx transport (tests pass an httpx.MockTransport).
        """
        self.base_url = (base_url or settings.nominatim_url).rstrip("/")
        self.transport = transport

    @staticmethod
    def extract_city(payload: Any, unknown: Optional[str] = None) -> str:
        """Pick the locality name out of a Nominatim reverse response."""
        fallback = unknown if unknown is not None else settings.geocode_unknown_city
        if not isinstance(payload, dict):
            return fallback
        address = payload.get("address")
        if not isinstance(address, dict):
            return fallback
        for key in LOCALITY_KEYS:
            value = address.get(key)
            if value:
                return str(value)
        return fallback

    async def reverse(self, lat: Optional[str], lon: Optional[str]) -> str:
        """
        Resolve a city for the given coordinates.

        Args:
            lat, lon: Raw query-string values, forwarded as-is.

        Returns:
            Locality name, or the unknown-city sentinel.

        Raises:
            ValidationError: lat or lon missing or blank.
            GeocodingError:  the upstream call failed in any way.
        """
        if not lat or not lon or not lat.strip() or not lon.strip():
            raise ValidationError(
                message="Query parameters 'lat' and 'lon' are required",
                field="lat" if not lat or not lat.strip() else "lon",
            )

        params = {
            "lat": lat,
            "lon": lon,
            "format": "json",
            "accept-language": settings.geocode_language,
        }
        headers = {"User-Agent": settings.geocode_user_agent}
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=settings.geocode_timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(
                    f"{self.base_url}/reverse",
                    params=params,
                    headers=headers,
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error("Reverse geocoding request failed for %s,%s: %s", lat, lon, str(e))
            raise GeocodingError(
                context={"lat": lat, "lon": lon, "error_type": type(e).__name__},
            )
        except ValueError as e:
            # Body was not JSON
            logger.error("Reverse geocoding returned an unreadable body for %s,%s: %s", lat, lon, str(e))
            raise GeocodingError(
                context={"lat": lat, "lon": lon, "error_type": type(e).__name__},
            )

        city = self.extract_city(payload)
        logger.info(
            "Reverse geocoded %s,%s → %s in %.0fms",
            lat,
            lon,
            city,
            (time.perf_counter() - start_time) * 1000,
        )
        return city


geocode_service = GeocodeService()
