"""Pincode geocoding via the Google Geocoding API"""

import asyncio
import logging
from typing import Any, Optional
from carefinder_api.models.errors import (
    ConfigurationError,
    InvalidInputError,
    NotFoundError,
    UpstreamError,
)
from carefinder_api.models.schemas import GeocodeResult

logger = logging.getLogger(__name__)

MIN_PINCODE_LENGTH = 4


class Geocoder:
    """Resolves postal codes to coordinates. Single attempt, no retries."""

    def __init__(self, client: Optional[Any], default_country: str = "IN"):
        self.client = client
        self.default_country = default_country

    async def geocode_pincode(self, pincode: Optional[str], country: Optional[str] = None) -> GeocodeResult:
        """
        Geocode a pincode to latitude/longitude and a formatted address.

        Raises:
            InvalidInputError: pincode empty or shorter than MIN_PINCODE_LENGTH
            NotFoundError: the Geocoding API returned no results
            UpstreamError: any API or transport failure
        """
        if not pincode or len(pincode) < MIN_PINCODE_LENGTH:
            raise InvalidInputError("Invalid pincode format")
        if self.client is None:
            raise ConfigurationError(
                "Google Maps API key not configured. Please set GOOGLE_MAPS_API_KEY in .env file."
            )

        country = country or self.default_country
        try:
            logger.info(f"[GEOCODE] Geocoding pincode {pincode} ({country})")
            results = await asyncio.to_thread(
                self.client.geocode,
                address=pincode,
                components={"postal_code": pincode, "country": country},
            )
        except Exception as e:
            logger.error(f"[GEOCODE] Geocoding API error: {e}")
            raise UpstreamError(f"Failed to geocode pincode: {e}", details=str(e))

        if not results:
            raise NotFoundError("No location found for this pincode")

        try:
            first = results[0]
            location = first["geometry"]["location"]
            result = GeocodeResult(
                lat=location["lat"],
                lng=location["lng"],
                formatted_address=first.get("formatted_address") or "",
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError("Failed to geocode pincode: malformed geocoding result", details=str(e))

        logger.info(f"[GEOCODE] Pincode {pincode} geocoded to {result.lat},{result.lng}")
        return result
