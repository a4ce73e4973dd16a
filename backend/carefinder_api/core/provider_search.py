"""Healthcare provider search via the Google Places API"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional
import googlemaps
from carefinder_api.models.errors import ConfigurationError, UpstreamError
from carefinder_api.models.provider import Provider
from carefinder_api.utils.provider_format import format_provider

logger = logging.getLogger(__name__)

# Place types Google recognizes as medical
MEDICAL_PLACE_TYPES = (
    "hospital",
    "doctor",
    "health",
    "dentist",
    "pharmacy",
    "physiotherapist",
    "medical_office",
)

# A keyword without one of these gets "healthcare" appended
HEALTHCARE_KEYWORDS = ("healthcare", "medical", "hospital", "clinic", "doctor")

DETAIL_FIELDS = [
    "place_id", "name", "formatted_address", "geometry", "formatted_phone_number",
    "website", "type", "price_level", "rating", "user_ratings_total",
    "opening_hours", "photo",
]


def build_search_keyword(query: Optional[str], type: Optional[str] = None,
                         specialty: Optional[str] = None) -> str:
    """Combine query, type and specialty, biased toward medical facilities"""
    if type or specialty:
        keyword = " ".join(part for part in (query, type, specialty) if part)
    else:
        keyword = query or ""

    if not any(word in keyword.lower() for word in HEALTHCARE_KEYWORDS):
        keyword = f"{keyword} healthcare".strip()
    return keyword


def recognized_place_type(type: Optional[str]) -> Optional[str]:
    """Lowercased type if Google treats it as a medical place type"""
    if type and type.lower() in MEDICAL_PLACE_TYPES:
        return type.lower()
    return None


def is_medical_place(place: Dict[str, Any]) -> bool:
    return any(t in MEDICAL_PLACE_TYPES for t in place.get("types") or [])


class ProviderSearch:
    """
    Text and nearby search for healthcare providers.

    Results are normalized to Provider records in upstream order. An empty
    result is never an error; API and transport failures raise UpstreamError.
    """

    def __init__(self, client: Optional[Any], rng: Optional[random.Random] = None):
        self.client = client
        self.rng = rng

    def _require_client(self):
        if self.client is None:
            raise ConfigurationError(
                "Google Maps API key not configured. Please set GOOGLE_MAPS_API_KEY in .env file."
            )
        return self.client

    async def search(
        self,
        query: Optional[str],
        type: Optional[str] = None,
        specialty: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius: int = 5000,
    ) -> List[Provider]:
        """
        Search healthcare providers.

        Uses a nearby search around (lat, lng) when both are given, a text
        search otherwise. A recognized ``type`` is sent as the Places type
        filter; without one, results are kept only if one of their types is
        a medical place type.
        """
        client = self._require_client()
        keyword = build_search_keyword(query, type, specialty)
        place_type = recognized_place_type(type)

        try:
            if lat is not None and lng is not None:
                logger.info(f"[SEARCH] Nearby search '{keyword}' around {lat},{lng} (radius {radius}m)")
                params: Dict[str, Any] = {"location": (lat, lng), "radius": radius, "keyword": keyword}
                if place_type:
                    params["type"] = place_type
                response = await asyncio.to_thread(client.places_nearby, **params)
            else:
                logger.info(f"[SEARCH] Text search '{keyword}'")
                params = {"query": keyword}
                if place_type:
                    params["type"] = place_type
                response = await asyncio.to_thread(client.places, **params)
        except Exception as e:
            logger.error(f"[SEARCH] Google Maps search error: {e}")
            raise UpstreamError("Failed to search healthcare providers", details=str(e))

        results = (response or {}).get("results") or []
        if not place_type:
            results = [place for place in results if is_medical_place(place)]

        providers = [format_provider(place, self.rng) for place in results]
        logger.info(f"[SEARCH] Found {len(providers)} providers")
        return providers

    async def nearby_places(
        self,
        lat: float,
        lng: float,
        radius: int = 5000,
        type: str = "hospital",
        keyword: str = "",
    ) -> List[Dict[str, Any]]:
        """Raw nearby search results, unfiltered and unformatted"""
        client = self._require_client()
        try:
            logger.info(f"[SEARCH] Raw nearby search around {lat},{lng} (type={type}, keyword='{keyword}')")
            response = await asyncio.to_thread(
                client.places_nearby,
                location=(lat, lng),
                radius=radius,
                type=type,
                keyword=keyword,
            )
        except Exception as e:
            logger.error(f"[SEARCH] Google Maps nearby search error: {e}")
            raise UpstreamError("Failed to fetch medical facilities", details=str(e))
        return (response or {}).get("results") or []

    async def place_details(self, place_id: str) -> Optional[Provider]:
        """Place details for one place_id, or None if Google does not know it"""
        client = self._require_client()
        try:
            response = await asyncio.to_thread(client.place, place_id, fields=DETAIL_FIELDS)
        except googlemaps.exceptions.ApiError as e:
            if e.status in ("NOT_FOUND", "INVALID_REQUEST"):
                logger.info(f"[SEARCH] Place {place_id} not found ({e.status})")
                return None
            logger.error(f"[SEARCH] Place details API error: {e}")
            raise UpstreamError("Failed to get place details", details=str(e))
        except Exception as e:
            logger.error(f"[SEARCH] Place details error: {e}")
            raise UpstreamError("Failed to get place details", details=str(e))

        result = (response or {}).get("result")
        if not result:
            return None
        result.setdefault("place_id", place_id)
        return format_provider(result, self.rng)
