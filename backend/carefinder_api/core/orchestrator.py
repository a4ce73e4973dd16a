"""Provider search orchestration.

Decides per request whether to geocode a pincode, query saved providers or
call the Places API, then assembles the providers, map URL and centre.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from carefinder_api.core.geocoder import Geocoder
from carefinder_api.core.history_store import HistoryStore
from carefinder_api.core.provider_search import ProviderSearch
from carefinder_api.core.provider_store import ProviderFilter, ProviderStore
from carefinder_api.models.errors import (
    ApplicationError,
    InvalidInputError,
    InvalidRequestError,
    UpstreamError,
)
from carefinder_api.models.provider import Provider
from carefinder_api.models.schemas import HistoryResultResponse, MapCenter, SearchResponse
from carefinder_api.models.search_request import (
    CoordinateSearch,
    InvalidSearch,
    PostalCodeSearch,
    SearchFilters,
    SearchParams,
    TextSearch,
    classify_search,
)
from carefinder_api.utils.static_map import MapDescriptor, build_static_map_url

logger = logging.getLogger(__name__)

MAP_ZOOM = 14
MAP_WIDTH = 600
MAP_HEIGHT = 400
DEFAULT_LOCATION_KEYWORD = "medical healthcare"
DEFAULT_LOCATION_TYPE = "hospital"
FACILITY_SEARCH_RADIUS = 5000


def _upstream(message: str, error: ApplicationError) -> UpstreamError:
    details = error.details or error.message
    return UpstreamError(message, details=details)


def filter_facilities(facilities: List[Dict[str, Any]], speciality: Optional[str],
                      price_range: Optional[str]) -> List[Dict[str, Any]]:
    """Keep raw Places results matching a speciality type and a maximum price level"""
    if speciality:
        wanted = speciality.lower()
        facilities = [f for f in facilities if wanted in (f.get("types") or [])]
    if price_range and price_range.isdigit():
        limit = int(price_range)
        facilities = [f for f in facilities if f.get("price_level") and f["price_level"] <= limit]
    return facilities


class SearchOrchestrator:
    """Request-level search logic shared by the provider, facility and history endpoints"""

    def __init__(
        self,
        geocoder: Geocoder,
        provider_search: ProviderSearch,
        provider_store: ProviderStore,
        history_store: HistoryStore,
        maps_api_key: str,
        default_center: Tuple[float, float] = (37.7749, -122.4194),
    ):
        self.geocoder = geocoder
        self.provider_search = provider_search
        self.provider_store = provider_store
        self.history_store = history_store
        self.maps_api_key = maps_api_key
        self.default_center = default_center

    async def search_providers(self, params: SearchParams) -> SearchResponse:
        """
        Unified provider search.

        Raises:
            InvalidRequestError: no query, coordinate pair or pincode
            InvalidInputError: the pincode could not be geocoded
            UpstreamError: the store or the Places API failed
        """
        request = classify_search(params)
        if isinstance(request, InvalidSearch):
            raise InvalidRequestError(request.reason)

        lat, lng = self.default_center
        is_user_location = False
        formatted_address = None

        if isinstance(request, PostalCodeSearch):
            try:
                geocoded = await self.geocoder.geocode_pincode(request.pincode, request.country)
            except ApplicationError as e:
                logger.error(f"[SEARCH] Error geocoding pincode {request.pincode}: {e.message}")
                raise InvalidInputError(f"Invalid pincode: {e.message}")
            lat, lng = geocoded.lat, geocoded.lng
            formatted_address = geocoded.formatted_address
            is_user_location = True
        elif isinstance(request, CoordinateSearch):
            lat, lng = request.lat, request.lng
            is_user_location = True

        logger.info(
            f"[SEARCH] Mode={request.kind} center={lat},{lng} "
            f"type={request.filters.type} specialty={request.filters.specialty}"
        )

        if isinstance(request, TextSearch):
            try:
                providers = await self.provider_search.search(
                    request.query,
                    type=request.filters.type,
                    specialty=request.filters.specialty,
                )
            except ApplicationError as e:
                raise _upstream("Failed to search providers", e)
            logger.info(f"[SEARCH] Found {len(providers)} providers via text search")
            if providers:
                lat, lng = providers[0].lat, providers[0].lng
        else:
            try:
                providers = await self.find_nearby(lat, lng, request.filters)
            except ApplicationError as e:
                raise _upstream("Failed to find nearby providers", e)

        map_url = build_static_map_url(
            MapDescriptor(
                lat=lat,
                lng=lng,
                is_user_location=is_user_location,
                zoom=MAP_ZOOM,
                width=MAP_WIDTH,
                height=MAP_HEIGHT,
            ),
            providers,
            self.maps_api_key,
        )

        return SearchResponse(
            providers=providers,
            map_url=map_url,
            center=MapCenter(lat=lat, lng=lng),
            formatted_address=formatted_address,
        )

    async def find_nearby(self, lat: float, lng: float, filters: SearchFilters) -> List[Provider]:
        """Saved providers if any match, otherwise a Places nearby search"""
        saved = await self.provider_store.find_nearby_providers(ProviderFilter(
            lat=lat,
            lng=lng,
            radius=filters.radius,
            type=filters.type,
            specialty=filters.specialty,
            price_range=filters.price_range,
            insurance=filters.insurance,
        ))
        if saved:
            logger.info(f"[SEARCH] Found {len(saved)} providers in database")
            return saved
        return await self.search_places_nearby(lat, lng, filters)

    async def search_places_nearby(self, lat: float, lng: float, filters: SearchFilters) -> List[Provider]:
        """Places nearby search, defaulting to hospitals when no type or specialty is given"""
        keyword = filters.type or filters.specialty or DEFAULT_LOCATION_KEYWORD
        place_type = filters.type if (filters.type or filters.specialty) else DEFAULT_LOCATION_TYPE
        providers = await self.provider_search.search(
            keyword,
            type=place_type,
            specialty=filters.specialty,
            lat=lat,
            lng=lng,
            radius=filters.radius,
        )
        logger.info(f"[SEARCH] Found {len(providers)} providers via Google Maps location search")
        return providers

    async def get_provider_details(self, place_id: str) -> Optional[Provider]:
        """Saved provider, else Places details (saved for next time), else None"""
        provider = await self.provider_store.get_provider_by_place_id(place_id)
        if provider:
            return provider

        provider = await self.provider_search.place_details(place_id)
        if provider is None:
            return None
        try:
            await self.provider_store.save_provider_details(provider)
        except ApplicationError as e:
            logger.error(f"[STORE] Error saving provider {place_id}: {e.message}")
        return provider

    async def search_facilities(
        self,
        lat: float,
        lng: float,
        type: Optional[str] = None,
        speciality: Optional[str] = None,
        price_range: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Raw nearby hospitals, recorded in the user's search history when user_id is given"""
        facilities = await self.provider_search.nearby_places(
            lat, lng, radius=FACILITY_SEARCH_RADIUS, type=DEFAULT_LOCATION_TYPE, keyword=type or ""
        )
        facilities = filter_facilities(facilities, speciality, price_range)

        if user_id:
            search_params = {
                "lat": lat,
                "lng": lng,
                "type": type,
                "speciality": speciality,
                "priceRange": price_range,
            }
            try:
                await self.history_store.save_search(user_id, search_params, len(facilities))
            except ApplicationError as e:
                logger.error(f"[HISTORY] Error saving search history: {e.message}")

        return facilities

    async def replay_search(self, search_id: str) -> HistoryResultResponse:
        """
        Re-run a stored search through the Places nearby search.

        The stored result_count is left untouched even if the replay differs.
        """
        record = await self.history_store.get_search(search_id)
        params = record.search_params
        filters = SearchFilters(
            type=params.get("type"),
            specialty=params.get("specialty") or params.get("speciality"),
            price_range=params.get("priceRange"),
        )
        if params.get("lat") is None or params.get("lng") is None:
            raise InvalidRequestError("Stored search has no location to replay")
        try:
            results = await self.search_places_nearby(float(params["lat"]), float(params["lng"]), filters)
        except ApplicationError as e:
            raise _upstream("Failed to retrieve historical search results", e)
        return HistoryResultResponse(search_params=params, results=results, timestamp=record.timestamp)
