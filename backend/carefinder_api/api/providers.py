"""Provider search, provider details and map configuration endpoints"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from carefinder_api.core.services import Services, get_services
from carefinder_api.models.errors import ApplicationError, InvalidRequestError, NotFoundError
from carefinder_api.models.schemas import MapCenter, MapConfigResponse, ProviderDetailsResponse
from carefinder_api.models.search_request import SearchFilters, SearchParams

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_number(name: str, value: Optional[str], cast: Callable[[str], Any]) -> Any:
    """Blank query values count as absent; anything else must parse"""
    if value is None or not value.strip():
        return None
    try:
        return cast(value.strip())
    except ValueError:
        raise InvalidRequestError(f"Invalid {name}: {value}")


@router.get("/config")
async def get_map_config(services: Services = Depends(get_services)):
    """Map configuration for the frontend"""
    settings = services.settings
    config = MapConfigResponse(
        initial_center=MapCenter(lat=settings.default_center_lat, lng=settings.default_center_lng),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return config.model_dump(by_alias=True)


@router.get("/test")
async def test_api():
    """Connectivity probe"""
    return {
        "message": "API is up and running",
        "mapProvider": "google",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/providers")
async def search_providers(
    query: Optional[str] = None,
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    pincode: Optional[str] = None,
    type: Optional[str] = None,
    specialty: Optional[str] = None,
    priceRange: Optional[str] = None,
    radius: Optional[str] = None,
    insurance: Optional[str] = None,
    country: Optional[str] = None,
    services: Services = Depends(get_services),
):
    """
    Unified provider search by free text, coordinates or pincode.

    Errors keep the success shape: `providers` is an empty list and `mapUrl` is null.
    """
    settings = services.settings
    try:
        params = SearchParams(
            query=query,
            lat=_parse_number("lat", lat, float),
            lng=_parse_number("lng", lng, float),
            pincode=pincode,
            country=country or settings.geocode_default_country,
            filters=SearchFilters(
                type=type,
                specialty=specialty,
                price_range=priceRange,
                radius=_parse_number("radius", radius, int) or settings.default_search_radius,
                insurance=insurance,
            ),
        )
        result = await services.orchestrator.search_providers(params)
    except ApplicationError as e:
        logger.error(f"[SEARCH] Provider search failed: {e.message}")
        body = e.model_dump()
        body.update({"providers": [], "mapUrl": None})
        return JSONResponse(status_code=e.http_status, content=body)

    return result.to_payload()


@router.get("/providers/{place_id}")
async def get_provider_details(place_id: str, services: Services = Depends(get_services)):
    provider = await services.orchestrator.get_provider_details(place_id)
    if provider is None:
        raise NotFoundError("Provider not found")
    return ProviderDetailsResponse(provider=provider).model_dump(mode="json", by_alias=True)
