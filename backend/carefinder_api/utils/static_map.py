"""Static Maps URL builder"""

import logging
from typing import Any, Iterable, Mapping, Union
from pydantic import BaseModel
from carefinder_api.models.provider import Provider

logger = logging.getLogger(__name__)

STATIC_MAP_BASE = "https://maps.googleapis.com/maps/api/staticmap"
MAX_MARKERS = 10  # keeps the URL under the Static Maps length limit


class MapDescriptor(BaseModel):
    """Everything needed to render one static map"""
    lat: float
    lng: float
    is_user_location: bool = False
    zoom: int = 14
    width: int = 600
    height: int = 400


def _coordinates(provider: Union[Provider, Mapping[str, Any]]):
    if isinstance(provider, Provider):
        return provider.lat, provider.lng
    return float(provider["lat"]), float(provider["lng"])


def build_static_map_url(
    center: MapDescriptor,
    providers: Iterable[Union[Provider, Mapping[str, Any]]],
    api_key: str,
) -> str:
    """
    Build a Static Maps URL with one numbered red marker per provider.

    At most MAX_MARKERS providers are drawn, labelled 1..10 in input order.
    A blue marker marks the centre when it is the user's own location.
    Returns an empty string if the URL cannot be built.
    """
    try:
        url = f"{STATIC_MAP_BASE}?center={center.lat},{center.lng}&zoom={center.zoom}"
        url += f"&size={center.width}x{center.height}"

        for index, provider in enumerate(list(providers)[:MAX_MARKERS], start=1):
            lat, lng = _coordinates(provider)
            url += f"&markers=color:red%7Clabel:{index}%7C{lat},{lng}"

        if center.is_user_location:
            url += f"&markers=color:blue%7C{center.lat},{center.lng}"

        url += f"&key={api_key}"
        return url
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"[MAP] Error generating static map URL: {e}")
        return ""
