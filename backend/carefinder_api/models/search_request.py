"""Provider search request models.

Raw query parameters (``SearchParams``) are classified into exactly one
search mode. Precedence: pincode, then a complete lat/lng pair, then a
free-text query; anything else is invalid.
"""

from typing import Literal, Optional, Union
from pydantic import BaseModel


class SearchFilters(BaseModel):
    """Optional filters shared by every search mode"""
    type: Optional[str] = None
    specialty: Optional[str] = None
    price_range: Optional[str] = None
    radius: int = 5000
    insurance: Optional[str] = None


class SearchParams(BaseModel):
    """Query parameters of GET /api/providers, as received"""
    query: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    pincode: Optional[str] = None
    country: str = "IN"
    filters: SearchFilters = SearchFilters()


class TextSearch(BaseModel):
    kind: Literal["text"] = "text"
    query: str
    filters: SearchFilters


class CoordinateSearch(BaseModel):
    kind: Literal["coordinates"] = "coordinates"
    lat: float
    lng: float
    filters: SearchFilters


class PostalCodeSearch(BaseModel):
    kind: Literal["postal_code"] = "postal_code"
    pincode: str
    country: str
    filters: SearchFilters


class InvalidSearch(BaseModel):
    kind: Literal["invalid"] = "invalid"
    reason: str = "Search query, location (lat/lng), or pincode is required"


SearchRequest = Union[PostalCodeSearch, CoordinateSearch, TextSearch, InvalidSearch]


def classify_search(params: SearchParams) -> SearchRequest:
    """Pick the search mode for a set of raw parameters"""
    if params.pincode:
        return PostalCodeSearch(pincode=params.pincode, country=params.country, filters=params.filters)
    if params.lat is not None and params.lng is not None:
        return CoordinateSearch(lat=params.lat, lng=params.lng, filters=params.filters)
    if params.query:
        return TextSearch(query=params.query, filters=params.filters)
    return InvalidSearch()
