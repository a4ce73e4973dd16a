"""API request/response schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field
from carefinder_api.models.provider import ApiModel, Provider


class MapCenter(BaseModel):
    """Map centre coordinates"""
    lat: float
    lng: float


class SearchResponse(ApiModel):
    """GET /api/providers response"""
    providers: List[Provider]
    map_url: str
    center: MapCenter
    formatted_address: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON body; formattedAddress only appears for pincode searches"""
        exclude = {"formatted_address"} if self.formatted_address is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class ProviderDetailsResponse(BaseModel):
    """GET /api/providers/{placeId} response"""
    provider: Provider


class MapConfigResponse(ApiModel):
    """GET /api/config response"""
    initial_center: MapCenter
    api_status: str = "ok"
    map_provider: str = "google"
    timestamp: str


class FeedbackResponse(ApiModel):
    """GET /api/facility/feedback/{facilityName} response"""
    summary: str
    generated_at: str


class FacilityInfo(BaseModel):
    """Facility details included in an SMS"""
    name: str
    address: str
    phone: Optional[str] = None
    rating: Optional[Union[float, str]] = None


class SmsRequest(ApiModel):
    """POST /api/send-sms request"""
    phone_number: str = Field(..., min_length=1)
    facility_info: FacilityInfo


class StatusResponse(BaseModel):
    """Generic success acknowledgement"""
    success: bool = True
    message: str


class HistoryRecord(BaseModel):
    """A stored facility search"""
    id: Optional[Union[int, str]] = None
    user_id: str
    search_params: Dict[str, Any] = Field(default_factory=dict)
    result_count: int = 0
    timestamp: datetime


class HistoryResultResponse(ApiModel):
    """GET /api/history/{searchId}/results response"""
    search_params: Dict[str, Any]
    results: List[Provider]
    timestamp: datetime


class GeocodeResult(ApiModel):
    """Coordinates resolved from a postal code"""
    lat: float
    lng: float
    formatted_address: str = ""
