"""Legacy nearby facility search and AI feedback endpoints"""

from typing import Optional
from fastapi import APIRouter, Depends
from carefinder_api.core.services import Services, get_services
from carefinder_api.models.errors import InvalidRequestError

router = APIRouter()


@router.get("/facilities")
async def get_facilities(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    type: Optional[str] = None,
    speciality: Optional[str] = None,
    priceRange: Optional[str] = None,
    userId: Optional[str] = None,
    services: Services = Depends(get_services),
):
    """Raw Places results for hospitals within 5km; saved to the user's history when userId is given"""
    if lat is None or lng is None:
        raise InvalidRequestError("lat and lng are required")
    return await services.orchestrator.search_facilities(
        lat,
        lng,
        type=type,
        speciality=speciality,
        price_range=priceRange,
        user_id=userId,
    )


@router.get("/facility/feedback/{facility_name}")
async def get_facility_feedback(facility_name: str, services: Services = Depends(get_services)):
    feedback = await services.feedback.generate(facility_name)
    return feedback.model_dump(by_alias=True)
