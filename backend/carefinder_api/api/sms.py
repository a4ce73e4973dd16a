"""SMS sharing endpoint"""

from fastapi import APIRouter, Depends
from carefinder_api.core.services import Services, get_services
from carefinder_api.models.schemas import SmsRequest, StatusResponse

router = APIRouter()


@router.post("/send-sms")
async def send_sms(request: SmsRequest, services: Services = Depends(get_services)):
    """Text a facility's name, address, phone and rating to a phone number"""
    await services.sms.send_facility_info(request.phone_number, request.facility_info)
    return StatusResponse(message="SMS sent successfully").model_dump()
