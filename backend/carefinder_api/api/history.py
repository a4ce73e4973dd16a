"""Search history endpoints"""

from fastapi import APIRouter, Depends
from carefinder_api.core.services import Services, get_services
from carefinder_api.models.schemas import StatusResponse

router = APIRouter()


@router.get("/history/{search_id}/results")
async def get_history_results(search_id: str, services: Services = Depends(get_services)):
    """Re-run a past search; the response may differ from the recorded result_count"""
    result = await services.orchestrator.replay_search(search_id)
    return result.model_dump(mode="json", by_alias=True)


@router.get("/history/{user_id}")
async def list_history(user_id: str, services: Services = Depends(get_services)):
    """A user's searches, newest first"""
    records = await services.history_store.list_history(user_id)
    return [record.model_dump(mode="json") for record in records]


@router.delete("/history/{user_id}")
async def clear_history(user_id: str, services: Services = Depends(get_services)):
    await services.history_store.delete_history(user_id)
    return StatusResponse(message="Search history cleared successfully").model_dump()
