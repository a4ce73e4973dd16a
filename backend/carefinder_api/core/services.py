"""Adapter wiring.

Every external client is built once at process start and shared by
reference; route handlers reach them through the ``get_services``
dependency.
"""

import logging
from dataclasses import dataclass
from fastapi import Request
from carefinder_api.core.config import Settings
from carefinder_api.core.feedback_client import FeedbackGenerator, build_openai_client
from carefinder_api.core.geocoder import Geocoder
from carefinder_api.core.history_store import HistoryStore
from carefinder_api.core.maps_client import build_maps_client
from carefinder_api.core.orchestrator import SearchOrchestrator
from carefinder_api.core.provider_search import ProviderSearch
from carefinder_api.core.provider_store import ProviderStore
from carefinder_api.core.sms_client import SmsSender
from carefinder_api.core.supabase_rest import SupabaseRestClient

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    orchestrator: SearchOrchestrator
    history_store: HistoryStore
    feedback: FeedbackGenerator
    sms: SmsSender
    supabase: SupabaseRestClient

    async def close(self):
        await self.supabase.close()
        await self.sms.close()


def build_services(settings: Settings) -> Services:
    maps_client = build_maps_client(settings.google_maps_api_key)
    supabase = SupabaseRestClient(settings.supabase_url, settings.supabase_key)
    if not supabase.configured:
        logger.warning("SUPABASE_URL / SUPABASE_KEY not set - provider store and history disabled")

    history_store = HistoryStore(supabase)
    orchestrator = SearchOrchestrator(
        geocoder=Geocoder(maps_client, default_country=settings.geocode_default_country),
        provider_search=ProviderSearch(maps_client),
        provider_store=ProviderStore(supabase),
        history_store=history_store,
        maps_api_key=settings.google_maps_api_key,
        default_center=(settings.default_center_lat, settings.default_center_lng),
    )
    return Services(
        settings=settings,
        orchestrator=orchestrator,
        history_store=history_store,
        feedback=FeedbackGenerator(
            build_openai_client(settings.deepseek_api_key, settings.ai_base_url),
            model=settings.ai_model,
        ),
        sms=SmsSender(settings.twilio_account_sid, settings.twilio_auth_token, settings.twilio_phone_number),
        supabase=supabase,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
