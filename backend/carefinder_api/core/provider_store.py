"""Saved providers in the Supabase `providers` table"""

import logging
import math
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ValidationError
from carefinder_api.core.supabase_rest import SupabaseRestClient
from carefinder_api.models.errors import UpstreamError
from carefinder_api.models.provider import Provider

logger = logging.getLogger(__name__)

PROVIDERS_TABLE = "providers"
METERS_PER_DEGREE = 111320.0


class ProviderFilter(BaseModel):
    """Filter for a local nearby lookup"""
    lat: float
    lng: float
    radius: int = 5000
    type: Optional[str] = None
    specialty: Optional[str] = None
    price_range: Optional[str] = None
    insurance: Optional[str] = None


def bounding_box(lat: float, lng: float, radius: int):
    """Approximate (min_lat, max_lat, min_lng, max_lng) around a point"""
    dlat = radius / METERS_PER_DEGREE
    dlng = radius / (METERS_PER_DEGREE * max(0.2, math.cos(math.radians(lat))))
    return lat - dlat, lat + dlat, lng - dlng, lng + dlng


def rows_to_providers(rows: List[Dict[str, Any]]) -> List[Provider]:
    try:
        return [Provider.model_validate(row) for row in rows]
    except ValidationError as e:
        logger.error(f"[STORE] Malformed provider row: {e}")
        raise UpstreamError("Saved provider data is malformed", details=str(e))


def provider_to_row(provider: Provider) -> Dict[str, Any]:
    row = provider.model_dump(mode="json", exclude={"id"})
    row["type"] = row.pop("category")
    return row


class ProviderStore:
    """
    Reads and writes providers already seen, keyed by Google place_id.

    With no Supabase configuration the store behaves as empty and saves are
    skipped.
    """

    def __init__(self, rest: SupabaseRestClient):
        self.rest = rest

    async def find_nearby_providers(self, criteria: ProviderFilter) -> List[Provider]:
        if not self.rest.configured:
            logger.warning("[STORE] Supabase not configured; skipping local provider lookup")
            return []

        min_lat, max_lat, min_lng, max_lng = bounding_box(criteria.lat, criteria.lng, criteria.radius)
        filters = [
            ("lat", f"gte.{min_lat}"),
            ("lat", f"lte.{max_lat}"),
            ("lng", f"gte.{min_lng}"),
            ("lng", f"lte.{max_lng}"),
        ]
        if criteria.type:
            filters.append(("type", f"ilike.{criteria.type}"))
        if criteria.price_range and criteria.price_range.isdigit():
            filters.append(("price_level", f"lte.{int(criteria.price_range)}"))
        if criteria.specialty:
            filters.append(("specialties", f"cs.{{{criteria.specialty}}}"))
        if criteria.insurance:
            filters.append(("insurance", f"cs.{{{criteria.insurance}}}"))

        rows = await self.rest.select(PROVIDERS_TABLE, filters, order="rating.desc")
        logger.info(f"[STORE] {len(rows)} saved providers near {criteria.lat},{criteria.lng}")
        return rows_to_providers(rows)

    async def get_provider_by_place_id(self, place_id: str) -> Optional[Provider]:
        if not self.rest.configured:
            return None
        rows = await self.rest.select(PROVIDERS_TABLE, [("place_id", f"eq.{place_id}")], limit=1)
        return rows_to_providers(rows[:1])[0] if rows else None

    async def save_provider_details(self, provider: Provider) -> Optional[Provider]:
        """Upsert one provider keyed by place_id"""
        if not self.rest.configured:
            logger.warning("[STORE] Supabase not configured; provider not saved")
            return None
        rows = await self.rest.upsert(PROVIDERS_TABLE, provider_to_row(provider), on_conflict="place_id")
        logger.info(f"[STORE] Saved provider {provider.place_id}")
        return rows_to_providers(rows[:1])[0] if rows else provider
