"""Search history in the Supabase `search_history` table"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from pydantic import ValidationError
from carefinder_api.core.supabase_rest import SupabaseRequestError, SupabaseRestClient
from carefinder_api.models.errors import NotFoundError, ServiceUnavailableError, UpstreamError
from carefinder_api.models.schemas import HistoryRecord

logger = logging.getLogger(__name__)

HISTORY_TABLE = "search_history"


def row_to_record(row: Dict[str, Any]) -> HistoryRecord:
    try:
        return HistoryRecord.model_validate(row)
    except ValidationError as e:
        logger.error(f"[HISTORY] Malformed history row: {e}")
        raise UpstreamError("Saved search history is malformed", details=str(e))


class HistoryStore:
    """One row per facility search made by a signed-in user"""

    def __init__(self, rest: SupabaseRestClient):
        self.rest = rest

    def _require_configured(self):
        if not self.rest.configured:
            raise ServiceUnavailableError("Search history storage is not configured")

    async def save_search(self, user_id: str, search_params: Dict[str, Any], result_count: int) -> Optional[HistoryRecord]:
        self._require_configured()
        row = {
            "user_id": user_id,
            "search_params": search_params,
            "result_count": result_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        rows = await self.rest.insert(HISTORY_TABLE, row)
        logger.info(f"[HISTORY] Saved search for user {user_id} ({result_count} results)")
        return row_to_record(rows[0]) if rows else None

    async def list_history(self, user_id: str) -> List[HistoryRecord]:
        """All searches for a user, newest first"""
        self._require_configured()
        rows = await self.rest.select(HISTORY_TABLE, [("user_id", f"eq.{user_id}")], order="timestamp.desc")
        return [row_to_record(row) for row in rows]

    async def get_search(self, search_id: Union[int, str]) -> HistoryRecord:
        """
        One stored search by id.

        An id the table rejects (a 4xx from PostgREST, e.g. "abc" against a
        numeric id column) is reported as not found, like a missing row.
        """
        self._require_configured()
        try:
            rows = await self.rest.select(HISTORY_TABLE, [("id", f"eq.{search_id}")], limit=1)
        except SupabaseRequestError as e:
            if e.status_code is not None and 400 <= e.status_code < 500:
                logger.info(f"[HISTORY] Search {search_id} rejected by store ({e.status_code})")
                raise NotFoundError("Search not found")
            raise
        if not rows:
            raise NotFoundError("Search not found")
        return row_to_record(rows[0])

    async def delete_history(self, user_id: str) -> None:
        """Remove every search for a user; no rows is not an error"""
        self._require_configured()
        await self.rest.delete(HISTORY_TABLE, [("user_id", f"eq.{user_id}")])
        logger.info(f"[HISTORY] Cleared search history for user {user_id}")
