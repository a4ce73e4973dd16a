"""Supabase (PostgREST) HTTP client"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
import httpx
from carefinder_api.models.errors import UpstreamError

logger = logging.getLogger(__name__)

Filter = Tuple[str, str]


class SupabaseRequestError(UpstreamError):
    """A PostgREST call failed; status_code is None for transport errors"""

    def __init__(self, message: str, details: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class SupabaseRestClient:
    """
    Thin async wrapper over the Supabase REST API.

    Filters are (column, "op.value") pairs in PostgREST syntax; a column may
    appear more than once (e.g. lower and upper bounds).
    """

    def __init__(self, url: str, key: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = url.rstrip("/") if url else ""
        self.key = key
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport)
        return self._client

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Sequence[Filter] = (),
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        client = await self._get_client()
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            response = await client.request(
                method, url, params=list(params), json=json, headers=self._headers(prefer)
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"[STORE] {method} {table} failed: {e.response.status_code} - {e.response.text}")
            raise SupabaseRequestError(
                f"Supabase request failed for {table}",
                details=e.response.text,
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            logger.error(f"[STORE] {method} {table} transport error: {e}")
            raise SupabaseRequestError(f"Supabase request failed for {table}", details=str(e))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"[STORE] {method} {table} returned invalid JSON: {e}")
            raise SupabaseRequestError(f"Supabase returned an invalid response for {table}", details=str(e))

    async def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: List[Filter] = [("select", "*")]
        params.extend(filters)
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, params) or []

    async def insert(self, table: str, row: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._request("POST", table, json=row, prefer="return=representation") or []

    async def upsert(self, table: str, row: Dict[str, Any], on_conflict: str) -> List[Dict[str, Any]]:
        return await self._request(
            "POST",
            table,
            params=[("on_conflict", on_conflict)],
            json=row,
            prefer="resolution=merge-duplicates,return=representation",
        ) or []

    async def delete(self, table: str, filters: Sequence[Filter]) -> None:
        await self._request("DELETE", table, filters, prefer="return=minimal")
