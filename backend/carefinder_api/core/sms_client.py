"""Facility details by SMS through the Twilio REST API"""

import logging
from typing import Optional
import httpx
from carefinder_api.models.errors import ServiceUnavailableError, UpstreamError
from carefinder_api.models.schemas import FacilityInfo

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


def format_facility_message(info: FacilityInfo) -> str:
    rating = info.rating if info.rating not in (None, "") else "N/A"
    return "\n".join([
        "Nearby Medical Facility:",
        info.name,
        f"Address: {info.address}",
        f"Phone: {info.phone or 'N/A'}",
        f"Rating: {rating}/5",
    ])


class SmsSender:
    """
    Sends SMS messages from the configured Twilio number.

    Disabled unless the account SID looks valid (starts with "AC") and an
    auth token and sender number are set.
    """

    def __init__(self, account_sid: str, auth_token: str, from_number: str,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        if not self.configured:
            logger.warning("Twilio credentials missing or invalid - SMS disabled")

    @property
    def configured(self) -> bool:
        return bool(
            self.account_sid
            and self.account_sid.startswith("AC")
            and self.auth_token
            and self.from_number
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport, auth=(self.account_sid, self.auth_token))
        return self._client

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, to: str, body: str) -> str:
        """Send one message; returns the Twilio message SID"""
        if not self.configured:
            raise ServiceUnavailableError("SMS service is not configured. Please check Twilio credentials.")

        client = await self._get_client()
        url = f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"
        try:
            response = await client.post(url, data={"To": to, "From": self.from_number, "Body": body})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"[SMS] Twilio error: {e.response.status_code} - {e.response.text}")
            raise UpstreamError("Failed to send SMS", details=e.response.text)
        except httpx.HTTPError as e:
            logger.error(f"[SMS] Twilio transport error: {e}")
            raise UpstreamError("Failed to send SMS", details=str(e))

        sid = response.json().get("sid", "")
        logger.info(f"[SMS] Message {sid} queued")
        return sid

    async def send_facility_info(self, to: str, info: FacilityInfo) -> str:
        return await self.send(to, format_facility_message(info))
