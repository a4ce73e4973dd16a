"""AI-generated facility feedback via an OpenAI-compatible chat API"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from openai import OpenAI
from carefinder_api.models.errors import ConfigurationError, UpstreamError
from carefinder_api.models.schemas import FeedbackResponse

logger = logging.getLogger(__name__)

FEEDBACK_SYSTEM_PROMPT = """You are an AI assistant that provides balanced and factual feedback about medical facilities based on typical patient experiences. For {facility_name}, generate a summary that includes:
1. Overall reputation
2. Quality of care
3. Staff professionalism
4. Wait times
5. Facility conditions

Keep the response concise and objective. If you don't have specific information about the facility, provide general insights about similar facilities in the area."""

FEEDBACK_USER_PROMPT = "Please provide feedback about {facility_name}."


def build_openai_client(api_key: str, base_url: str) -> Optional[OpenAI]:
    if not api_key:
        logger.warning("DEEPSEEK_API_KEY not set in .env file")
        return None
    return OpenAI(api_key=api_key, base_url=base_url)


class FeedbackGenerator:
    """Generates a short patient-experience summary for a named facility"""

    def __init__(self, client: Optional[Any], model: str = "deepseek-chat",
                 temperature: float = 0.7, max_tokens: int = 500):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(self, facility_name: str) -> FeedbackResponse:
        if self.client is None:
            raise ConfigurationError(
                "AI provider API key not configured. Please set DEEPSEEK_API_KEY in .env file."
            )

        messages = [
            {"role": "system", "content": FEEDBACK_SYSTEM_PROMPT.format(facility_name=facility_name)},
            {"role": "user", "content": FEEDBACK_USER_PROMPT.format(facility_name=facility_name)},
        ]
        try:
            logger.info(f"[FEEDBACK] Calling {self.model} for '{facility_name}'")
            completion = await asyncio.to_thread(
                self.client.chat.completions.create,
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            summary = completion.choices[0].message.content
        except Exception as e:
            logger.error(f"[FEEDBACK] Chat completion failed: {e}")
            raise UpstreamError("Failed to generate facility feedback", details=str(e))

        return FeedbackResponse(
            summary=summary or "",
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
