"""Google Maps client construction"""

import logging
from typing import Optional
import googlemaps

logger = logging.getLogger(__name__)


def build_maps_client(api_key: str) -> Optional[googlemaps.Client]:
    """
    Create the shared googlemaps client, or None when no usable key is configured.

    Over-query-limit responses are not retried.
    """
    if not api_key:
        logger.warning("GOOGLE_MAPS_API_KEY not set in .env file")
        return None
    try:
        return googlemaps.Client(key=api_key, retry_over_query_limit=False)
    except ValueError as e:
        logger.error(f"[MAPS] Could not create Google Maps client: {e}")
        return None
