"""Places result -> Provider normalization"""

import random
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple
from carefinder_api.models.provider import Photo, Provider, ProviderCategory


class CategoryRule(NamedTuple):
    """Matches a place when any type keyword appears in its joined types
    or any name keyword appears in its lowercased name."""
    category: ProviderCategory
    type_keywords: Tuple[str, ...]
    name_keywords: Tuple[str, ...]

    def matches(self, types_text: str, name: str) -> bool:
        return any(k in types_text for k in self.type_keywords) or any(k in name for k in self.name_keywords)


# Evaluated in order, first match wins
CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(ProviderCategory.HOSPITAL, ("hospital",), ("hospital",)),
    CategoryRule(ProviderCategory.DOCTOR, ("doctor", "physician"), ("doctor",)),
    CategoryRule(ProviderCategory.CLINIC, ("clinic",), ("clinic", "phc")),
    CategoryRule(ProviderCategory.PHARMACY, ("pharmacy",), ("pharmacy", "drug")),
    CategoryRule(ProviderCategory.DENTIST, ("dentist",), ("dental", "dentist")),
    CategoryRule(ProviderCategory.LABORATORY, ("laboratory",), ("lab", "test")),
)

# Placeholder-data ranges used when the Places API omits a value
RATING_RANGE = (3, 5)
PRICE_LEVEL_RANGE = (1, 3)
REVIEW_COUNT_RANGE = (5, 24)

_default_rng = random.Random()


def categorize(types: Optional[Sequence[str]], name: Optional[str],
               rules: Sequence[CategoryRule] = CATEGORY_RULES) -> ProviderCategory:
    """Derive the provider category from Places types and the place name"""
    types_text = " ".join(types or []).lower()
    lowered_name = (name or "").lower()
    for rule in rules:
        if rule.matches(types_text, lowered_name):
            return rule.category
    return ProviderCategory.HEALTHCARE_PROVIDER


def _extract_photos(place: Dict[str, Any]) -> List[Photo]:
    return [
        Photo(reference=photo.get("photo_reference"), width=photo.get("width"), height=photo.get("height"))
        for photo in place.get("photos") or []
    ]


def format_provider(place: Dict[str, Any], rng: Optional[random.Random] = None) -> Provider:
    """
    Map one Places API result (nearby, text search or details) to a Provider.

    Missing rating, price level and review count are filled with random
    placeholder values; pass a seeded ``rng`` to make them deterministic.
    """
    rng = rng or _default_rng
    location = (place.get("geometry") or {}).get("location") or {}
    opening_hours = place.get("opening_hours")

    rating = place.get("rating")
    price_level = place.get("price_level")
    review_count = place.get("user_ratings_total")

    return Provider(
        id=place.get("id"),
        place_id=place.get("place_id"),
        name=place.get("name") or "Unknown Provider",
        address=place.get("vicinity") or place.get("formatted_address") or "",
        lat=location.get("lat", 0.0),
        lng=location.get("lng", 0.0),
        category=categorize(place.get("types"), place.get("name")),
        rating=rating if rating is not None else rng.randint(*RATING_RANGE),
        phone_number=place.get("formatted_phone_number") or "",
        website=place.get("website") or "",
        open_now=bool(opening_hours.get("open_now", True)) if opening_hours else True,
        price_level=price_level if price_level is not None else rng.randint(*PRICE_LEVEL_RANGE),
        review_count=review_count if review_count is not None else rng.randint(*REVIEW_COUNT_RANGE),
        photos=_extract_photos(place),
    )
