"""Shared test data builders"""

from carefinder_api.models.provider import Provider, ProviderCategory


def make_provider(**overrides) -> Provider:
    fields = {
        "place_id": "ChIJ-provider",
        "name": "City Hospital",
        "address": "1 MG Road",
        "lat": 12.9716,
        "lng": 77.5946,
        "category": ProviderCategory.HOSPITAL,
        "rating": 4.2,
        "price_level": 2,
        "review_count": 120,
    }
    fields.update(overrides)
    return Provider(**fields)


def make_place(**overrides) -> dict:
    """A Places API result as returned by nearby/text search"""
    place = {
        "place_id": "ChIJ-place",
        "name": "Sunrise Hospital",
        "vicinity": "12 Park Street",
        "geometry": {"location": {"lat": 12.95, "lng": 77.6}},
        "types": ["hospital", "health", "point_of_interest", "establishment"],
        "rating": 4.1,
        "price_level": 2,
        "user_ratings_total": 310,
        "opening_hours": {"open_now": True},
    }
    place.update(overrides)
    return place
