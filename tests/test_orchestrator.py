"""Tests for search orchestration"""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from carefinder_api.core.history_store import HistoryStore
from carefinder_api.core.orchestrator import SearchOrchestrator, filter_facilities
from carefinder_api.core.provider_store import ProviderFilter
from carefinder_api.core.supabase_rest import SupabaseRestClient
from carefinder_api.models.errors import (
    InvalidInputError,
    InvalidRequestError,
    NotFoundError,
    ServiceUnavailableError,
    UpstreamError,
)
from carefinder_api.models.schemas import GeocodeResult, HistoryRecord
from carefinder_api.models.search_request import SearchFilters, SearchParams
from conftest import make_place, make_provider


@pytest.fixture
def geocoder():
    mock = Mock()
    mock.geocode_pincode = AsyncMock(return_value=GeocodeResult(
        lat=12.9767, lng=77.5713, formatted_address="Bengaluru, Karnataka 560001, India"
    ))
    return mock


@pytest.fixture
def provider_search():
    mock = Mock()
    mock.search = AsyncMock(return_value=[])
    mock.nearby_places = AsyncMock(return_value=[])
    mock.place_details = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def provider_store():
    mock = Mock()
    mock.find_nearby_providers = AsyncMock(return_value=[])
    mock.get_provider_by_place_id = AsyncMock(return_value=None)
    mock.save_provider_details = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def history_store():
    mock = Mock()
    mock.save_search = AsyncMock(return_value=None)
    mock.get_search = AsyncMock()
    return mock


@pytest.fixture
def orchestrator(geocoder, provider_search, provider_store, history_store):
    return SearchOrchestrator(
        geocoder=geocoder,
        provider_search=provider_search,
        provider_store=provider_store,
        history_store=history_store,
        maps_api_key="MAPS_KEY",
        default_center=(37.7749, -122.4194),
    )


class TestSearchProviders:

    @pytest.mark.asyncio
    async def test_no_inputs_is_invalid_request(self, orchestrator, provider_search, geocoder):
        with pytest.raises(InvalidRequestError) as exc_info:
            await orchestrator.search_providers(SearchParams())

        assert exc_info.value.message == "Search query, location (lat/lng), or pincode is required"
        provider_search.search.assert_not_called()
        geocoder.geocode_pincode.assert_not_called()

    @pytest.mark.asyncio
    async def test_pincode_search_uses_geocoded_centre(self, orchestrator, geocoder, provider_search):
        provider_search.search.return_value = [make_provider()]

        response = await orchestrator.search_providers(SearchParams(pincode="560001", country="IN"))

        geocoder.geocode_pincode.assert_awaited_once_with("560001", "IN")
        assert (response.center.lat, response.center.lng) == (12.9767, 77.5713)
        assert response.formatted_address == "Bengaluru, Karnataka 560001, India"
        assert response.to_payload()["formattedAddress"] == "Bengaluru, Karnataka 560001, India"
        assert "color:blue%7C12.9767,77.5713" in response.map_url

    @pytest.mark.asyncio
    async def test_pincode_beats_coordinates_and_query(self, orchestrator, geocoder, provider_store):
        await orchestrator.search_providers(SearchParams(pincode="560001", lat=1.0, lng=2.0, query="clinic"))

        geocoder.geocode_pincode.assert_awaited_once()
        criteria = provider_store.find_nearby_providers.call_args.args[0]
        assert (criteria.lat, criteria.lng) == (12.9767, 77.5713)

    @pytest.mark.asyncio
    async def test_geocode_failure_becomes_invalid_input(self, orchestrator, geocoder, provider_search):
        geocoder.geocode_pincode.side_effect = NotFoundError("No location found for this pincode")

        with pytest.raises(InvalidInputError) as exc_info:
            await orchestrator.search_providers(SearchParams(pincode="000000"))

        assert exc_info.value.message == "Invalid pincode: No location found for this pincode"
        provider_search.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_saved_providers_skip_places_search(self, orchestrator, provider_store, provider_search):
        saved = [make_provider(place_id="saved-1"), make_provider(place_id="saved-2")]
        provider_store.find_nearby_providers.return_value = saved

        response = await orchestrator.search_providers(SearchParams(lat=12.97, lng=77.59))

        assert response.providers == saved
        assert provider_search.search.call_count == 0

    @pytest.mark.asyncio
    async def test_single_saved_provider_is_returned_unchanged(self, orchestrator, provider_store, provider_search):
        saved = make_provider(place_id="saved-only", rating=3.3, review_count=9)
        provider_store.find_nearby_providers.return_value = [saved]

        response = await orchestrator.search_providers(SearchParams(lat=12.97, lng=77.59))

        assert len(response.providers) == 1
        assert response.providers[0] is saved
        provider_search.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_coordinates_pass_filters_to_store(self, orchestrator, provider_store):
        filters = SearchFilters(type="clinic", specialty="ent", price_range="2", radius=2000, insurance="acme")

        await orchestrator.search_providers(SearchParams(lat=12.97, lng=77.59, filters=filters))

        provider_store.find_nearby_providers.assert_awaited_once_with(ProviderFilter(
            lat=12.97, lng=77.59, radius=2000, type="clinic",
            specialty="ent", price_range="2", insurance="acme",
        ))

    @pytest.mark.asyncio
    async def test_empty_store_falls_back_to_hospital_search(self, orchestrator, provider_search):
        provider_search.search.return_value = [make_provider()]

        response = await orchestrator.search_providers(SearchParams(lat=12.97, lng=77.59))

        provider_search.search.assert_awaited_once_with(
            "medical healthcare", type="hospital", specialty=None, lat=12.97, lng=77.59, radius=5000,
        )
        assert len(response.providers) == 1
        assert (response.center.lat, response.center.lng) == (12.97, 77.59)
        assert "formattedAddress" not in response.to_payload()

    @pytest.mark.asyncio
    async def test_specialty_fallback_has_no_hospital_default(self, orchestrator, provider_search):
        filters = SearchFilters(specialty="cardiology")

        await orchestrator.search_providers(SearchParams(lat=12.97, lng=77.59, filters=filters))

        args = provider_search.search.call_args
        assert args.args == ("cardiology",)
        assert args.kwargs["type"] is None

    @pytest.mark.asyncio
    async def test_text_search_recentres_on_first_result(self, orchestrator, provider_search, provider_store):
        provider_search.search.return_value = [
            make_provider(lat=28.61, lng=77.21),
            make_provider(place_id="second", lat=28.7, lng=77.1),
        ]

        response = await orchestrator.search_providers(
            SearchParams(query="aiims", filters=SearchFilters(type="hospital"))
        )

        provider_search.search.assert_awaited_once_with("aiims", type="hospital", specialty=None)
        provider_store.find_nearby_providers.assert_not_called()
        assert (response.center.lat, response.center.lng) == (28.61, 77.21)
        assert "color:blue" not in response.map_url
        assert response.map_url.count("color:red") == 2

    @pytest.mark.asyncio
    async def test_text_search_without_results_keeps_default_centre(self, orchestrator):
        response = await orchestrator.search_providers(SearchParams(query="nothing here"))

        assert response.providers == []
        assert (response.center.lat, response.center.lng) == (37.7749, -122.4194)

    @pytest.mark.asyncio
    async def test_text_search_failure(self, orchestrator, provider_search):
        provider_search.search.side_effect = UpstreamError("Failed to search healthcare providers", details="timeout")

        with pytest.raises(UpstreamError) as exc_info:
            await orchestrator.search_providers(SearchParams(query="clinic"))

        assert exc_info.value.message == "Failed to search providers"
        assert exc_info.value.details == "timeout"

    @pytest.mark.asyncio
    async def test_store_failure(self, orchestrator, provider_store):
        provider_store.find_nearby_providers.side_effect = UpstreamError("Supabase request failed for providers")

        with pytest.raises(UpstreamError) as exc_info:
            await orchestrator.search_providers(SearchParams(lat=1.0, lng=2.0))

        assert exc_info.value.message == "Failed to find nearby providers"

    @pytest.mark.asyncio
    async def test_incomplete_coordinates_fall_back_to_query(self, orchestrator, provider_store, provider_search):
        await orchestrator.search_providers(SearchParams(lat=12.97, query="clinic"))

        provider_store.find_nearby_providers.assert_not_called()
        provider_search.search.assert_awaited_once()


class TestProviderDetails:

    @pytest.mark.asyncio
    async def test_saved_provider_short_circuits(self, orchestrator, provider_store, provider_search):
        provider_store.get_provider_by_place_id.return_value = make_provider()

        provider = await orchestrator.get_provider_details("ChIJ-provider")

        assert provider.place_id == "ChIJ-provider"
        provider_search.place_details.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetched_provider_is_saved(self, orchestrator, provider_store, provider_search):
        fetched = make_provider(place_id="ChIJ-new")
        provider_search.place_details.return_value = fetched

        provider = await orchestrator.get_provider_details("ChIJ-new")

        assert provider == fetched
        provider_store.save_provider_details.assert_awaited_once_with(fetched)

    @pytest.mark.asyncio
    async def test_save_failure_still_returns_provider(self, orchestrator, provider_store, provider_search):
        provider_search.place_details.return_value = make_provider(place_id="ChIJ-new")
        provider_store.save_provider_details.side_effect = UpstreamError("Supabase request failed for providers")

        provider = await orchestrator.get_provider_details("ChIJ-new")

        assert provider.place_id == "ChIJ-new"

    @pytest.mark.asyncio
    async def test_unknown_place(self, orchestrator, provider_store):
        assert await orchestrator.get_provider_details("missing") is None
        provider_store.save_provider_details.assert_not_called()


class TestFacilities:

    def test_filter_by_speciality_and_price(self):
        facilities = [
            make_place(place_id="a", types=["hospital", "dentist"], price_level=1),
            make_place(place_id="b", types=["hospital"], price_level=1),
            make_place(place_id="c", types=["dentist"], price_level=3),
            make_place(place_id="d", types=["dentist"], price_level=None),
        ]

        kept = filter_facilities(facilities, "Dentist", "2")

        assert [f["place_id"] for f in kept] == ["a"]

    def test_no_filters_keeps_everything(self):
        facilities = [make_place(), make_place(place_id="b")]
        assert filter_facilities(facilities, None, None) == facilities

    @pytest.mark.asyncio
    async def test_records_history_for_user(self, orchestrator, provider_search, history_store):
        provider_search.nearby_places.return_value = [make_place(), make_place(place_id="b")]

        facilities = await orchestrator.search_facilities(12.9, 77.6, type="clinic", user_id="user-1")

        assert len(facilities) == 2
        provider_search.nearby_places.assert_awaited_once_with(
            12.9, 77.6, radius=5000, type="hospital", keyword="clinic"
        )
        history_store.save_search.assert_awaited_once_with(
            "user-1",
            {"lat": 12.9, "lng": 77.6, "type": "clinic", "speciality": None, "priceRange": None},
            2,
        )

    @pytest.mark.asyncio
    async def test_anonymous_search_is_not_recorded(self, orchestrator, history_store):
        await orchestrator.search_facilities(12.9, 77.6)
        history_store.save_search.assert_not_called()

    @pytest.mark.asyncio
    async def test_history_failure_does_not_fail_search(self, orchestrator, provider_search, history_store):
        provider_search.nearby_places.return_value = [make_place()]
        history_store.save_search.side_effect = ServiceUnavailableError("Search history storage is not configured")

        facilities = await orchestrator.search_facilities(12.9, 77.6, user_id="user-1")

        assert len(facilities) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(201, json=[{"id": 5, "result_count": "many"}]),
        httpx.Response(201, content=b"not json"),
    ])
    async def test_unreadable_history_reply_does_not_fail_search(self, orchestrator, provider_search, response):
        orchestrator.history_store = HistoryStore(SupabaseRestClient(
            "https://demo.supabase.co", "service-key", transport=httpx.MockTransport(lambda request: response),
        ))
        provider_search.nearby_places.return_value = [make_place()]

        facilities = await orchestrator.search_facilities(12.9, 77.6, user_id="user-1")

        assert len(facilities) == 1


class TestReplaySearch:

    @pytest.mark.asyncio
    async def test_replays_stored_parameters(self, orchestrator, history_store, provider_search):
        stamp = datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)
        history_store.get_search.return_value = HistoryRecord(
            id=7,
            user_id="user-1",
            search_params={"lat": 12.9, "lng": 77.6, "type": "clinic", "speciality": None, "priceRange": "2"},
            result_count=3,
            timestamp=stamp,
        )
        provider_search.search.return_value = [make_provider()]

        result = await orchestrator.replay_search("7")

        history_store.get_search.assert_awaited_once_with("7")
        provider_search.search.assert_awaited_once_with(
            "clinic", type="clinic", specialty=None, lat=12.9, lng=77.6, radius=5000,
        )
        assert len(result.results) == 1
        assert result.timestamp == stamp
        assert result.search_params["priceRange"] == "2"
        history_store.save_search.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_search_id(self, orchestrator, history_store):
        history_store.get_search.side_effect = NotFoundError("Search not found")

        with pytest.raises(NotFoundError):
            await orchestrator.replay_search("404")

    @pytest.mark.asyncio
    async def test_stored_search_without_location(self, orchestrator, history_store):
        history_store.get_search.return_value = HistoryRecord(
            user_id="user-1", search_params={"type": "clinic"}, timestamp=datetime.now(timezone.utc)
        )

        with pytest.raises(InvalidRequestError):
            await orchestrator.replay_search("8")

    @pytest.mark.asyncio
    async def test_replay_failure(self, orchestrator, history_store, provider_search):
        history_store.get_search.return_value = HistoryRecord(
            user_id="user-1", search_params={"lat": 1, "lng": 2}, timestamp=datetime.now(timezone.utc)
        )
        provider_search.search.side_effect = UpstreamError("Failed to search healthcare providers")

        with pytest.raises(UpstreamError) as exc_info:
            await orchestrator.replay_search("9")

        assert exc_info.value.message == "Failed to retrieve historical search results"
