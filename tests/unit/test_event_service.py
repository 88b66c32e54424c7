"""Unit tests for EventService -- three-tier artist lookup and user bookkeeping."""

from __future__ import annotations

import pytest
import pytest_asyncio

from encore.models.artist import Artist
from encore.models.event import Attraction
from encore.services.artist_service import ARTISTS_COLLECTION
from encore.services.event_service import EventService, location_label
from encore.utils.errors import NotLoggedInError, ProviderUnavailableError
from tests.conftest import make_event

_NIGHTWISH_MBID = "00a9f935-ba93-4fc8-a33a-993abe9c936b"


@pytest.fixture
def service(memory_store, mock_ticketing_provider, user_service) -> EventService:
    return EventService(memory_store, mock_ticketing_provider, user_service)


@pytest_asyncio.fixture
async def signed_in(user_service):
    return await user_service.sign_up("maija", "secret")


class TestLocationLabel:
    @pytest.mark.parametrize(
        ("city", "country", "expected"),
        [
            ("Helsinki", "Finland", "City: Helsinki, Country: Finland"),
            ("Helsinki", "", "City: Helsinki"),
            (None, "Finland", "Country: Finland"),
            ("  Tampere ", None, "City: Tampere"),
            ("", "   ", None),
            (None, None, None),
        ],
    )
    def test_label(self, city, country, expected) -> None:
        assert location_label(city, country) == expected


class TestEventsByArtist:
    @pytest.mark.asyncio
    async def test_cached_attraction_id_used_directly(
        self, service, memory_store, cached_artists, mock_ticketing_provider
    ) -> None:
        memory_store.seed(ARTISTS_COLLECTION, cached_artists)
        mock_ticketing_provider.search_events.return_value = [make_event()]

        events = await service.get_events_by_artist("Sunrise Avenue")

        assert events == [make_event()]
        mock_ticketing_provider.search_events.assert_awaited_once_with(attraction_id="K8vZ9171o0V")
        mock_ticketing_provider.search_attractions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mbid_match_resolves_and_caches_attraction(
        self, service, memory_store, cached_artists, mock_ticketing_provider
    ) -> None:
        memory_store.seed(ARTISTS_COLLECTION, cached_artists)
        mock_ticketing_provider.search_attractions.return_value = [
            Attraction(id="K8vZ-tribute", name="Nightwish Tribute", musicbrainz_id=None),
            Attraction(id="K8vZ917G7x0", name="Nightwish", musicbrainz_id=_NIGHTWISH_MBID),
        ]
        mock_ticketing_provider.search_events.return_value = [make_event("tm-nw")]

        events = await service.get_events_by_artist("Nightwish")

        assert [e.ticketmaster_id for e in events] == ["tm-nw"]
        mock_ticketing_provider.search_attractions.assert_awaited_once_with("Nightwish")
        mock_ticketing_provider.search_events.assert_awaited_once_with(attraction_id="K8vZ917G7x0")
        stored = await memory_store.load(ARTISTS_COLLECTION, Artist)
        nightwish = next(a for a in stored if a.name == "Nightwish")
        assert nightwish.ticketmaster_id == "K8vZ917G7x0"

    @pytest.mark.asyncio
    async def test_second_lookup_skips_attraction_search(
        self, service, memory_store, cached_artists, mock_ticketing_provider
    ) -> None:
        memory_store.seed(ARTISTS_COLLECTION, cached_artists)
        mock_ticketing_provider.search_attractions.return_value = [
            Attraction(id="K8vZ917G7x0", name="Nightwish", musicbrainz_id=_NIGHTWISH_MBID),
        ]

        await service.get_events_by_artist("Nightwish")
        await service.get_events_by_artist("Nightwish")

        assert mock_ticketing_provider.search_attractions.await_count == 1

    @pytest.mark.asyncio
    async def test_no_matching_attraction_falls_back_to_keyword(
        self, service, memory_store, cached_artists, mock_ticketing_provider
    ) -> None:
        memory_store.seed(ARTISTS_COLLECTION, cached_artists)
        mock_ticketing_provider.search_attractions.return_value = [
            Attraction(id="K8vZ-other", name="Nightwish", musicbrainz_id="another-mbid"),
        ]

        await service.get_events_by_artist("Nightwish")

        mock_ticketing_provider.search_events.assert_awaited_once_with(keyword="Nightwish")
        stored = await memory_store.load(ARTISTS_COLLECTION, Artist)
        assert next(a for a in stored if a.name == "Nightwish").ticketmaster_id is None

    @pytest.mark.asyncio
    async def test_attraction_failure_falls_back_to_keyword(
        self, service, memory_store, cached_artists, mock_ticketing_provider
    ) -> None:
        memory_store.seed(ARTISTS_COLLECTION, cached_artists)
        mock_ticketing_provider.search_attractions.side_effect = ProviderUnavailableError("down")

        await service.get_events_by_artist("Nightwish")

        mock_ticketing_provider.search_events.assert_awaited_once_with(keyword="Nightwish")

    @pytest.mark.asyncio
    async def test_name_only_artist_uses_keyword(
        self, service, memory_store, cached_artists, mock_ticketing_provider
    ) -> None:
        memory_store.seed(ARTISTS_COLLECTION, cached_artists)

        await service.get_events_by_artist("Radiohead")

        mock_ticketing_provider.search_attractions.assert_not_awaited()
        mock_ticketing_provider.search_events.assert_awaited_once_with(keyword="Radiohead")

    @pytest.mark.asyncio
    async def test_uncached_artist_uses_keyword(self, service, mock_ticketing_provider) -> None:
        await service.get_events_by_artist("Unknown Band")
        mock_ticketing_provider.search_events.assert_awaited_once_with(keyword="Unknown Band")

    @pytest.mark.asyncio
    async def test_search_failure_returns_empty(self, service, mock_ticketing_provider) -> None:
        mock_ticketing_provider.search_events.side_effect = ProviderUnavailableError("down")
        assert await service.get_events_by_artist("Anyone") == []


class TestEventsByLocation:
    @pytest.mark.asyncio
    async def test_filters_forwarded(self, service, mock_ticketing_provider) -> None:
        mock_ticketing_provider.search_events.return_value = [make_event()]

        events = await service.get_events_by_location("FI", "Helsinki")

        assert len(events) == 1
        mock_ticketing_provider.search_events.assert_awaited_once_with(country_code="FI", city="Helsinki")

    @pytest.mark.asyncio
    async def test_failure_returns_empty(self, service, mock_ticketing_provider) -> None:
        mock_ticketing_provider.search_events.side_effect = ProviderUnavailableError("down")
        assert await service.get_events_by_location("FI", None) == []


class TestFavoriteEvents:
    @pytest.mark.asyncio
    async def test_requires_login(self, service) -> None:
        with pytest.raises(NotLoggedInError):
            await service.add_favorite_event(make_event())
        with pytest.raises(NotLoggedInError):
            await service.get_favorite_events()

    @pytest.mark.asyncio
    async def test_same_ticketmaster_id_saved_once(self, service, signed_in) -> None:
        await service.add_favorite_event(make_event("tm-1"))
        await service.add_favorite_event(make_event("tm-1", name="Renamed listing"))
        await service.add_favorite_event(make_event("tm-2"))

        favorites = await service.get_favorite_events()

        assert [e.ticketmaster_id for e in favorites] == ["tm-1", "tm-2"]
        assert favorites[0].name == "Live at the Arena"

    @pytest.mark.asyncio
    async def test_remove(self, service, signed_in) -> None:
        await service.add_favorite_event(make_event("tm-1"))
        await service.add_favorite_event(make_event("tm-2"))

        await service.remove_favorite_event(make_event("tm-1"))

        assert [e.ticketmaster_id for e in await service.get_favorite_events()] == ["tm-2"]

    @pytest.mark.asyncio
    async def test_favorites_persist_on_user_record(self, service, signed_in, user_service) -> None:
        await service.add_favorite_event(make_event("tm-9"))
        user = await user_service.require_current_user()
        assert [e.ticketmaster_id for e in user.favorite_events] == ["tm-9"]


class TestRecentLocations:
    @pytest.mark.asyncio
    async def test_most_recent_first(self, service, signed_in) -> None:
        await service.add_recent_location("Helsinki", "Finland")
        await service.add_recent_location(None, "Sweden")

        assert await service.get_recent_locations() == [
            "Country: Sweden",
            "City: Helsinki, Country: Finland",
        ]

    @pytest.mark.asyncio
    async def test_repeat_moves_to_front(self, service, signed_in) -> None:
        await service.add_recent_location("Helsinki", None)
        await service.add_recent_location("Oulu", None)
        await service.add_recent_location("Helsinki", None)

        assert await service.get_recent_locations() == ["City: Helsinki", "City: Oulu"]

    @pytest.mark.asyncio
    async def test_blank_is_noop(self, service, signed_in) -> None:
        await service.add_recent_location("Helsinki", None)
        await service.add_recent_location("  ", "")
        assert await service.get_recent_locations() == ["City: Helsinki"]

    @pytest.mark.asyncio
    async def test_capped_at_twenty(self, service, signed_in) -> None:
        for i in range(25):
            await service.add_recent_location(f"City{i}", None)

        history = await service.get_recent_locations()

        assert len(history) == 20
        assert history[0] == "City: City24"
        assert history[-1] == "City: City5"

    @pytest.mark.asyncio
    async def test_cap_is_configurable(self, memory_store, mock_ticketing_provider, user_service) -> None:
        service = EventService(
            memory_store, mock_ticketing_provider, user_service, config={"users": {"recent_locations_cap": 2}}
        )
        await user_service.sign_up("maija", "secret")
        for city in ("A", "B", "C"):
            await service.add_recent_location(city, None)

        assert await service.get_recent_locations() == ["City: C", "City: B"]

    @pytest.mark.asyncio
    async def test_requires_login(self, service) -> None:
        with pytest.raises(NotLoggedInError):
            await service.add_recent_location("Helsinki", None)
        with pytest.raises(NotLoggedInError):
            await service.add_recent_location("", "")
        with pytest.raises(NotLoggedInError):
            await service.get_recent_locations()
