"""Integration tests for the encore HTTP API using TestClient.

The app is assembled from the real router, middleware and services over
an in-memory collection store; only the external providers are mocked.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from encore.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from encore.api.routes import router as api_router
from encore.models.artist import ArtistStats, Track
from encore.services.artist_service import ArtistService
from encore.services.event_service import EventService
from encore.services.track_service import TrackService
from encore.services.user_service import Session, UserService
from encore.utils.errors import ProviderUnavailableError
from tests.conftest import InMemoryCollectionStore, chart_row, make_event


def _create_test_app(
    stats: MagicMock,
    identity: MagicMock,
    artwork: MagicMock,
    ticketing: MagicMock,
    provider_registry: dict[str, bool] | None = None,
) -> FastAPI:
    store = InMemoryCollectionStore()
    users = UserService(store, Session(), pepper="test-pepper", bcrypt_rounds=4)

    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router)

    app.state.user_service = users
    app.state.artist_service = ArtistService(store, stats, identity, artwork, users)
    app.state.event_service = EventService(store, ticketing, users)
    app.state.track_service = TrackService(stats)
    app.state.countries = {"FI": "Finland", "SE": "Sweden"}
    app.state.provider_registry = provider_registry or {
        "lastfm": True,
        "musicbrainz": True,
        "spotify": True,
        "ticketmaster": True,
    }
    return app


@pytest.fixture
def client(mock_stats_provider, mock_identity_provider, mock_artwork_provider, mock_ticketing_provider) -> TestClient:
    app = _create_test_app(
        mock_stats_provider, mock_identity_provider, mock_artwork_provider, mock_ticketing_provider
    )
    return TestClient(app)


def _sign_up(client: TestClient, username: str = "maija", password: str = "secret") -> dict:
    response = client.post("/api/v1/auth/signup", json={"username": username, "password": password})
    assert response.status_code == 201
    return response.json()


class TestArtistEndpoints:
    def test_search_merges_into_cache(self, client, mock_stats_provider) -> None:
        mock_stats_provider.search_artists.return_value = [chart_row("Radiohead", 500_000, 9_000_000)]

        response = client.get("/api/v1/artists/search", params={"q": "radiohead"})

        assert response.status_code == 200
        [artist] = response.json()["artists"]
        assert artist["name"] == "Radiohead"
        assert artist["playcount"] == 9_000_000
        assert artist["profile_picture"] == "/images/music-note.png"

    def test_search_requires_query(self, client) -> None:
        assert client.get("/api/v1/artists/search").status_code == 422

    def test_provider_down_gives_empty_list(self, client, mock_stats_provider) -> None:
        mock_stats_provider.search_artists.side_effect = ProviderUnavailableError("down", provider_name="lastfm")

        response = client.get("/api/v1/artists/search", params={"q": "radiohead"})

        assert response.status_code == 200
        assert response.json() == {"artists": []}

    def test_chart_rejects_unknown_metric(self, client) -> None:
        assert client.get("/api/v1/artists/chart", params={"sort_by": "popularity"}).status_code == 422

    def test_chart_by_playcount(self, client, mock_stats_provider) -> None:
        mock_stats_provider.get_top_artists.return_value = [chart_row("Big", playcount=2**40)]

        response = client.get("/api/v1/artists/chart", params={"sort_by": "playcount"})

        assert response.json()["artists"][0]["playcount"] == 2**40

    def test_unknown_artist_detail_is_404(self, client) -> None:
        response = client.get("/api/v1/artists/Nobody")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFoundError"

    def test_detail_after_search(self, client, mock_stats_provider) -> None:
        mock_stats_provider.search_artists.return_value = [chart_row("Radiohead", 1, 2)]
        mock_stats_provider.get_artist_info.return_value = ArtistStats(listeners=3, playcount=4, bio="Bio")
        mock_stats_provider.get_artist_top_tracks.return_value = [Track(name="Creep")]
        client.get("/api/v1/artists/search", params={"q": "radiohead"})

        response = client.get("/api/v1/artists/Radiohead")

        assert response.status_code == 200
        body = response.json()
        assert body["bio"] == "Bio"
        assert body["top_tracks"][0]["name"] == "Creep"

    def test_artist_events(self, client, mock_ticketing_provider) -> None:
        mock_ticketing_provider.search_events.return_value = [make_event("tm-42")]

        response = client.get("/api/v1/artists/Unknown Band/events")

        assert response.status_code == 200
        assert response.json()["events"][0]["ticketmaster_id"] == "tm-42"

    def test_name_with_slash(self, client, mock_stats_provider, mock_ticketing_provider) -> None:
        mock_stats_provider.search_artists.return_value = [chart_row("AC/DC", 1, 2)]
        mock_stats_provider.get_artist_info.return_value = ArtistStats(listeners=3, playcount=4)
        client.get("/api/v1/artists/search", params={"q": "acdc"})

        detail = client.get("/api/v1/artists/AC/DC")
        events = client.get("/api/v1/artists/AC/DC/events")

        assert detail.status_code == 200
        assert detail.json()["name"] == "AC/DC"
        mock_stats_provider.get_artist_info.assert_awaited_once_with("AC/DC")
        assert events.status_code == 200
        mock_ticketing_provider.search_events.assert_awaited_once_with(keyword="AC/DC")


class TestAuthEndpoints:
    def test_signup_login_logout_flow(self, client) -> None:
        created = _sign_up(client)
        assert "password_hash" not in created

        assert client.get("/api/v1/auth/me").json()["username"] == "maija"
        assert client.post("/api/v1/auth/logout").status_code == 204
        assert client.get("/api/v1/auth/me").status_code == 401

        response = client.post("/api/v1/auth/login", json={"username": "maija", "password": "secret"})
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_duplicate_signup_is_409(self, client) -> None:
        _sign_up(client)
        response = client.post("/api/v1/auth/signup", json={"username": "maija", "password": "x"})
        assert response.status_code == 409

    def test_bad_password_is_401(self, client) -> None:
        _sign_up(client)
        client.post("/api/v1/auth/logout")

        response = client.post("/api/v1/auth/login", json={"username": "maija", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    def test_blank_username_is_422(self, client) -> None:
        response = client.post("/api/v1/auth/signup", json={"username": "   ", "password": "x"})
        assert response.status_code == 422

    def test_logout_without_session_is_401(self, client) -> None:
        assert client.post("/api/v1/auth/logout").status_code == 401


class TestFavoriteEndpoints:
    def test_favorites_require_login(self, client) -> None:
        response = client.put("/api/v1/me/favorites/artists/Radiohead")

        assert response.status_code == 401
        assert response.json()["error"] == "NotLoggedInError"

    def test_favorite_artist_round_trip(self, client, mock_stats_provider) -> None:
        mock_stats_provider.search_artists.return_value = [chart_row("Radiohead")]
        client.get("/api/v1/artists/search", params={"q": "radiohead"})
        _sign_up(client)

        assert client.put("/api/v1/me/favorites/artists/Radiohead").status_code == 204
        assert client.put("/api/v1/me/favorites/artists/Radiohead").status_code == 204
        names = [a["name"] for a in client.get("/api/v1/me/favorites/artists").json()["artists"]]
        assert names == ["Radiohead"]

        assert client.delete("/api/v1/me/favorites/artists/Radiohead").status_code == 204
        assert client.get("/api/v1/me/favorites/artists").json() == {"artists": []}

    def test_favorite_name_with_slash(self, client, mock_stats_provider) -> None:
        mock_stats_provider.search_artists.return_value = [chart_row("AC/DC")]
        client.get("/api/v1/artists/search", params={"q": "acdc"})
        _sign_up(client)

        assert client.put("/api/v1/me/favorites/artists/AC/DC").status_code == 204
        names = [a["name"] for a in client.get("/api/v1/me/favorites/artists").json()["artists"]]
        assert names == ["AC/DC"]

    def test_favorite_uncached_artist_is_404(self, client) -> None:
        _sign_up(client)
        assert client.put("/api/v1/me/favorites/artists/Nobody").status_code == 404

    def test_favorite_events(self, client) -> None:
        _sign_up(client)
        event = make_event("tm-7").model_dump(mode="json")

        assert client.post("/api/v1/me/favorites/events", json=event).status_code == 204
        assert client.post("/api/v1/me/favorites/events", json=event).status_code == 204
        saved = client.get("/api/v1/me/favorites/events").json()["events"]
        assert [e["ticketmaster_id"] for e in saved] == ["tm-7"]

        assert client.delete("/api/v1/me/favorites/events/tm-7").status_code == 204
        assert client.delete("/api/v1/me/favorites/events/tm-7").status_code == 404

    def test_recent_locations(self, client) -> None:
        _sign_up(client)

        client.post("/api/v1/me/locations", json={"city": "Helsinki", "country": "Finland"})
        response = client.post("/api/v1/me/locations", json={"country": "Sweden"})

        assert response.json()["locations"] == ["Country: Sweden", "City: Helsinki, Country: Finland"]


class TestReferenceEndpoints:
    def test_countries(self, client) -> None:
        assert client.get("/api/v1/countries").json() == {"countries": {"FI": "Finland", "SE": "Sweden"}}

    def test_events_by_location(self, client, mock_ticketing_provider) -> None:
        client.get("/api/v1/events", params={"country": "FI", "city": "Helsinki"})
        mock_ticketing_provider.search_events.assert_awaited_once_with(country_code="FI", city="Helsinki")

    def test_track_chart(self, client, mock_stats_provider) -> None:
        mock_stats_provider.get_top_tracks.return_value = [Track(name="Creep", playcount=9)]
        assert client.get("/api/v1/tracks/chart").json()["tracks"][0]["name"] == "Creep"

    def test_health_all_configured(self, client) -> None:
        body = client.get("/api/v1/health").json()
        assert body["status"] == "healthy"
        assert body["version"] == "0.1.0"

    def test_health_degraded(
        self, mock_stats_provider, mock_identity_provider, mock_artwork_provider, mock_ticketing_provider
    ) -> None:
        app = _create_test_app(
            mock_stats_provider,
            mock_identity_provider,
            mock_artwork_provider,
            mock_ticketing_provider,
            provider_registry={"lastfm": True, "spotify": False},
        )
        assert TestClient(app).get("/api/v1/health").json()["status"] == "degraded"
