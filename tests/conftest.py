"""Shared pytest fixtures for the encore test suite."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import BaseModel, TypeAdapter

from encore.config.settings import Settings
from encore.interfaces.artwork_provider import IArtworkProvider
from encore.interfaces.collection_store import ICollectionStore, RecordT
from encore.interfaces.identity_provider import ICanonicalIdentityProvider
from encore.interfaces.listening_stats_provider import IListeningStatsProvider
from encore.interfaces.ticketing_provider import ITicketingProvider
from encore.models.artist import Artist, ChartArtist
from encore.models.event import Event
from encore.services.user_service import Session, UserService

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Build Settings with test credentials and no .env file."""
    defaults: dict[str, Any] = {
        "lastfm_api_key": "lastfm-test-key",
        "spotify_client_id": "spotify-id",
        "spotify_client_secret": "spotify-secret",
        "ticketmaster_api_key": "tm-test-key",
        "password_pepper": "test-pepper",
        "bcrypt_rounds": 4,
        "http_timeout": 5.0,
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def json_response(payload: Any, status_code: int = 200, method: str = "GET", url: str = "https://example.test") -> httpx.Response:
    """Build a real httpx.Response carrying *payload* as JSON."""
    return httpx.Response(status_code, json=payload, request=httpx.Request(method, url))


def chart_row(name: str, listeners: int = 0, playcount: int = 0, mbid: str | None = None) -> ChartArtist:
    return ChartArtist(name=name, listeners=listeners, playcount=playcount, mbid=mbid)


def make_event(ticketmaster_id: str = "tm-1", name: str = "Live at the Arena", **overrides: Any) -> Event:
    fields: dict[str, Any] = {
        "ticketmaster_id": ticketmaster_id,
        "name": name,
        "start": datetime(2026, 11, 20, 19, 0, tzinfo=timezone.utc),
        "venue_name": "Helsinki Ice Hall",
        "city": "Helsinki",
        "country": "Finland",
    }
    fields.update(overrides)
    return Event(**fields)


class InMemoryCollectionStore(ICollectionStore):
    """ICollectionStore fake keeping each collection as serialized JSON.

    Records round-trip through JSON like the file store, so callers never
    share object identity with what is stored.
    """

    def __init__(self) -> None:
        self.collections: dict[str, str] = {}
        self.replace_calls: list[str] = []
        self._locks: dict[str, asyncio.Lock] = {}

    def seed(self, collection: str, records: Sequence[BaseModel]) -> None:
        self.collections[collection] = json.dumps([r.model_dump(mode="json") for r in records])

    def raw(self, collection: str) -> list[dict[str, Any]]:
        return json.loads(self.collections.get(collection, "[]"))

    async def load(self, collection: str, record_type: type[RecordT]) -> list[RecordT]:
        raw = self.collections.get(collection)
        if raw is None:
            return []
        return TypeAdapter(list[record_type]).validate_json(raw)

    async def replace(self, collection: str, records: Sequence[BaseModel]) -> None:
        self.replace_calls.append(collection)
        self.seed(collection, records)

    def lock(self, collection: str) -> asyncio.Lock:
        return self._locks.setdefault(collection, asyncio.Lock())


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def memory_store() -> InMemoryCollectionStore:
    return InMemoryCollectionStore()


@pytest.fixture
def mock_http() -> MagicMock:
    """An httpx.AsyncClient stand-in; tests set ``get``/``post`` return values."""
    client = MagicMock(spec=httpx.AsyncClient)
    client.get = AsyncMock()
    client.post = AsyncMock()
    return client


@pytest.fixture
def mock_stats_provider() -> MagicMock:
    provider = MagicMock(spec=IListeningStatsProvider)
    provider.search_artists = AsyncMock(return_value=[])
    provider.get_top_artists = AsyncMock(return_value=[])
    provider.get_top_artists_by_country = AsyncMock(return_value=[])
    provider.get_artist_info = AsyncMock()
    provider.get_artist_top_tracks = AsyncMock(return_value=[])
    provider.get_top_tracks = AsyncMock(return_value=[])
    provider.get_top_tracks_by_country = AsyncMock(return_value=[])
    provider.get_provider_name.return_value = "lastfm"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_identity_provider() -> MagicMock:
    provider = MagicMock(spec=ICanonicalIdentityProvider)
    provider.get_spotify_id = AsyncMock(return_value=None)
    provider.get_provider_name.return_value = "musicbrainz"
    return provider


@pytest.fixture
def mock_artwork_provider() -> MagicMock:
    provider = MagicMock(spec=IArtworkProvider)
    provider.get_artist_profile = AsyncMock()
    provider.get_provider_name.return_value = "spotify"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_ticketing_provider() -> MagicMock:
    provider = MagicMock(spec=ITicketingProvider)
    provider.search_events = AsyncMock(return_value=[])
    provider.search_attractions = AsyncMock(return_value=[])
    provider.get_provider_name.return_value = "ticketmaster"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def user_service(memory_store: InMemoryCollectionStore) -> UserService:
    return UserService(memory_store, Session(), pepper="test-pepper", bcrypt_rounds=4)


@pytest.fixture
def cached_artists() -> list[Artist]:
    """A small artist cache spanning all three enrichment tiers."""
    return [
        Artist(name="Radiohead", listeners=100, playcount=1000),
        Artist(
            name="Nightwish",
            musicbrainz_id="00a9f935-ba93-4fc8-a33a-993abe9c936b",
            listeners=200,
            playcount=2000,
        ),
        Artist(
            name="Sunrise Avenue",
            musicbrainz_id="a8a39e1a-0c6c-4d2c-b4ee-2b0d5a6a1d0d",
            spotify_id="2oSONSC9zQ4UonDKnLqksx",
            spotify_url="https://open.spotify.com/artist/2oSONSC9zQ4UonDKnLqksx",
            profile_picture="https://i.scdn.co/image/sunrise.jpg",
            ticketmaster_id="K8vZ9171o0V",
            listeners=300,
            playcount=3000,
        ),
    ]
