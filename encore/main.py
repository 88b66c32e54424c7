"""encore FastAPI application entry point.

Wires providers, the collection store and services together via
constructor injection.  Configuration comes from ``.env`` / environment
(:class:`Settings`) and ``config/config.yaml`` (:func:`load_config`).

``build_components`` is also used by the CLI, which is why logging is
configured at startup rather than at import time: the CLI sends its logs
to stderr and must not be reconfigured by importing this module.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from encore.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from encore.api.routes import router as api_router
from encore.config.loader import load_config
from encore.config.settings import Settings
from encore.providers.lastfm.lastfm_provider import LastFmProvider
from encore.providers.musicbrainz.musicbrainz_provider import MusicBrainzProvider
from encore.providers.spotify.spotify_provider import SpotifyProvider
from encore.providers.store.json_collection_store import JsonCollectionStore
from encore.providers.ticketmaster.ticketmaster_provider import TicketmasterProvider
from encore.services.artist_service import ArtistService
from encore.services.event_service import EventService
from encore.services.track_service import TrackService
from encore.services.user_service import Session, UserService
from encore.utils.countries import load_countries
from encore.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

settings = Settings()
config = load_config(settings=settings)

_logger: structlog.BoundLogger = get_logger(__name__)


def build_components(
    app_settings: Settings,
    app_config: dict[str, Any],
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Construct every provider and service.

    Returns a flat dict of named components, stored on ``app.state`` by
    the server.  The caller owns ``http_client`` and must close it.
    """
    http_client = http_client or httpx.AsyncClient(timeout=app_settings.http_timeout)
    store = JsonCollectionStore(app_settings.data_dir)

    lastfm = LastFmProvider(settings=app_settings, http_client=http_client)
    musicbrainz = MusicBrainzProvider(settings=app_settings)
    spotify = SpotifyProvider(settings=app_settings, http_client=http_client, store=store)
    ticketmaster = TicketmasterProvider(
        settings=app_settings,
        http_client=http_client,
        page_size=int(app_config.get("ticketmaster", {}).get("page_size", 20)),
    )

    user_service = UserService(
        store=store,
        session=Session(),
        pepper=app_settings.password_pepper,
        bcrypt_rounds=app_settings.bcrypt_rounds,
    )
    artist_service = ArtistService(
        store=store,
        stats_provider=lastfm,
        identity_provider=musicbrainz,
        artwork_provider=spotify,
        user_service=user_service,
        config=app_config,
    )
    event_service = EventService(
        store=store,
        ticketing_provider=ticketmaster,
        user_service=user_service,
        config=app_config,
    )
    track_service = TrackService(stats_provider=lastfm, config=app_config)

    configured = set(app_settings.get_configured_providers())
    provider_registry = {
        provider.get_provider_name(): provider.get_provider_name() in configured
        for provider in (lastfm, musicbrainz, spotify, ticketmaster)
    }

    return {
        "http_client": http_client,
        "store": store,
        "lastfm": lastfm,
        "musicbrainz": musicbrainz,
        "spotify": spotify,
        "ticketmaster": ticketmaster,
        "user_service": user_service,
        "artist_service": artist_service,
        "event_service": event_service,
        "track_service": track_service,
        "provider_registry": provider_registry,
        "countries": load_countries(app_settings.countries_path),
    }


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build components on startup, close the shared HTTP client on shutdown."""
    configure_logging(
        log_level=settings.log_level,
        json_output=(settings.app_env == "production"),
    )
    components = build_components(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["user_service"].restore_session()

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        data_dir=settings.data_dir,
        providers=components["provider_registry"],
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="encore API",
        version=_VERSION,
        description=(
            "Artist search and charts from Last.fm, enriched once per artist "
            "with MusicBrainz and Spotify data and cached locally, plus "
            "Ticketmaster concert listings."
        ),
        lifespan=_lifespan,
    )

    # Last added runs first.
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "encore.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
