"""MusicBrainz provider implementing ICanonicalIdentityProvider.

Uses the musicbrainzngs library to fetch an artist's URL relations by
MusicBrainz id (mbid) and pick out the linked Spotify artist.  Enforces the
MusicBrainz rate limit of 1 request per second, and runs the blocking
library call in a worker thread.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import musicbrainzngs
import structlog

from encore.config.settings import Settings
from encore.interfaces.identity_provider import ICanonicalIdentityProvider
from encore.utils.errors import ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_SPOTIFY_MARKER = "spotify"


def spotify_id_from_relations(relations: list[dict[str, Any]]) -> str | None:
    """Return the id at the end of the first Spotify URL in *relations*.

    ``https://open.spotify.com/artist/4Z8W4fKeB5YxbusRsdQVPb`` yields
    ``4Z8W4fKeB5YxbusRsdQVPb``.
    """
    for relation in relations:
        target = relation.get("target") or ""
        if _SPOTIFY_MARKER in target:
            tail = target.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
            return tail or None
    return None


class MusicBrainzProvider(ICanonicalIdentityProvider):
    """MusicBrainz identity provider with built-in rate limiting.

    No API key is required, but clients must identify themselves via a
    user-agent string and respect the 1 request/second rate limit.
    """

    _MIN_REQUEST_INTERVAL: float = 1.0  # seconds between requests

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._last_request_time: float = 0.0
        self._throttle_lock = asyncio.Lock()

        musicbrainzngs.set_useragent(
            settings.musicbrainz_app_name,
            settings.musicbrainz_app_version,
            settings.musicbrainz_contact or None,
        )
        logger.info(
            "musicbrainz_provider_initialized",
            app_name=settings.musicbrainz_app_name,
            app_version=settings.musicbrainz_app_version,
        )

    # ------------------------------------------------------------------
    # Rate-limiting helper
    # ------------------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce the MusicBrainz 1 req/sec rate limit across callers."""
        async with self._throttle_lock:
            elapsed = time.monotonic() - self._last_request_time
            if self._last_request_time > 0 and elapsed < self._MIN_REQUEST_INTERVAL:
                await asyncio.sleep(self._MIN_REQUEST_INTERVAL - elapsed)
            self._last_request_time = time.monotonic()

    # ------------------------------------------------------------------
    # ICanonicalIdentityProvider implementation
    # ------------------------------------------------------------------

    async def get_spotify_id(self, canonical_id: str) -> str | None:
        """Look up *canonical_id* and return its linked Spotify artist id."""
        await self._throttle()
        try:
            response = await asyncio.to_thread(
                musicbrainzngs.get_artist_by_id,
                canonical_id,
                includes=["url-rels"],
            )
        except musicbrainzngs.WebServiceError as exc:
            logger.warning("musicbrainz_lookup_failed", mbid=canonical_id, error=str(exc))
            raise ProviderUnavailableError(
                message=f"MusicBrainz lookup failed for '{canonical_id}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        artist = response.get("artist") or {}
        spotify_id = spotify_id_from_relations(artist.get("url-relation-list", []))

        logger.debug(
            "musicbrainz_spotify_link",
            mbid=canonical_id,
            spotify_id=spotify_id,
        )
        return spotify_id

    def get_provider_name(self) -> str:
        return "musicbrainz"
