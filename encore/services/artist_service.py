"""Artist aggregation service -- search, charts, detail and favourites.

# ─── MERGE PIPELINE ──────────────────────────────────────────────────
#
# Search and chart results from the listening-stats provider are merged
# into the ``artists`` collection, which is keyed by display name:
#
#   1. CACHE HIT   -- a record with the same name exists: only its
#                     listener and play counts are overwritten.  The
#                     identity chain is never touched again.
#   2. CACHE MISS  -- the name is new: enrich it once.
#        no mbid             -> NAME_ONLY record
#        mbid, no Spotify id -> CANONICAL record (MusicBrainz only)
#        mbid + Spotify id   -> ARTWORK record (profile URL + avatar)
#      Any failing enrichment step degrades to the tier below it.
#   3. Results are returned in provider order, hits and misses alike.
#
# Enrichment calls are made before the artists lock is taken.  The
# collection is then reloaded under the lock so a concurrent writer's
# records are kept, and a name that appeared meanwhile is treated as a
# hit.
#
# Known limitation: two different artists sharing a display name are
# merged into one record.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

import structlog

from encore.interfaces.artwork_provider import IArtworkProvider
from encore.interfaces.collection_store import ICollectionStore
from encore.interfaces.identity_provider import ICanonicalIdentityProvider
from encore.interfaces.listening_stats_provider import IListeningStatsProvider
from encore.models.artist import Artist, ChartArtist, ChartMetric
from encore.providers.store.repository import CollectionRepository
from encore.services.user_service import UserService
from encore.utils.errors import NotFoundError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

ARTISTS_COLLECTION = "artists"


def artist_repository(store: ICollectionStore) -> CollectionRepository[Artist]:
    """Repository over the shared artist cache, keyed by display name."""
    return CollectionRepository(store, ARTISTS_COLLECTION, Artist, key=lambda artist: artist.name)


class ArtistService:
    """Cache-aware artist lookups across the listening-stats, identity and
    artwork providers.

    Parameters
    ----------
    store:
        Collection store holding the ``artists`` collection.
    stats_provider:
        Source of search results, charts and artist details.
    identity_provider:
        Resolves a MusicBrainz id to a Spotify id.
    artwork_provider:
        Resolves a Spotify id to a profile URL and avatar.
    user_service:
        Supplies the signed-in user for favourites.
    config:
        Resolved configuration; the ``lastfm`` section sets result limits.
    """

    def __init__(
        self,
        store: ICollectionStore,
        stats_provider: IListeningStatsProvider,
        identity_provider: ICanonicalIdentityProvider,
        artwork_provider: IArtworkProvider,
        user_service: UserService,
        config: dict[str, Any] | None = None,
    ) -> None:
        self._artists = artist_repository(store)
        self._stats = stats_provider
        self._identity = identity_provider
        self._artwork = artwork_provider
        self._users = user_service

        lastfm = (config or {}).get("lastfm", {})
        self._search_limit = int(lastfm.get("search_limit", 6))
        self._chart_fetch_limit = int(lastfm.get("chart_fetch_limit", 50))
        self._chart_top_n = int(lastfm.get("chart_top_n", 10))
        self._top_tracks_limit = int(lastfm.get("top_tracks_limit", 10))

    # ------------------------------------------------------------------
    # Search and charts
    # ------------------------------------------------------------------

    async def search_by_keyword(self, key: str) -> list[Artist]:
        """Search artists by *key* and merge the results into the cache.

        Returns an empty list when the provider is unavailable.
        """
        try:
            rows = await self._stats.search_artists(key, limit=self._search_limit)
        except ProviderUnavailableError as exc:
            logger.warning("artist_search_failed", keyword=key, error=str(exc))
            return []
        return await self._merge(rows)

    async def top_chart(self, sort_by: ChartMetric | str = ChartMetric.LISTENERS) -> list[Artist]:
        """Return the global top artists ordered by *sort_by*.

        Raises:
            ValueError: If *sort_by* is not ``"listeners"`` or ``"playcount"``.
        """
        metric = ChartMetric(sort_by)
        try:
            rows = await self._stats.get_top_artists(
                metric, fetch_limit=self._chart_fetch_limit, top_n=self._chart_top_n
            )
        except ProviderUnavailableError as exc:
            logger.warning("artist_chart_failed", sort_by=metric.value, error=str(exc))
            return []
        return await self._merge(rows)

    async def top_by_country(self, country: str) -> list[Artist]:
        """Return the top artists in *country*, ordered by listeners."""
        try:
            rows = await self._stats.get_top_artists_by_country(
                country, fetch_limit=self._chart_fetch_limit, top_n=self._chart_top_n
            )
        except ProviderUnavailableError as exc:
            logger.warning("artist_country_chart_failed", country=country, error=str(exc))
            return []
        return await self._merge(rows)

    # ------------------------------------------------------------------
    # Detail
    # ------------------------------------------------------------------

    async def get_by_name(self, name: str) -> Artist:
        """Refresh a cached artist's stats, biography and top tracks.

        The artist must already be cached by an earlier search or chart.
        When the provider is unavailable the cached record is returned
        as it is.

        Raises:
            NotFoundError: If *name* is not in the cache.
        """
        cached = await self._artists.get(name)
        if cached is None:
            raise NotFoundError(f"Artist {name} not found")

        try:
            stats = await self._stats.get_artist_info(name)
            tracks = await self._stats.get_artist_top_tracks(name, limit=self._top_tracks_limit)
        except ProviderUnavailableError as exc:
            logger.warning("artist_detail_refresh_failed", artist=name, error=str(exc))
            return cached

        async with self._artists.mutate() as artists:
            artist = next((a for a in artists if a.name == name), None)
            if artist is None:
                raise NotFoundError(f"Artist {name} not found")
            artist.listeners = stats.listeners
            artist.playcount = stats.playcount
            artist.bio = stats.bio
            artist.top_tracks = tracks

        logger.debug("artist_detail_refreshed", artist=name, tracks=len(tracks))
        return artist

    # ------------------------------------------------------------------
    # Favourites
    # ------------------------------------------------------------------

    async def add_favorite(self, name: str) -> None:
        """Add the cached artist *name* to the signed-in user's favourites.

        Adding an artist that is already a favourite changes nothing.

        Raises:
            NotLoggedInError: If nobody is signed in.
            NotFoundError: If *name* is not in the cache.
        """
        await self._users.require_current_user()
        artist = await self._require_cached(name)
        async with self._users.modify_current_user() as user:
            if artist.id not in user.favorite_artist_ids:
                user.favorite_artist_ids.append(artist.id)
        logger.info("favorite_artist_added", artist=name)

    async def remove_favorite(self, name: str) -> None:
        """Remove the cached artist *name* from the signed-in user's favourites.

        Raises:
            NotLoggedInError: If nobody is signed in.
            NotFoundError: If *name* is not in the cache.
        """
        await self._users.require_current_user()
        artist = await self._require_cached(name)
        async with self._users.modify_current_user() as user:
            user.favorite_artist_ids = [i for i in user.favorite_artist_ids if i != artist.id]
        logger.info("favorite_artist_removed", artist=name)

    async def get_favorites(self) -> list[Artist]:
        """Return the signed-in user's favourite artists in the order added."""
        user = await self._users.require_current_user()
        by_id = {artist.id: artist for artist in await self._artists.all()}
        return [by_id[i] for i in user.favorite_artist_ids if i in by_id]

    async def _require_cached(self, name: str) -> Artist:
        artist = await self._artists.get(name)
        if artist is None:
            raise NotFoundError(f"Artist {name} not found")
        return artist

    # ------------------------------------------------------------------
    # Merge pipeline
    # ------------------------------------------------------------------

    async def _merge(self, rows: list[ChartArtist]) -> list[Artist]:
        known = {artist.name for artist in await self._artists.all()}

        enriched: dict[str, Artist] = {}
        for row in rows:
            if row.name in known or row.name in enriched:
                continue
            enriched[row.name] = await self._enrich(row)

        results: list[Artist] = []
        async with self._artists.mutate() as artists:
            by_name: dict[str, Artist] = {}
            for artist in artists:
                by_name.setdefault(artist.name, artist)

            for row in rows:
                artist = by_name.get(row.name)
                if artist is not None:
                    artist.listeners = row.listeners
                    artist.playcount = row.playcount
                else:
                    artist = enriched.get(row.name) or _name_only(row)
                    artists.append(artist)
                    by_name[row.name] = artist
                results.append(artist)

        logger.info(
            "artists_merged",
            results=len(results),
            new=sum(1 for row in rows if row.name not in known),
        )
        return results

    async def _enrich(self, row: ChartArtist) -> Artist:
        """Build a new record for *row*, resolving as far up the identity
        chain as the providers allow."""
        if row.mbid is None:
            return _name_only(row)

        canonical = Artist(
            name=row.name,
            listeners=row.listeners,
            playcount=row.playcount,
            musicbrainz_id=row.mbid,
        )

        try:
            spotify_id = await self._identity.get_spotify_id(row.mbid)
        except ProviderUnavailableError as exc:
            logger.warning("identity_lookup_failed", artist=row.name, mbid=row.mbid, error=str(exc))
            return canonical
        if not spotify_id:
            return canonical

        try:
            profile = await self._artwork.get_artist_profile(spotify_id)
        except ProviderUnavailableError as exc:
            logger.warning("artwork_lookup_failed", artist=row.name, spotify_id=spotify_id, error=str(exc))
            return canonical

        logger.debug("artist_enriched", artist=row.name, spotify_id=spotify_id)
        return canonical.model_copy(
            update={
                "spotify_id": spotify_id,
                "spotify_url": profile.spotify_url,
                "profile_picture": profile.profile_picture,
            }
        )


def _name_only(row: ChartArtist) -> Artist:
    return Artist(name=row.name, listeners=row.listeners, playcount=row.playcount)
