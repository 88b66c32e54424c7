"""Abstract base class for listening-statistics providers (e.g. Last.fm).

Covers keyword search, global and per-country charts, per-artist detail
and top tracks.  Charts are fetched in bulk and ordered client-side
because the provider's own ordering is not by the requested metric.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from encore.models.artist import ArtistStats, ChartArtist, ChartMetric, Track


class IListeningStatsProvider(ABC):
    """Contract for chart and popularity lookups."""

    @abstractmethod
    async def search_artists(self, keyword: str, limit: int = 6) -> list[ChartArtist]:
        """Search artists by free-text *keyword*, at most *limit* rows.

        Raises
        ------
        encore.utils.errors.ProviderUnavailableError
            On network failure or an unusable response.
        """

    @abstractmethod
    async def get_top_artists(
        self, sort_by: ChartMetric, fetch_limit: int = 50, top_n: int = 10
    ) -> list[ChartArtist]:
        """Return the global chart ordered descending by *sort_by*.

        Parameters
        ----------
        sort_by:
            Metric to order by.
        fetch_limit:
            Raw rows requested from the provider.
        top_n:
            Rows kept after sorting.
        """

    @abstractmethod
    async def get_top_artists_by_country(
        self, country: str, fetch_limit: int = 50, top_n: int = 10
    ) -> list[ChartArtist]:
        """Return the chart for *country*, ordered descending by listeners."""

    @abstractmethod
    async def get_artist_info(self, name: str) -> ArtistStats:
        """Return listeners, play count and biography for the artist *name*."""

    @abstractmethod
    async def get_artist_top_tracks(self, name: str, limit: int = 10) -> list[Track]:
        """Return the artist's most played tracks in provider order."""

    @abstractmethod
    async def get_top_tracks(
        self, sort_by: ChartMetric, fetch_limit: int = 50, top_n: int = 10
    ) -> list[Track]:
        """Return the global track chart ordered descending by *sort_by*."""

    @abstractmethod
    async def get_top_tracks_by_country(
        self, country: str, fetch_limit: int = 50, top_n: int = 10
    ) -> list[Track]:
        """Return the track chart for *country*, ordered descending by listeners."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"lastfm"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
