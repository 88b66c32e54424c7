"""Last.fm provider implementing IListeningStatsProvider.

Talks to the Last.fm 2.0 REST API (``?method=...&format=json``) through an
injected ``httpx.AsyncClient``.  Last.fm reports numbers as strings and
omits fields per endpoint (search rows have no play count, geo charts have
no play count), so parsing defaults missing counts to zero.  The global
chart endpoints are not ordered by the metric callers ask for, so the
client fetches a wide page and sorts and truncates locally.
"""

from __future__ import annotations

from operator import attrgetter
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from encore.config.settings import Settings
from encore.interfaces.listening_stats_provider import IListeningStatsProvider
from encore.models.artist import ArtistStats, ChartArtist, ChartMetric, Track
from encore.utils.errors import ProviderUnavailableError
from encore.utils.logging import get_logger

_RowT = TypeVar("_RowT", ChartArtist, Track)


def top_by_metric(rows: list[_RowT], metric: ChartMetric, top_n: int) -> list[_RowT]:
    """Sort *rows* descending by *metric* and keep the first *top_n*.

    The sort is stable, so rows with equal values keep provider order.
    """
    return sorted(rows, key=attrgetter(metric.value), reverse=True)[:top_n]


class LastFmProvider(IListeningStatsProvider):
    """Listening-statistics provider backed by the Last.fm API.

    Parameters
    ----------
    settings:
        Supplies the API key, base URL and request timeout.
    http_client:
        Shared ``httpx.AsyncClient``; owned and closed by the caller.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http_client
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    async def _call(self, method: str, limit: int, **params: str) -> dict[str, Any]:
        """Call *method* and return the decoded JSON object."""
        query: dict[str, str | int] = {
            "method": method,
            **params,
            "limit": limit,
            "api_key": self._settings.lastfm_api_key,
            "format": "json",
        }
        try:
            response = await self._http.get(
                self._settings.lastfm_base_url,
                params=query,
                timeout=self._settings.http_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._logger.warning("lastfm_request_failed", method=method, error=str(exc))
            raise ProviderUnavailableError(
                message=f"Last.fm {method} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not isinstance(data, dict):
            raise ProviderUnavailableError(
                message=f"Last.fm {method} returned a non-object body",
                provider_name=self.get_provider_name(),
            )
        # Last.fm reports API errors with HTTP 200 and an error code.
        if "error" in data:
            self._logger.warning(
                "lastfm_api_error",
                method=method,
                code=data.get("error"),
                detail=data.get("message"),
            )
            raise ProviderUnavailableError(
                message=f"Last.fm {method} error {data.get('error')}: {data.get('message')}",
                provider_name=self.get_provider_name(),
            )
        return data

    def _dig(self, data: dict[str, Any], method: str, *path: str) -> Any:
        """Walk nested keys, raising ProviderUnavailableError on a missing key."""
        node: Any = data
        for key in path:
            if not isinstance(node, dict) or key not in node:
                raise ProviderUnavailableError(
                    message=f"Last.fm {method} response missing '{'.'.join(path)}'",
                    provider_name=self.get_provider_name(),
                )
            node = node[key]
        return node

    @staticmethod
    def _as_list(node: Any) -> list[dict[str, Any]]:
        # A single result is sometimes sent as an object instead of a list.
        if isinstance(node, dict):
            return [node]
        if isinstance(node, list):
            return [item for item in node if isinstance(item, dict)]
        return []

    def _parse_artists(self, rows: list[dict[str, Any]], method: str) -> list[ChartArtist]:
        try:
            return [
                ChartArtist(
                    name=row["name"],
                    listeners=int(row.get("listeners") or 0),
                    playcount=int(row.get("playcount") or 0),
                    mbid=row.get("mbid"),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise ProviderUnavailableError(
                message=f"Last.fm {method} returned an unparsable artist row: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _parse_tracks(self, rows: list[dict[str, Any]], method: str) -> list[Track]:
        try:
            return [
                Track(
                    name=row["name"],
                    playcount=int(row.get("playcount") or 0),
                    listeners=int(row.get("listeners") or 0),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise ProviderUnavailableError(
                message=f"Last.fm {method} returned an unparsable track row: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    # -- IListeningStatsProvider implementation --------------------------------

    async def search_artists(self, keyword: str, limit: int = 6) -> list[ChartArtist]:
        method = "artist.search"
        data = await self._call(method, limit, artist=keyword)
        rows = self._as_list(self._dig(data, method, "results", "artistmatches", "artist"))
        artists = self._parse_artists(rows, method)[:limit]
        self._logger.debug("lastfm_artist_search", keyword=keyword, result_count=len(artists))
        return artists

    async def get_top_artists(
        self, sort_by: ChartMetric, fetch_limit: int = 50, top_n: int = 10
    ) -> list[ChartArtist]:
        method = "chart.gettopartists"
        data = await self._call(method, fetch_limit)
        rows = self._as_list(self._dig(data, method, "artists", "artist"))
        return top_by_metric(self._parse_artists(rows, method), sort_by, top_n)

    async def get_top_artists_by_country(
        self, country: str, fetch_limit: int = 50, top_n: int = 10
    ) -> list[ChartArtist]:
        method = "geo.gettopartists"
        data = await self._call(method, fetch_limit, country=country)
        rows = self._as_list(self._dig(data, method, "topartists", "artist"))
        return top_by_metric(self._parse_artists(rows, method), ChartMetric.LISTENERS, top_n)

    async def get_artist_info(self, name: str) -> ArtistStats:
        method = "artist.getInfo"
        data = await self._call(method, 1, artist=name)
        stats = self._dig(data, method, "artist", "stats")
        bio = data["artist"].get("bio") or {}
        try:
            return ArtistStats(
                listeners=int(stats.get("listeners") or 0),
                playcount=int(stats.get("playcount") or 0),
                bio=bio.get("summary") if isinstance(bio, dict) else None,
            )
        except (AttributeError, TypeError, ValueError, ValidationError) as exc:
            raise ProviderUnavailableError(
                message=f"Last.fm {method} returned unparsable stats: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def get_artist_top_tracks(self, name: str, limit: int = 10) -> list[Track]:
        method = "artist.getTopTracks"
        data = await self._call(method, limit, artist=name)
        rows = self._as_list(self._dig(data, method, "toptracks", "track"))
        return self._parse_tracks(rows, method)[:limit]

    async def get_top_tracks(
        self, sort_by: ChartMetric, fetch_limit: int = 50, top_n: int = 10
    ) -> list[Track]:
        method = "chart.gettoptracks"
        data = await self._call(method, fetch_limit)
        rows = self._as_list(self._dig(data, method, "tracks", "track"))
        return top_by_metric(self._parse_tracks(rows, method), sort_by, top_n)

    async def get_top_tracks_by_country(
        self, country: str, fetch_limit: int = 50, top_n: int = 10
    ) -> list[Track]:
        method = "geo.gettoptracks"
        data = await self._call(method, fetch_limit, country=country)
        rows = self._as_list(self._dig(data, method, "tracks", "track"))
        return top_by_metric(self._parse_tracks(rows, method), ChartMetric.LISTENERS, top_n)

    def get_provider_name(self) -> str:
        return "lastfm"

    def is_available(self) -> bool:
        return bool(self._settings.lastfm_api_key)
