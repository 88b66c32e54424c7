"""Track charts, global and per country."""

from __future__ import annotations

from typing import Any

import structlog

from encore.interfaces.listening_stats_provider import IListeningStatsProvider
from encore.models.artist import ChartMetric, Track
from encore.utils.errors import ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)


class TrackService:
    """Top-track charts.  Tracks are not cached."""

    def __init__(
        self,
        stats_provider: IListeningStatsProvider,
        config: dict[str, Any] | None = None,
    ) -> None:
        self._stats = stats_provider
        lastfm = (config or {}).get("lastfm", {})
        self._fetch_limit = int(lastfm.get("chart_fetch_limit", 50))
        self._top_n = int(lastfm.get("chart_top_n", 10))

    async def top_tracks(self, sort_by: ChartMetric | str = ChartMetric.PLAYCOUNT) -> list[Track]:
        """Return the global top tracks ordered by *sort_by*.

        Raises:
            ValueError: If *sort_by* is not a known metric.
        """
        metric = ChartMetric(sort_by)
        try:
            return await self._stats.get_top_tracks(metric, fetch_limit=self._fetch_limit, top_n=self._top_n)
        except ProviderUnavailableError as exc:
            logger.warning("track_chart_failed", sort_by=metric.value, error=str(exc))
            return []

    async def top_tracks_by_country(self, country: str) -> list[Track]:
        try:
            return await self._stats.get_top_tracks_by_country(
                country, fetch_limit=self._fetch_limit, top_n=self._top_n
            )
        except ProviderUnavailableError as exc:
            logger.warning("track_country_chart_failed", country=country, error=str(exc))
            return []
