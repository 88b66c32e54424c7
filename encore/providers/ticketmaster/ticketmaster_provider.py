"""Ticketmaster Discovery API provider implementing ITicketingProvider.

Both endpoints share the same fixed query suffix: music classification,
API key, all locales and a page of 20.  Listings are parsed leniently;
any event without a name, venue name or parseable start time is dropped
rather than failing the whole page.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from encore.config.settings import Settings
from encore.interfaces.ticketing_provider import ITicketingProvider
from encore.models.event import Attraction, Event
from encore.utils.errors import ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_BANNER_SIZE = (640, 360)


def _as_dict(node: Any) -> dict[str, Any]:
    return node if isinstance(node, dict) else {}


def _first(items: Any) -> dict[str, Any] | None:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _parse_start(dates: dict[str, Any]) -> datetime | None:
    raw = _as_dict(dates.get("start")).get("dateTime")
    if not isinstance(raw, str):
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_coordinate(location: dict[str, Any], key: str) -> float:
    try:
        return float(location.get(key, 0.0))
    except (TypeError, ValueError):
        return 0.0


def parse_banner_image(images: Any) -> str | None:
    """Return the URL of the first 640x360 image, or ``None``."""
    if not isinstance(images, list):
        return None
    for image in images:
        if not isinstance(image, dict):
            continue
        if (image.get("width"), image.get("height")) == _BANNER_SIZE:
            return image.get("url")
    return None


def parse_event(raw: dict[str, Any]) -> Event | None:
    """Map one Discovery API event object to an :class:`Event`.

    Returns ``None`` when the listing lacks an id, name, venue name or
    start time.
    """
    dates = _as_dict(raw.get("dates"))
    start = _parse_start(dates)
    embedded = _as_dict(raw.get("_embedded"))
    venue = _first(embedded.get("venues")) or {}
    location = _as_dict(venue.get("location"))
    attractions = embedded.get("attractions")
    if not isinstance(attractions, list):
        attractions = []

    ticketmaster_id = raw.get("id")
    name = raw.get("name")
    venue_name = venue.get("name")
    if not (ticketmaster_id and name and venue_name and start):
        return None

    try:
        return Event(
            ticketmaster_id=ticketmaster_id,
            name=name,
            url=raw.get("url"),
            banner_image=parse_banner_image(raw.get("images")),
            start=start,
            timezone=dates.get("timezone"),
            venue_name=venue_name,
            city=_as_dict(venue.get("city")).get("name"),
            country=_as_dict(venue.get("country")).get("name"),
            latitude=_parse_coordinate(location, "latitude"),
            longitude=_parse_coordinate(location, "longitude"),
            artist_names=[a["name"] for a in attractions if isinstance(a, dict) and a.get("name")],
        )
    except ValidationError:
        return None


def parse_attraction(raw: dict[str, Any]) -> Attraction | None:
    attraction_id = raw.get("id")
    name = raw.get("name")
    if not attraction_id or not name:
        return None
    musicbrainz = _first(_as_dict(raw.get("externalLinks")).get("musicbrainz")) or {}
    try:
        return Attraction(id=attraction_id, name=name, musicbrainz_id=musicbrainz.get("id"))
    except ValidationError:
        return None


class TicketmasterProvider(ITicketingProvider):
    """Ticketing provider backed by the Ticketmaster Discovery API v2."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        page_size: int = 20,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._page_size = page_size

    async def _get_embedded(self, endpoint: str, key: str, **filters: str | None) -> list[dict[str, Any]]:
        """GET *endpoint* and return ``_embedded[key]`` (``[]`` when absent)."""
        params: dict[str, str | int] = {
            name: value.strip()
            for name, value in filters.items()
            if value is not None and value.strip()
        }
        params.update(
            {
                "size": self._page_size,
                "classificationName": "Music",
                "apikey": self._settings.ticketmaster_api_key,
                "locale": "*",
            }
        )

        try:
            response = await self._http.get(
                f"{self._settings.ticketmaster_base_url}/{endpoint}",
                params=params,
                timeout=self._settings.http_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("ticketmaster_request_failed", endpoint=endpoint, error=str(exc))
            raise ProviderUnavailableError(
                message=f"Ticketmaster {endpoint} search failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not isinstance(data, dict):
            raise ProviderUnavailableError(
                message=f"Ticketmaster {endpoint} returned a non-object body",
                provider_name=self.get_provider_name(),
            )

        # Discovery omits _embedded entirely when nothing matched.
        items = _as_dict(data.get("_embedded")).get(key)
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict)]

    # -- ITicketingProvider implementation ------------------------------------

    async def search_events(
        self,
        keyword: str | None = None,
        attraction_id: str | None = None,
        country_code: str | None = None,
        city: str | None = None,
    ) -> list[Event]:
        raw_events = await self._get_embedded(
            "events",
            "events",
            keyword=keyword,
            attractionId=attraction_id,
            countryCode=country_code,
            city=city,
        )
        events = [event for event in map(parse_event, raw_events) if event is not None]
        logger.debug(
            "ticketmaster_events_parsed",
            received=len(raw_events),
            kept=len(events),
        )
        return events

    async def search_attractions(self, keyword: str) -> list[Attraction]:
        raw = await self._get_embedded("attractions", "attractions", keyword=keyword)
        return [a for a in map(parse_attraction, raw) if a is not None]

    def get_provider_name(self) -> str:
        return "ticketmaster"

    def is_available(self) -> bool:
        return bool(self._settings.ticketmaster_api_key)
