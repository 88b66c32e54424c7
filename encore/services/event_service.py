"""Event lookups plus the signed-in user's favourite events and recent
locations.

Finding an artist's concerts tries three routes in order of precision:

  (a) cached Ticketmaster attraction id    -> events by attraction id
  (b) cached MusicBrainz id                -> attraction search by name,
      keep only the attraction whose MusicBrainz link matches exactly,
      cache its id on the artist           -> events by attraction id
  (c) otherwise                            -> keyword search by name

Ticketmaster's keyword search is fuzzy, so (c) is only used when the
exact cross-reference is unavailable or finds nothing.
"""

from __future__ import annotations

from typing import Any

import structlog

from encore.interfaces.collection_store import ICollectionStore
from encore.interfaces.ticketing_provider import ITicketingProvider
from encore.models.artist import Artist
from encore.models.event import Event
from encore.services.artist_service import artist_repository
from encore.services.user_service import UserService
from encore.utils.errors import ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)


def location_label(city: str | None, country: str | None) -> str | None:
    """Format a recent-location entry, or ``None`` when both parts are blank."""
    city = (city or "").strip()
    country = (country or "").strip()
    if city and country:
        return f"City: {city}, Country: {country}"
    if city:
        return f"City: {city}"
    if country:
        return f"Country: {country}"
    return None


class EventService:
    """Concert search and per-user event bookkeeping."""

    def __init__(
        self,
        store: ICollectionStore,
        ticketing_provider: ITicketingProvider,
        user_service: UserService,
        config: dict[str, Any] | None = None,
    ) -> None:
        self._artists = artist_repository(store)
        self._ticketing = ticketing_provider
        self._users = user_service
        users_cfg = (config or {}).get("users", {})
        self._recent_locations_cap = int(users_cfg.get("recent_locations_cap", 20))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def get_events_by_artist(self, artist_name: str) -> list[Event]:
        """Return upcoming events for *artist_name*.

        The artist does not need to be cached; an unknown name goes
        straight to keyword search.
        """
        artist = await self._artists.get(artist_name)

        if artist is not None and artist.ticketmaster_id:
            logger.debug("events_by_cached_attraction", artist=artist_name)
            return await self._search(attraction_id=artist.ticketmaster_id)

        if artist is not None and artist.musicbrainz_id:
            attraction_id = await self._resolve_attraction_id(artist)
            if attraction_id:
                return await self._search(attraction_id=attraction_id)

        logger.debug("events_by_keyword", artist=artist_name)
        return await self._search(keyword=artist_name)

    async def get_events_by_location(self, country: str | None, city: str | None) -> list[Event]:
        return await self._search(country_code=country, city=city)

    async def _search(self, **filters: str | None) -> list[Event]:
        try:
            return await self._ticketing.search_events(**filters)
        except ProviderUnavailableError as exc:
            logger.warning("event_search_failed", error=str(exc), **filters)
            return []

    async def _resolve_attraction_id(self, artist: Artist) -> str | None:
        """Find the attraction whose MusicBrainz link equals *artist*'s and
        cache its id on the artist record."""
        try:
            attractions = await self._ticketing.search_attractions(artist.name)
        except ProviderUnavailableError as exc:
            logger.warning("attraction_search_failed", artist=artist.name, error=str(exc))
            return None

        match = next(
            (a for a in attractions if a.musicbrainz_id == artist.musicbrainz_id),
            None,
        )
        if match is None:
            logger.debug("attraction_not_matched", artist=artist.name, candidates=len(attractions))
            return None

        async with self._artists.mutate() as artists:
            for record in artists:
                if record.name == artist.name:
                    record.ticketmaster_id = match.id
                    break

        logger.info("ticketmaster_id_cached", artist=artist.name, ticketmaster_id=match.id)
        return match.id

    # ------------------------------------------------------------------
    # Favourite events
    # ------------------------------------------------------------------

    async def get_favorite_events(self) -> list[Event]:
        user = await self._users.require_current_user()
        return list(user.favorite_events)

    async def add_favorite_event(self, event: Event) -> None:
        """Save *event* on the signed-in user unless an event with the same
        Ticketmaster id is already saved."""
        async with self._users.modify_current_user() as user:
            if event not in user.favorite_events:
                user.favorite_events.append(event)
        logger.info("favorite_event_added", ticketmaster_id=event.ticketmaster_id)

    async def remove_favorite_event(self, event: Event) -> None:
        async with self._users.modify_current_user() as user:
            user.favorite_events = [e for e in user.favorite_events if e != event]
        logger.info("favorite_event_removed", ticketmaster_id=event.ticketmaster_id)

    # ------------------------------------------------------------------
    # Recent locations
    # ------------------------------------------------------------------

    async def get_recent_locations(self) -> list[str]:
        user = await self._users.require_current_user()
        return list(user.recent_locations)

    async def add_recent_location(self, city: str | None, country: str | None) -> None:
        """Move the location to the front of the signed-in user's history.

        Blank input changes nothing.  The history holds no duplicates and
        at most ``recent_locations_cap`` entries, most recent first.

        Raises:
            NotLoggedInError: If nobody is signed in.
        """
        label = location_label(city, country)
        if label is None:
            await self._users.require_current_user()
            return

        async with self._users.modify_current_user() as user:
            history = [label] + [entry for entry in user.recent_locations if entry != label]
            user.recent_locations = history[: self._recent_locations_cap]
