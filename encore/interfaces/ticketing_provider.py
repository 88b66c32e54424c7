"""Abstract base class for ticketing providers (e.g. Ticketmaster)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from encore.models.event import Attraction, Event


class ITicketingProvider(ABC):
    """Contract for event and performer search."""

    @abstractmethod
    async def search_events(
        self,
        keyword: str | None = None,
        attraction_id: str | None = None,
        country_code: str | None = None,
        city: str | None = None,
    ) -> list[Event]:
        """Search music events.  Blank filters are omitted from the query.

        Returns
        -------
        list[Event]
            Parsed events; listings missing a name, venue or start time
            are dropped.

        Raises
        ------
        encore.utils.errors.ProviderUnavailableError
            On network failure or an unusable response.
        """

    @abstractmethod
    async def search_attractions(self, keyword: str) -> list[Attraction]:
        """Search performers by name."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"ticketmaster"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
