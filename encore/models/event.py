"""Ticketing models: concert events and performer attractions."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Event(BaseModel):
    """A concert listing from the ticketing provider.

    Two events are the same event when their ``ticketmaster_id`` matches,
    regardless of the locally generated ``id``.  Latitude and longitude are
    ``0.0`` when the venue carries no coordinates.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    ticketmaster_id: str
    name: str
    url: str | None = None
    banner_image: str | None = None
    start: datetime
    timezone: str | None = None
    venue_name: str
    city: str | None = None
    country: str | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    artist_names: list[str] = Field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.ticketmaster_id == other.ticketmaster_id

    def __hash__(self) -> int:
        return hash(self.ticketmaster_id)


class Attraction(BaseModel):
    """A performer entry from the ticketing provider's attraction search."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    musicbrainz_id: str | None = None
