"""Artist and track models for the aggregation cache.

``Artist`` is the one record per display name that the artist service
persists in the ``artists`` collection.  It is mutable on purpose: a cache
hit overwrites the numeric fields in place and a lazy cross-reference
writes ``ticketmaster_id`` back onto the same record.

``ChartArtist``, ``ArtistStats`` and ``ArtistProfile`` are transient
shapes returned by provider clients and never persisted on their own.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

PLACEHOLDER_AVATAR = "/images/music-note.png"

# Last.fm listener counts fit a 32-bit integer; play counts need 64 bits.
INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1

ListenerCount = Annotated[int, Field(ge=0, le=INT32_MAX)]
PlayCount = Annotated[int, Field(ge=0, le=INT64_MAX)]


class ChartMetric(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """Numeric field a chart is ordered by."""

    LISTENERS = "listeners"
    PLAYCOUNT = "playcount"


class EnrichmentTier(str, Enum):  # noqa: UP042
    """How much of an artist's identity chain has been resolved."""

    NAME_ONLY = "NAME_ONLY"   # Last.fm gave no MusicBrainz id
    CANONICAL = "CANONICAL"   # MusicBrainz id known, no Spotify link
    ARTWORK = "ARTWORK"       # Spotify profile URL and avatar resolved


class Track(BaseModel):
    """A track with its Last.fm popularity numbers.  Identified by name only."""

    name: str
    playcount: PlayCount = 0
    listeners: ListenerCount = 0


class Artist(BaseModel):
    """A cached artist record keyed by ``name``."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    musicbrainz_id: str | None = None
    spotify_id: str | None = None
    spotify_url: str | None = None
    profile_picture: str = PLACEHOLDER_AVATAR
    ticketmaster_id: str | None = None
    listeners: ListenerCount = 0
    playcount: PlayCount = 0
    bio: str | None = None
    top_tracks: list[Track] | None = None

    @property
    def enrichment_tier(self) -> EnrichmentTier:
        if self.spotify_id:
            return EnrichmentTier.ARTWORK
        if self.musicbrainz_id:
            return EnrichmentTier.CANONICAL
        return EnrichmentTier.NAME_ONLY


class ChartArtist(BaseModel):
    """One row of a Last.fm search or chart response."""

    model_config = ConfigDict(frozen=True)

    name: str
    listeners: ListenerCount = 0
    playcount: PlayCount = 0
    mbid: str | None = None

    @field_validator("mbid", mode="before")
    @classmethod
    def _blank_mbid_is_none(cls, value: object) -> object:
        # Last.fm sends "" for artists it has not linked to MusicBrainz.
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ArtistStats(BaseModel):
    """Detailed numbers and biography from ``artist.getInfo``."""

    model_config = ConfigDict(frozen=True)

    listeners: ListenerCount = 0
    playcount: PlayCount = 0
    bio: str | None = None


class ArtistProfile(BaseModel):
    """Public profile link and avatar from the artwork provider."""

    model_config = ConfigDict(frozen=True)

    spotify_url: str
    profile_picture: str = PLACEHOLDER_AVATAR
