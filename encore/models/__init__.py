"""encore domain models -- re-exports all public model classes.

    - artist.py -- cached Artist records, Track, and transient provider rows
    - event.py  -- ticketing Event and Attraction
    - user.py   -- local User accounts with favourites
    - access_token.py -- artwork-provider AccessToken and its lifecycle state
"""

from __future__ import annotations

from encore.models.artist import (
    INT32_MAX,
    INT64_MAX,
    PLACEHOLDER_AVATAR,
    Artist,
    ArtistProfile,
    ArtistStats,
    ChartArtist,
    ChartMetric,
    EnrichmentTier,
    Track,
)
from encore.models.event import Attraction, Event
from encore.models.access_token import AccessToken, TokenState
from encore.models.user import User

__all__ = [
    # artist
    "INT32_MAX",
    "INT64_MAX",
    "PLACEHOLDER_AVATAR",
    "Artist",
    "ArtistProfile",
    "ArtistStats",
    "ChartArtist",
    "ChartMetric",
    "EnrichmentTier",
    "Track",
    # event
    "Attraction",
    "Event",
    # token
    "AccessToken",
    "TokenState",
    # user
    "User",
]
