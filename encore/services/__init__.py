"""Business logic orchestrating providers and the collection store."""

from encore.services.artist_service import ARTISTS_COLLECTION, ArtistService, artist_repository
from encore.services.event_service import EventService, location_label
from encore.services.track_service import TrackService
from encore.services.user_service import USERS_COLLECTION, Session, UserService

__all__ = [
    "ARTISTS_COLLECTION",
    "USERS_COLLECTION",
    "ArtistService",
    "EventService",
    "Session",
    "TrackService",
    "UserService",
    "artist_repository",
    "location_label",
]
