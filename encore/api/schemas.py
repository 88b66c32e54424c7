"""Pydantic request/response schemas for the encore API.

Request schemas end with ``Request`` and response schemas with
``Response``.  Domain models (``Artist``, ``Event``, ``Track``) are
embedded directly; ``User`` is not, so the password hash never leaves
the server.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from encore.models.artist import Artist, Track
from encore.models.event import Event
from encore.models.user import User


class CredentialsRequest(BaseModel):
    """Username and password for sign-up and login."""

    username: str = Field(..., min_length=1, max_length=64, pattern=r"\S")
    password: str = Field(..., min_length=1, max_length=256)


class RecentLocationRequest(BaseModel):
    """A searched location.  Either part may be omitted."""

    city: str | None = None
    country: str | None = None


class UserResponse(BaseModel):
    """Public view of a user account."""

    id: str
    username: str
    favorite_artist_ids: list[str] = Field(default_factory=list)
    last_login: datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            username=user.username,
            favorite_artist_ids=list(user.favorite_artist_ids),
            last_login=user.last_login,
        )


class ArtistListResponse(BaseModel):
    artists: list[Artist]


class EventListResponse(BaseModel):
    events: list[Event]


class TrackListResponse(BaseModel):
    tracks: list[Track]


class LocationListResponse(BaseModel):
    locations: list[str]


class CountriesResponse(BaseModel):
    """ISO 3166-1 alpha-2 code -> display name, ordered by name."""

    countries: dict[str, str]


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, bool]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
