"""User account model persisted in the ``users`` collection."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from encore.models.event import Event


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """A local account with its favourites and location history.

    ``favorite_artist_ids`` holds references into the shared artist cache;
    favourite events are embedded because events are not cached elsewhere.
    ``is_current_login`` is kept only so files written by older builds
    still load; the live session is tracked in :class:`Session`.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    username: str
    password_hash: str
    favorite_artist_ids: list[str] = Field(default_factory=list)
    favorite_events: list[Event] = Field(default_factory=list)
    recent_locations: list[str] = Field(default_factory=list)
    is_current_login: bool = False
    last_login: datetime = Field(default_factory=_utcnow)
