"""Bearer token record for the artwork provider's client-credentials flow."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict


class TokenState(str, Enum):  # noqa: UP042
    UNKNOWN = "UNKNOWN"   # nothing loaded or persisted yet
    VALID = "VALID"
    EXPIRED = "EXPIRED"


class AccessToken(BaseModel):
    """A bearer token plus the absolute local-clock instant it stops working.

    ``expires_at`` must carry a timezone; a naive value in a persisted file
    fails validation and the store treats the collection as corrupt.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    expires_in: int
    expires_at: AwareDatetime

    @classmethod
    def issued(cls, access_token: str, expires_in: int, now: datetime) -> AccessToken:
        """Build a token from a provider response received at *now*."""
        return cls(
            access_token=access_token,
            expires_in=expires_in,
            expires_at=now + timedelta(seconds=expires_in),
        )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
