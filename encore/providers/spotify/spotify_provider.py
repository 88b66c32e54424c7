"""Spotify provider implementing IArtworkProvider.

Resolves a Spotify artist id to the artist's public profile URL and
avatar image.  Requests carry a bearer token obtained through the OAuth
client-credentials flow; the token is cached in memory and persisted as
the single record of the ``spotify_token`` collection so restarts reuse
it until it expires.

Token lifecycle::

    UNKNOWN --refresh--> VALID --clock passes expires_at--> EXPIRED
                           ^                                  |
                           +-------------refresh--------------+

``expires_at`` is computed from the local clock at refresh time
(``now + expires_in``), not taken from the provider.  Refresh is
single-flight: concurrent lookups that find the token missing or expired
queue on one lock, the first refreshes, the rest reuse its result.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone

import httpx
import structlog
from pydantic import ValidationError

from encore.config.settings import Settings
from encore.interfaces.artwork_provider import IArtworkProvider
from encore.interfaces.collection_store import ICollectionStore
from encore.models.access_token import AccessToken, TokenState
from encore.models.artist import PLACEHOLDER_AVATAR, ArtistProfile
from encore.utils.errors import ProviderUnavailableError, StoreError

logger = structlog.get_logger(logger_name=__name__)

TOKEN_COLLECTION = "spotify_token"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SpotifyProvider(IArtworkProvider):
    """Artwork provider backed by the Spotify Web API.

    Parameters
    ----------
    settings:
        Supplies client credentials, endpoint URLs and request timeout.
    http_client:
        Shared ``httpx.AsyncClient``; owned and closed by the caller.
    store:
        Collection store used to persist the current token.
    clock:
        Returns the current aware datetime.  Injected so tests can move
        time past a token's expiry.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        store: ICollectionStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._store = store
        self._clock = clock or _utcnow
        self._token: AccessToken | None = None
        self._token_loaded = False
        self._refresh_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Token lifecycle
    # ------------------------------------------------------------------

    @property
    def token_state(self) -> TokenState:
        if self._token is None:
            return TokenState.UNKNOWN
        if self._token.is_expired(self._clock()):
            return TokenState.EXPIRED
        return TokenState.VALID

    async def ensure_valid_access_token(self) -> str:
        """Return a usable bearer token, refreshing it first if needed.

        Raises
        ------
        ProviderUnavailableError
            If credentials are missing or the token exchange fails.
        """
        if self.token_state is TokenState.VALID:
            return self._token.access_token

        async with self._refresh_lock:
            if not self._token_loaded:
                await self._load_persisted_token()
            # Another caller may have refreshed while this one waited.
            if self.token_state is not TokenState.VALID:
                await self._refresh_access_token()
            return self._token.access_token

    async def _load_persisted_token(self) -> None:
        tokens = await self._store.load(TOKEN_COLLECTION, AccessToken)
        self._token = tokens[0] if tokens else None
        self._token_loaded = True
        logger.debug("spotify_token_loaded", state=self.token_state.value)

    async def _refresh_access_token(self) -> None:
        """Exchange client credentials for a new token and persist it."""
        if not self.is_available():
            raise ProviderUnavailableError(
                message="Spotify client credentials are not configured",
                provider_name=self.get_provider_name(),
            )

        try:
            response = await self._http.post(
                self._settings.spotify_token_url,
                data={"grant_type": "client_credentials"},
                auth=(self._settings.spotify_client_id, self._settings.spotify_client_secret),
                timeout=self._settings.http_timeout,
            )
            response.raise_for_status()
            payload = response.json()
            token = AccessToken.issued(
                access_token=payload["access_token"],
                expires_in=int(payload["expires_in"]),
                now=self._clock(),
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError, ValidationError) as exc:
            logger.warning("spotify_token_refresh_failed", error=str(exc))
            raise ProviderUnavailableError(
                message=f"Spotify token refresh failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        self._token = token
        try:
            await self._store.replace(TOKEN_COLLECTION, [token])
        except StoreError as exc:
            # The in-memory token still works for this process.
            logger.warning("spotify_token_persist_failed", error=exc.message)

        logger.info("spotify_token_refreshed", expires_at=token.expires_at.isoformat())

    # ------------------------------------------------------------------
    # IArtworkProvider implementation
    # ------------------------------------------------------------------

    async def get_artist_profile(self, artist_id: str) -> ArtistProfile:
        access_token = await self.ensure_valid_access_token()

        try:
            response = await self._http.get(
                f"{self._settings.spotify_api_base_url}/artists/{artist_id}",
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self._settings.http_timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("spotify_artist_request_failed", spotify_id=artist_id, error=str(exc))
            raise ProviderUnavailableError(
                message=f"Spotify artist lookup failed for '{artist_id}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code == 401:
            # Revoked or clock-skewed token; force a refresh on the next lookup.
            self._token = None
            raise ProviderUnavailableError(
                message="Spotify rejected the access token",
                provider_name=self.get_provider_name(),
            )

        try:
            response.raise_for_status()
            data = response.json()
            spotify_url = data["external_urls"]["spotify"]
            images = data.get("images") or []
            picture = images[0]["url"] if images else PLACEHOLDER_AVATAR
            profile = ArtistProfile(spotify_url=spotify_url, profile_picture=picture)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, ValidationError) as exc:
            logger.warning("spotify_artist_unparsable", spotify_id=artist_id, error=str(exc))
            raise ProviderUnavailableError(
                message=f"Spotify artist lookup failed for '{artist_id}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("spotify_artist_profile", spotify_id=artist_id)
        return profile

    def get_provider_name(self) -> str:
        return "spotify"

    def is_available(self) -> bool:
        return bool(self._settings.spotify_client_id and self._settings.spotify_client_secret)
