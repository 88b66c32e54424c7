"""Abstract base class for artwork providers (e.g. Spotify).

Artwork lookups are gated by a short-lived bearer token that the provider
refreshes out-of-band; callers never see the token.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from encore.models.artist import ArtistProfile


class IArtworkProvider(ABC):
    """Contract for profile URL and avatar lookups."""

    @abstractmethod
    async def get_artist_profile(self, artist_id: str) -> ArtistProfile:
        """Return the public profile URL and avatar for *artist_id*.

        Raises
        ------
        encore.utils.errors.ProviderUnavailableError
            If the token cannot be refreshed or the lookup fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"spotify"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if client credentials are configured."""
