"""Abstract base class for canonical-identity providers (e.g. MusicBrainz).

Given a provider-neutral artist identifier, the identity provider exposes
the artist's link graph; encore only needs the artwork-provider id that
may be among those links.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ICanonicalIdentityProvider(ABC):
    """Contract for resolving canonical ids to linked provider ids."""

    @abstractmethod
    async def get_spotify_id(self, canonical_id: str) -> str | None:
        """Return the Spotify artist id linked from *canonical_id*.

        Returns
        -------
        str or None
            The linked id, or ``None`` when the artist has no such link.

        Raises
        ------
        encore.utils.errors.ProviderUnavailableError
            If the lookup itself fails (network error, unknown id).
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"musicbrainz"``."""
