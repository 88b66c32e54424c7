"""Abstract interfaces for encore's external collaborators.

Services depend on these contracts only; concrete adapters live under
``encore.providers`` and are wired together in ``encore.main``.
"""

from encore.interfaces.artwork_provider import IArtworkProvider
from encore.interfaces.collection_store import ICollectionStore
from encore.interfaces.identity_provider import ICanonicalIdentityProvider
from encore.interfaces.listening_stats_provider import IListeningStatsProvider
from encore.interfaces.ticketing_provider import ITicketingProvider

__all__ = [
    "IArtworkProvider",
    "ICanonicalIdentityProvider",
    "ICollectionStore",
    "IListeningStatsProvider",
    "ITicketingProvider",
]
