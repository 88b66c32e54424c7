"""Concrete adapters for encore's interfaces.

    - store/         -- JSON-file collection store and keyed repository
    - lastfm/        -- listening statistics (IListeningStatsProvider)
    - musicbrainz/   -- canonical identity (ICanonicalIdentityProvider)
    - spotify/       -- artwork with bearer-token lifecycle (IArtworkProvider)
    - ticketmaster/  -- events and attractions (ITicketingProvider)
"""
