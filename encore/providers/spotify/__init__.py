from encore.providers.spotify.spotify_provider import TOKEN_COLLECTION, SpotifyProvider

__all__ = ["TOKEN_COLLECTION", "SpotifyProvider"]
