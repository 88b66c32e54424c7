from encore.providers.musicbrainz.musicbrainz_provider import (
    MusicBrainzProvider,
    spotify_id_from_relations,
)

__all__ = ["MusicBrainzProvider", "spotify_id_from_relations"]
