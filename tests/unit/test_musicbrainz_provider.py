"""Unit tests for the MusicBrainz canonical-identity provider."""

from __future__ import annotations

from unittest.mock import patch

import musicbrainzngs
import pytest

from encore.providers.musicbrainz import MusicBrainzProvider, spotify_id_from_relations
from encore.utils.errors import ProviderUnavailableError

_MBID = "a74b1b7f-71a5-4011-9441-d0b5e4122711"


def _relations(*targets: str) -> list[dict]:
    return [{"type": "free streaming", "target": target} for target in targets]


@pytest.fixture
def provider(settings) -> MusicBrainzProvider:
    with patch("musicbrainzngs.set_useragent"):
        mb = MusicBrainzProvider(settings=settings)
    mb._MIN_REQUEST_INTERVAL = 0.0
    return mb


class TestSpotifyIdFromRelations:
    def test_takes_last_path_segment(self) -> None:
        relations = _relations("https://open.spotify.com/artist/4Z8W4fKeB5YxbusRsdQVPb")
        assert spotify_id_from_relations(relations) == "4Z8W4fKeB5YxbusRsdQVPb"

    def test_first_spotify_link_wins(self) -> None:
        relations = _relations(
            "https://www.discogs.com/artist/3840",
            "https://open.spotify.com/artist/first",
            "https://open.spotify.com/artist/second",
        )
        assert spotify_id_from_relations(relations) == "first"

    def test_ignores_query_and_trailing_slash(self) -> None:
        relations = _relations("https://open.spotify.com/artist/abc123/?si=xyz")
        assert spotify_id_from_relations(relations) == "abc123"

    def test_no_spotify_link(self) -> None:
        assert spotify_id_from_relations(_relations("https://www.last.fm/music/Radiohead")) is None
        assert spotify_id_from_relations([]) is None


class TestGetSpotifyId:
    @pytest.mark.asyncio
    async def test_lookup_uses_url_relations(self, provider) -> None:
        response = {
            "artist": {
                "id": _MBID,
                "name": "Radiohead",
                "url-relation-list": _relations("https://open.spotify.com/artist/4Z8W4fKeB5YxbusRsdQVPb"),
            }
        }
        with patch("musicbrainzngs.get_artist_by_id", return_value=response) as lookup:
            spotify_id = await provider.get_spotify_id(_MBID)

        assert spotify_id == "4Z8W4fKeB5YxbusRsdQVPb"
        lookup.assert_called_once_with(_MBID, includes=["url-rels"])

    @pytest.mark.asyncio
    async def test_artist_without_relations(self, provider) -> None:
        with patch("musicbrainzngs.get_artist_by_id", return_value={"artist": {"id": _MBID}}):
            assert await provider.get_spotify_id(_MBID) is None

    @pytest.mark.asyncio
    async def test_web_service_error_raises(self, provider) -> None:
        with patch(
            "musicbrainzngs.get_artist_by_id",
            side_effect=musicbrainzngs.WebServiceError("503 Service Unavailable"),
        ):
            with pytest.raises(ProviderUnavailableError) as exc_info:
                await provider.get_spotify_id(_MBID)
        assert exc_info.value.provider_name == "musicbrainz"


class TestSetup:
    def test_sets_user_agent(self, settings) -> None:
        with patch("musicbrainzngs.set_useragent") as set_useragent:
            MusicBrainzProvider(settings=settings)
        set_useragent.assert_called_once_with("encore", "0.1.0", None)

    def test_provider_name(self, provider) -> None:
        assert provider.get_provider_name() == "musicbrainz"
