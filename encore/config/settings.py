"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, in priority order:

  1. Environment variables, e.g. ``LASTFM_API_KEY=abc123`` (always wins)
  2. A ``.env`` file in the working directory (local development)

Field ``lastfm_api_key`` maps to env var ``LASTFM_API_KEY``.  Empty
strings mean "not configured"; providers report themselves unavailable
and the services degrade instead of crashing.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """encore application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Listening statistics (Last.fm) ===
    lastfm_api_key: str = ""
    lastfm_base_url: str = "https://ws.audioscrobbler.com/2.0/"

    # === Canonical identity (MusicBrainz) ===
    musicbrainz_app_name: str = "encore"
    musicbrainz_app_version: str = "0.1.0"
    musicbrainz_contact: str = ""

    # === Artwork (Spotify, client-credentials flow) ===
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_token_url: str = "https://accounts.spotify.com/api/token"
    spotify_api_base_url: str = "https://api.spotify.com/v1"

    # === Ticketing (Ticketmaster Discovery API) ===
    ticketmaster_api_key: str = ""
    ticketmaster_base_url: str = "https://app.ticketmaster.com/discovery/v2"

    # === Storage ===
    data_dir: str = "./database"
    countries_path: str = "data/countries.json"

    # === Networking ===
    http_timeout: float = 10.0  # seconds, applied to every provider request

    # === Accounts ===
    password_pepper: str = ""
    bcrypt_rounds: int = 12

    # === App Config ===
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_configured_providers(self) -> list[str]:
        """Return the provider names whose credentials are present."""
        providers: list[str] = ["musicbrainz"]
        if self.lastfm_api_key:
            providers.append("lastfm")
        if self.spotify_client_id and self.spotify_client_secret:
            providers.append("spotify")
        if self.ticketmaster_api_key:
            providers.append("ticketmaster")
        return providers
