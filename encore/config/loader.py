"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- tunables checked into the repo (result limits,
                            page sizes, recent-location cap)
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML file first, then deep-merges the
environment-based values from :class:`Settings` on top.
"""

from pathlib import Path

import yaml

from encore.config.settings import Settings

# Used when config.yaml is absent or omits a section.
DEFAULTS: dict = {
    "lastfm": {
        "search_limit": 6,
        "chart_fetch_limit": 50,
        "chart_top_n": 10,
        "top_tracks_limit": 10,
    },
    "ticketmaster": {
        "page_size": 20,
    },
    "users": {
        "recent_locations_cap": 20,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config: dict = {}
    _deep_merge(config, DEFAULTS)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "storage": {
            "data_dir": settings.data_dir,
            "countries_path": settings.countries_path,
        },
        "providers": {
            "configured": settings.get_configured_providers(),
            "http_timeout": settings.http_timeout,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
