"""Utility modules for encore.

- **errors** -- exception hierarchy rooted at EncoreError.
- **logging** -- structlog setup (console in development, JSON in production).
- **countries** -- ISO country code lookup used by location search.
"""

from encore.utils.countries import load_countries
from encore.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    EncoreError,
    NotFoundError,
    NotLoggedInError,
    ProviderUnavailableError,
    StoreCorruptError,
    StoreError,
)
from encore.utils.logging import configure_logging, get_logger

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ConflictError",
    "EncoreError",
    "NotFoundError",
    "NotLoggedInError",
    "ProviderUnavailableError",
    "StoreCorruptError",
    "StoreError",
    "configure_logging",
    "get_logger",
    "load_countries",
]
