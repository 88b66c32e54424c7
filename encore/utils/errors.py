"""Custom exception hierarchy for encore.

All application exceptions inherit from :class:`EncoreError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "lastfm", "spotify", "ticketmaster") caused the
failure.

    EncoreError  (base -- catch-all for any encore error)
    +-- NotLoggedInError         (operation needs a signed-in user)
    +-- NotFoundError            (named artist/user absent from the cache)
    +-- AuthenticationError      (bad username/password)
    +-- ConflictError            (unique constraint, e.g. username taken)
    +-- ProviderUnavailableError (external API down, bad status, bad JSON)
    +-- StoreError               (collection write failure)
    |   +-- StoreCorruptError    (collection file unparsable)
    +-- ConfigurationError       (startup / missing config)

Only the first four are meant to reach a user.  Provider and store-corrupt
failures are logged and absorbed by the services.
"""


class EncoreError(Exception):
    """Base exception for all encore errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[spotify] Token refresh failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Precondition errors (user visible)
# ---------------------------------------------------------------------------

class NotLoggedInError(EncoreError):
    """Raised when an operation requires a signed-in user and none is present."""

    def __init__(
        self,
        message: str = "User is not logged in",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(EncoreError):
    """Raised when a named artist or user is absent from the local cache."""

    def __init__(
        self,
        message: str = "Record not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AuthenticationError(EncoreError):
    """Raised on an invalid username/password combination."""

    def __init__(
        self,
        message: str = "Invalid username or password",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConflictError(EncoreError):
    """Raised when a record would violate a uniqueness rule."""

    def __init__(
        self,
        message: str = "Record already exists",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / storage errors (absorbed by services)
# ---------------------------------------------------------------------------

class ProviderUnavailableError(EncoreError):
    """Raised when an external API is unreachable or returns unusable data.

    Services catch this to degrade gracefully: searches return an empty
    list, enrichment falls back to a lesser tier, and the event resolver
    falls through to its next tier.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreError(EncoreError):
    """Raised when a collection cannot be written to disk."""

    def __init__(
        self,
        message: str = "Collection store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreCorruptError(StoreError):
    """Raised when a collection file exists but cannot be parsed."""

    def __init__(
        self,
        message: str = "Collection file is corrupt",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(EncoreError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
