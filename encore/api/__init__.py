"""encore API layer -- routes, schemas, and middleware."""

from encore.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    status_for,
)
from encore.api.routes import router
from encore.api.schemas import (
    ArtistListResponse,
    CountriesResponse,
    CredentialsRequest,
    ErrorResponse,
    EventListResponse,
    HealthResponse,
    LocationListResponse,
    RecentLocationRequest,
    TrackListResponse,
    UserResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "status_for",
    "ArtistListResponse",
    "CountriesResponse",
    "CredentialsRequest",
    "ErrorResponse",
    "EventListResponse",
    "HealthResponse",
    "LocationListResponse",
    "RecentLocationRequest",
    "TrackListResponse",
    "UserResponse",
]
