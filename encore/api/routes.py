"""FastAPI routes for encore.

Services are resolved from ``app.state`` (populated at startup by
``encore.main``) through ``Annotated[..., Depends(...)]`` aliases, so
tests can build a bare app and assign fakes to ``app.state``.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/artists/search?q=                  GET     Search + merge into cache
# /api/v1/artists/chart?sort_by=             GET     Global top 10
# /api/v1/artists/country/{country}          GET     Country top 10
# /api/v1/artists/{name}                     GET     Refresh cached artist detail
# /api/v1/artists/{name}/events              GET     Upcoming events for artist
# /api/v1/events?country=&city=              GET     Events by location
# /api/v1/tracks/chart?sort_by=              GET     Global top tracks
# /api/v1/tracks/country/{country}           GET     Country top tracks
# /api/v1/auth/signup                        POST    Create account + sign in
# /api/v1/auth/login                         POST    Sign in
# /api/v1/auth/logout                        POST    Sign out
# /api/v1/auth/me                            GET     Signed-in user
# /api/v1/me/favorites/artists[/{name}]      GET/PUT/DELETE
# /api/v1/me/favorites/events[/{tm_id}]      GET/POST/DELETE
# /api/v1/me/locations                       GET/POST
# /api/v1/countries                          GET     ISO code -> name
# /api/v1/health                             GET     Provider availability
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from encore.api.schemas import (
    ArtistListResponse,
    CountriesResponse,
    CredentialsRequest,
    EventListResponse,
    HealthResponse,
    LocationListResponse,
    RecentLocationRequest,
    TrackListResponse,
    UserResponse,
)
from encore.models.artist import Artist, ChartMetric
from encore.models.event import Event
from encore.services.artist_service import ArtistService
from encore.services.event_service import EventService
from encore.services.track_service import TrackService
from encore.services.user_service import UserService
from encore.utils.errors import NotFoundError

router = APIRouter(prefix="/api/v1")

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency injection helpers -- resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_artist_service(request: Request) -> ArtistService:
    return request.app.state.artist_service


def _get_event_service(request: Request) -> EventService:
    return request.app.state.event_service


def _get_track_service(request: Request) -> TrackService:
    return request.app.state.track_service


def _get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


ArtistServiceDep = Annotated[ArtistService, Depends(_get_artist_service)]
EventServiceDep = Annotated[EventService, Depends(_get_event_service)]
TrackServiceDep = Annotated[TrackService, Depends(_get_track_service)]
UserServiceDep = Annotated[UserService, Depends(_get_user_service)]


# ---------------------------------------------------------------------------
# Artists
# ---------------------------------------------------------------------------


@router.get("/artists/search", response_model=ArtistListResponse, summary="Search artists")
async def search_artists(
    artists: ArtistServiceDep,
    q: Annotated[str, Query(min_length=1, max_length=200)],
) -> ArtistListResponse:
    return ArtistListResponse(artists=await artists.search_by_keyword(q))


@router.get("/artists/chart", response_model=ArtistListResponse, summary="Global top artists")
async def artist_chart(
    artists: ArtistServiceDep,
    sort_by: ChartMetric = ChartMetric.LISTENERS,
) -> ArtistListResponse:
    return ArtistListResponse(artists=await artists.top_chart(sort_by))


@router.get(
    "/artists/country/{country}",
    response_model=ArtistListResponse,
    summary="Top artists in a country",
)
async def artist_country_chart(country: str, artists: ArtistServiceDep) -> ArtistListResponse:
    return ArtistListResponse(artists=await artists.top_by_country(country))


# Names may contain "/" (AC/DC), so both routes use the path converter and
# the events route is registered first.
@router.get("/artists/{name:path}/events", response_model=EventListResponse, summary="Artist events")
async def artist_events(name: str, events: EventServiceDep) -> EventListResponse:
    return EventListResponse(events=await events.get_events_by_artist(name))


@router.get("/artists/{name:path}", response_model=Artist, summary="Artist detail")
async def artist_detail(name: str, artists: ArtistServiceDep) -> Artist:
    """Refresh and return a cached artist.  404 until the artist has been
    seen in a search or chart."""
    return await artists.get_by_name(name)


# ---------------------------------------------------------------------------
# Events and tracks
# ---------------------------------------------------------------------------


@router.get("/events", response_model=EventListResponse, summary="Events by location")
async def events_by_location(
    events: EventServiceDep,
    country: str | None = None,
    city: str | None = None,
) -> EventListResponse:
    return EventListResponse(events=await events.get_events_by_location(country, city))


@router.get("/tracks/chart", response_model=TrackListResponse, summary="Global top tracks")
async def track_chart(
    tracks: TrackServiceDep,
    sort_by: ChartMetric = ChartMetric.PLAYCOUNT,
) -> TrackListResponse:
    return TrackListResponse(tracks=await tracks.top_tracks(sort_by))


@router.get(
    "/tracks/country/{country}",
    response_model=TrackListResponse,
    summary="Top tracks in a country",
)
async def track_country_chart(country: str, tracks: TrackServiceDep) -> TrackListResponse:
    return TrackListResponse(tracks=await tracks.top_tracks_by_country(country))


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@router.post(
    "/auth/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and sign in",
)
async def sign_up(body: CredentialsRequest, users: UserServiceDep) -> UserResponse:
    user = await users.sign_up(body.username, body.password)
    return UserResponse.from_user(user)


@router.post("/auth/login", response_model=UserResponse, summary="Sign in")
async def login(body: CredentialsRequest, users: UserServiceDep) -> UserResponse:
    user = await users.login(body.username, body.password)
    return UserResponse.from_user(user)


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Sign out")
async def logout(users: UserServiceDep) -> Response:
    await users.logout()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/auth/me", response_model=UserResponse, summary="Signed-in user")
async def current_user(users: UserServiceDep) -> UserResponse:
    return UserResponse.from_user(await users.require_current_user())


# ---------------------------------------------------------------------------
# Signed-in user's favourites and locations
# ---------------------------------------------------------------------------


@router.get("/me/favorites/artists", response_model=ArtistListResponse)
async def favorite_artists(artists: ArtistServiceDep) -> ArtistListResponse:
    return ArtistListResponse(artists=await artists.get_favorites())


@router.put("/me/favorites/artists/{name:path}", status_code=status.HTTP_204_NO_CONTENT)
async def add_favorite_artist(name: str, artists: ArtistServiceDep) -> Response:
    await artists.add_favorite(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/me/favorites/artists/{name:path}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite_artist(name: str, artists: ArtistServiceDep) -> Response:
    await artists.remove_favorite(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me/favorites/events", response_model=EventListResponse)
async def favorite_events(events: EventServiceDep) -> EventListResponse:
    return EventListResponse(events=await events.get_favorite_events())


@router.post("/me/favorites/events", status_code=status.HTTP_204_NO_CONTENT)
async def add_favorite_event(event: Event, events: EventServiceDep) -> Response:
    await events.add_favorite_event(event)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/me/favorites/events/{ticketmaster_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite_event(ticketmaster_id: str, events: EventServiceDep) -> Response:
    saved = await events.get_favorite_events()
    event = next((e for e in saved if e.ticketmaster_id == ticketmaster_id), None)
    if event is None:
        raise NotFoundError(f"Event {ticketmaster_id} is not a favourite")
    await events.remove_favorite_event(event)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me/locations", response_model=LocationListResponse)
async def recent_locations(events: EventServiceDep) -> LocationListResponse:
    return LocationListResponse(locations=await events.get_recent_locations())


@router.post("/me/locations", response_model=LocationListResponse)
async def add_recent_location(
    body: RecentLocationRequest, events: EventServiceDep
) -> LocationListResponse:
    await events.add_recent_location(body.city, body.country)
    return LocationListResponse(locations=await events.get_recent_locations())


# ---------------------------------------------------------------------------
# Reference data and health
# ---------------------------------------------------------------------------


@router.get("/countries", response_model=CountriesResponse, summary="Country codes")
async def countries(request: Request) -> CountriesResponse:
    return CountriesResponse(countries=getattr(request.app.state, "countries", {}))


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(request: Request) -> HealthResponse:
    """Report which providers have credentials configured.

    ``healthy`` when every provider is configured, ``degraded`` when some
    are, ``unhealthy`` when none are.
    """
    providers: dict[str, bool] = dict(getattr(request.app.state, "provider_registry", {}))
    available = sum(providers.values())
    if providers and available == len(providers):
        health = "healthy"
    elif available:
        health = "degraded"
    else:
        health = "unhealthy"
    return HealthResponse(status=health, version=_VERSION, providers=providers)
