"""Command-line lookups against the same services the API uses.

Usage::

    python -m encore.cli search radiohead
    python -m encore.cli chart --sort-by playcount --json
    python -m encore.cli country finland
    python -m encore.cli artist Radiohead
    python -m encore.cli events --artist Radiohead
    python -m encore.cli events --country FI --city Helsinki
    python -m encore.cli tracks --country germany

Results go to stdout as text or, with ``--json``, as a JSON array.  Logs
go to stderr at WARNING unless ``--verbose`` is given.  Search, chart and
artist lookups update the local artist cache exactly as the API does.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel

from encore.models.artist import Artist, ChartMetric, Track
from encore.models.event import Event
from encore.utils.errors import EncoreError
from encore.utils.logging import configure_logging

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_artists(artists: Sequence[Artist]) -> str:
    if not artists:
        return "No artists found."
    lines = []
    for rank, artist in enumerate(artists, start=1):
        lines.append(
            f"{rank:>2}. {artist.name}  "
            f"listeners={artist.listeners:,}  playcount={artist.playcount:,}  "
            f"[{artist.enrichment_tier.value}]"
        )
    return "\n".join(lines)


def _format_artist_detail(artist: Artist) -> str:
    sep = "=" * 60
    lines = [
        sep,
        f"  {artist.name}",
        sep,
        f"Listeners: {artist.listeners:,}",
        f"Playcount: {artist.playcount:,}",
    ]
    if artist.spotify_url:
        lines.append(f"Spotify:   {artist.spotify_url}")
    if artist.bio:
        lines.extend(["", artist.bio])
    if artist.top_tracks:
        lines.extend(["", "TOP TRACKS", "-" * 40])
        lines.extend(
            f"{rank:>2}. {track.name} ({track.playcount:,} plays)"
            for rank, track in enumerate(artist.top_tracks, start=1)
        )
    return "\n".join(lines)


def _format_events(events: Sequence[Event]) -> str:
    if not events:
        return "No events found."
    lines = []
    for event in events:
        place = ", ".join(part for part in (event.venue_name, event.city, event.country) if part)
        lines.append(f"{event.start:%Y-%m-%d %H:%M}  {event.name}  @ {place}")
    return "\n".join(lines)


def _format_tracks(tracks: Sequence[Track]) -> str:
    if not tracks:
        return "No tracks found."
    return "\n".join(
        f"{rank:>2}. {track.name}  listeners={track.listeners:,}  playcount={track.playcount:,}"
        for rank, track in enumerate(tracks, start=1)
    )


def _format_json(result: BaseModel | Sequence[BaseModel]) -> str:
    if isinstance(result, BaseModel):
        payload: Any = result.model_dump(mode="json")
    else:
        payload = [item.model_dump(mode="json") for item in result]
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Command runner
# ---------------------------------------------------------------------------


async def run_command(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Run the parsed subcommand against *components* and print the result.

    Returns 0 on success, 1 when the service raised an application error.
    """
    artists = components["artist_service"]
    events = components["event_service"]
    tracks = components["track_service"]

    try:
        if args.command == "search":
            result: Any = await artists.search_by_keyword(args.keyword)
            text = _format_artists(result)
        elif args.command == "chart":
            result = await artists.top_chart(args.sort_by)
            text = _format_artists(result)
        elif args.command == "country":
            result = await artists.top_by_country(args.country)
            text = _format_artists(result)
        elif args.command == "artist":
            result = await artists.get_by_name(args.name)
            text = _format_artist_detail(result)
        elif args.command == "events":
            if args.artist:
                result = await events.get_events_by_artist(args.artist)
            else:
                result = await events.get_events_by_location(args.country, args.city)
            text = _format_events(result)
        elif args.command == "tracks":
            if args.country:
                result = await tracks.top_tracks_by_country(args.country)
            else:
                result = await tracks.top_tracks(args.sort_by)
            text = _format_tracks(result)
        else:
            print(f"Error: unknown command {args.command!r}", file=sys.stderr)
            return 1
    except EncoreError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    print(_format_json(result) if args.json_output else text)
    return 0


async def _run(args: argparse.Namespace) -> int:
    # Deferred so --help works without reading settings.
    from encore.main import build_components, config, settings

    components = build_components(settings, config)
    try:
        return await run_command(args, components)
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print results as JSON instead of text.",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log at DEBUG level to stderr.",
    )

    parser = argparse.ArgumentParser(
        prog="python -m encore.cli",
        description="Look up artists, charts, concerts and tracks from the command line.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", parents=[common], help="Search artists by keyword.")
    search.add_argument("keyword")

    metrics = [metric.value for metric in ChartMetric]
    chart = sub.add_parser("chart", parents=[common], help="Global top artists.")
    chart.add_argument("--sort-by", choices=metrics, default=ChartMetric.LISTENERS.value)

    country = sub.add_parser("country", parents=[common], help="Top artists in a country.")
    country.add_argument("country")

    artist = sub.add_parser(
        "artist", parents=[common], help="Refresh and show a cached artist."
    )
    artist.add_argument("name")

    events = sub.add_parser("events", parents=[common], help="Upcoming events.")
    events.add_argument("--artist", default=None, help="Events for an artist name.")
    events.add_argument("--country", default=None, help="ISO country code, e.g. FI.")
    events.add_argument("--city", default=None)

    tracks = sub.add_parser("tracks", parents=[common], help="Top tracks.")
    tracks.add_argument("--country", default=None, help="Country name, e.g. germany.")
    tracks.add_argument("--sort-by", choices=metrics, default=ChartMetric.PLAYCOUNT.value)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "events" and not (args.artist or args.country or args.city):
        parser.error("events needs --artist, --country or --city")

    configure_logging(
        log_level="DEBUG" if args.verbose else "WARNING",
        stream=sys.stderr,
    )
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
