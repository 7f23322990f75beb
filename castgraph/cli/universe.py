"""Standalone CLI for computing a performer universe from a collection file.

Usage::

    python -m castgraph.cli collection.json
    python -m castgraph.cli collection.json --json --hide-voice
    python -m castgraph.cli collection.json --no-recommendations -o out.json

The collection file is a JSON array of items, or an object with an
``items`` array.  Each item needs an ``id`` (TMDb id) and may carry a
``title`` (``name`` is accepted too) and a ``poster``.

Progress lines and logs go to stderr so stdout carries only the result.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from castgraph.models.collection import CollectionItem
from castgraph.models.pipeline import UniversePhase
from castgraph.models.universe import UniverseView
from castgraph.utils.errors import CastGraphError

_TOP_LIMIT = 10
_CONNECTION_LIMIT = 10
_RECOMMENDATION_LIMIT = 15


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


def load_collection(path: Path) -> list[CollectionItem]:
    """Parse a collection file into CollectionItems.

    Raises ValueError with a readable message on malformed input.
    """
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc

    if isinstance(raw, dict):
        raw = raw.get("items", [])
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a list of items")

    items: list[CollectionItem] = []
    for index, entry in enumerate(raw):
        if isinstance(entry, dict) and "title" not in entry and "name" in entry:
            entry = {**entry, "title": entry["name"]}
        try:
            items.append(CollectionItem.model_validate(entry))
        except ValidationError as exc:
            raise ValueError(f"Item #{index} is invalid: {exc.errors()[0]['msg']}") from exc
    return items


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_text_output(view: UniverseView) -> str:
    """Render a universe view as a human-readable report."""
    lines: list[str] = []
    sep = "=" * 60
    names = {p.id: p.name for p in view.performers}

    lines.append(sep)
    lines.append("  castgraph: Performer Universe")
    lines.append(sep)
    lines.append("")

    stats = view.stats
    lines.append(f"Performers: {stats.total_performers}  |  "
                 f"In 2+ items: {stats.performers_in_multiple_items}  |  "
                 f"Connections: {len(view.connections)}")
    pair = stats.most_connected_pair
    if pair:
        lines.append(
            f"Most connected: {pair.performer_a_name} & {pair.performer_b_name} "
            f"({pair.count} shared)"
        )
    lines.append("")

    if view.top_performers:
        lines.append("TOP PERFORMERS")
        lines.append("-" * 40)
        for rank, performer in enumerate(view.top_performers[:_TOP_LIMIT], start=1):
            titles = ", ".join(a.title for a in performer.appearances[:4])
            more = len(performer.appearances) - 4
            suffix = f" +{more} more" if more > 0 else ""
            lines.append(f"  {rank:>2}. {performer.name} ({performer.appearance_count}): {titles}{suffix}")
        lines.append("")

    if view.connections:
        lines.append("STRONGEST CONNECTIONS")
        lines.append("-" * 40)
        strongest = sorted(view.connections, key=lambda c: (-c.weight, c.pair))
        for conn in strongest[:_CONNECTION_LIMIT]:
            shared = ", ".join(s.title for s in conn.shared_items[:3])
            lines.append(
                f"  {names.get(conn.performer_a_id, conn.performer_a_id)} & "
                f"{names.get(conn.performer_b_id, conn.performer_b_id)} "
                f"[{conn.weight}]: {shared}"
            )
        lines.append("")

    if view.recommendations:
        lines.append("RECOMMENDATIONS")
        lines.append("-" * 40)
        for candidate in view.recommendations[:_RECOMMENDATION_LIMIT]:
            who = ", ".join(s.name for s in candidate.supporters)
            lines.append(
                f"  {candidate.title.title} ★{candidate.title.rating:.1f} "
                f"({candidate.supporter_count}): {who}"
            )
        lines.append("")

    lines.append(sep)
    lines.append(f"  Phase: {view.phase.value}")
    lines.append(sep)
    return "\n".join(lines)


def format_json_output(view: UniverseView) -> str:
    return json.dumps(view.model_dump(mode="json"), indent=2)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _progress_printer(session_id: str, phase: UniversePhase, progress: float, message: str) -> None:
    print(f"[{phase.value}] {progress:5.1f}%  {message}", file=sys.stderr)


async def _run(args: argparse.Namespace) -> int:
    # Deferred import: castgraph.main pulls in FastAPI, which the input
    # validation below does not need.
    from castgraph.main import (
        build_cache,
        build_provider,
        build_session,
        build_tracker,
        load_settings,
    )

    path = Path(args.collection).resolve()
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    try:
        items = load_collection(path)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    settings = load_settings(args.config)
    if args.media_type:
        settings = settings.model_copy(update={"tmdb_media_type": args.media_type})

    tracker = build_tracker(settings)
    start = time.monotonic()
    async with httpx.AsyncClient() as http_client:
        try:
            provider = build_provider(settings, http_client)
        except CastGraphError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

        session = build_session(settings, provider, build_cache(settings), tracker=tracker)
        if not args.quiet:
            tracker.register_listener(session.session_id, _progress_printer)

        print(f"Collection: {len(items)} items", file=sys.stderr)
        cast_report = await session.load(items)
        if cast_report.failed_ids:
            print(
                f"Warning: cast lookup failed for {len(cast_report.failed_ids)} "
                f"of {len(items)} items",
                file=sys.stderr,
            )
        if not args.no_recommendations:
            credits_report = await session.load_recommendations()
            if credits_report.failed_ids:
                print(
                    f"Warning: credits lookup failed for "
                    f"{len(credits_report.failed_ids)} performers",
                    file=sys.stderr,
                )

    hide_voice = True if args.hide_voice else None
    view = session.view(hide_voice_performers=hide_voice)
    print(f"Done in {time.monotonic() - start:.1f}s", file=sys.stderr)

    text = format_json_output(view) if args.json_output else format_text_output(view)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Results written to: {args.output}", file=sys.stderr)
    else:
        print(text)
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="castgraph",
        description=(
            "Build the performer co-occurrence universe of a media collection "
            "and recommend titles its performers appear in."
        ),
    )
    parser.add_argument("collection", type=str, help="Path to the collection JSON file.")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output the full universe as JSON instead of a text report.",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write results to a file instead of stdout.",
    )
    parser.add_argument(
        "--hide-voice",
        action="store_true",
        help="Hide performers whose roles are mostly voice roles.",
    )
    parser.add_argument(
        "--no-recommendations",
        action="store_true",
        help="Skip the credits pass.",
    )
    parser.add_argument(
        "--media-type",
        choices=["tv", "movie"],
        default=None,
        help="Override the configured TMDb media type.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to the YAML config file.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress progress lines and info logs.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, configure logging on stderr, run, and exit."""
    from castgraph.utils.logging import configure_logging

    args = build_parser().parse_args(argv)
    level = "WARNING" if (args.quiet or args.json_output) else "INFO"
    configure_logging(log_level=level, stream=sys.stderr)

    sys.exit(asyncio.run(_run(args)))
