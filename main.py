"""CLI entrypoint for the artwork aggregator."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

from aggregator import run_search
from daily_pick import pick_of_the_day
from models import ArtworkRecord
from ranking import DEFAULT_CAP


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(
        description="Search the Met and Art Institute of Chicago collections as one catalog"
    )
    parser.add_argument(
        "--mode",
        choices=["search", "pick", "serve"],
        default="search",
        help=(
            "'search' (default): rank merged results for --query. "
            "'pick': draw one random artwork from a popular artist. "
            "'serve': run the HTTP API for the mobile client."
        ),
    )
    parser.add_argument("--query", default="", help="Free-text query (search mode)")
    parser.add_argument("--cap", type=int, default=DEFAULT_CAP, help="Maximum number of ranked results")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Keyword attempts before giving up (pick mode, default PICK_MAX_ATTEMPTS or 3)",
    )
    parser.add_argument("--json", action="store_true", help="Print records as JSON")
    parser.add_argument("--host", default=os.getenv("API_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("API_PORT", "3000")))
    return parser.parse_args(argv)


def _format_record(record: ArtworkRecord) -> str:
    date = f" ({record.date_text})" if record.date_text else ""
    artist = record.artist or "Unknown artist"
    return f"[{record.id}] {record.title or 'Untitled'}{date} - {artist}\n    {record.thumbnail_url}"


def run_search_mode(query: str, cap: int, as_json: bool) -> int:
    """Print ranked results; returns the process exit code."""
    try:
        ranked = run_search(query, cap=cap)
    except Exception as exc:  # broad by design: report "service unavailable" instead of a traceback
        logging.exception("Search failed for query=%r: %s", query, exc)
        return 1

    if as_json:
        print(json.dumps([r.to_dict() for r in ranked.records], ensure_ascii=False, indent=2))
        return 0

    if not ranked.records:
        print(f"No matches for {query!r}")
        return 0

    for record in ranked.records:
        print(_format_record(record))
    logging.info("Search complete: query=%r results=%s cap=%s", query, len(ranked.records), ranked.cap)
    return 0


def run_pick_mode(max_attempts: int | None, as_json: bool) -> int:
    pick = pick_of_the_day(max_attempts=max_attempts)
    if as_json:
        print(json.dumps(pick.to_dict() if pick else None, ensure_ascii=False, indent=2))
    elif pick is None:
        print("No pick available right now, try again later")
    else:
        print(_format_record(pick))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Initialize config and dispatch on --mode."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    if args.mode == "serve":
        import uvicorn  # noqa: PLC0415

        from api import create_app  # noqa: PLC0415

        uvicorn.run(create_app(), host=args.host, port=args.port)
        return 0

    if args.mode == "pick":
        return run_pick_mode(max_attempts=args.max_attempts, as_json=args.json)

    return run_search_mode(query=args.query, cap=args.cap, as_json=args.json)


if __name__ == "__main__":
    sys.exit(main())
