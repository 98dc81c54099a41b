"""Content Graph CLI Entry Point

Command-line interface for querying a content snapshot with the content
graph engine. Loads the snapshot, builds the request context from the
command-line options and writes the GraphQL-shaped result as JSON.

Usage:
    python -m src.run_engine --query get --kind Movie --uid recMovie1
    python -m src.run_engine --query search --text "spider-man" --regions europe
    python -m src.run_engine --query set --uid home-page --output output/home.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.content_graph import config
from src.content_graph.context import request_context_from_headers
from src.content_graph.engine import ContentEngine
from src.content_graph.loaders import load_snapshot

LOG_DIR = Path("logs")

QUERIES = ("get", "list", "set", "search", "by-genre", "by-tag", "brand", "season", "person", "cta")


def configure_logging() -> None:
    """Configure logging with both console and file output.

    Sets up:
      - Root logger at DEBUG level
      - Console handler at INFO level for user-facing messages
      - File handler at DEBUG level for detailed troubleshooting
    """
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / "engine.log"

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    # Clear existing handlers to avoid duplicates if run multiple times
    logger.handlers.clear()
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query a content graph snapshot")
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=Path(config.DEFAULT_SNAPSHOT_PATH),
        help="Path to the exported JSON snapshot.",
    )
    parser.add_argument("--query", choices=QUERIES, required=True, help="Query to run.")
    parser.add_argument("--uid", help="Object uid (or set id/slug, or genre/tag id).")
    parser.add_argument("--external-id", help="Object external id.")
    parser.add_argument(
        "--kind",
        default="Movie",
        help="Object kind for get/list/by-genre/by-tag (default: Movie). "
             "Use 'genres' with --query list to list genres.",
    )
    parser.add_argument("--text", help="Search text for --query search.")
    parser.add_argument("--language", help="Locale, e.g. pt-pt (default: en-gb).")
    parser.add_argument("--customer-types", help="Comma-separated customer types.")
    parser.add_argument("--device-types", help="Comma-separated device types.")
    parser.add_argument("--regions", help="Comma-separated regions.")
    parser.add_argument("--time-travel", help="ISO-8601 date to evaluate availability at.")
    parser.add_argument("--depth", type=int, default=0, help="Starting depth for --query set.")
    parser.add_argument(
        "--no-reference",
        action="store_true",
        help="Do not follow set references when resolving --query set.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the JSON result here instead of stdout.",
    )
    return parser


def _headers(args) -> dict:
    headers = {
        "x-language": args.language,
        "x-sl-dimension-customer-types": args.customer_types,
        "x-sl-dimension-device-types": args.device_types,
        "x-sl-dimension-regions": args.regions,
        "x-time-travel": args.time_travel,
    }
    return {k: v for k, v in headers.items() if v}


def run_query(engine: ContentEngine, args, ctx):
    """Dispatch the parsed CLI arguments to the matching engine entry point."""
    query = args.query
    if query == "get":
        return engine.get_object(args.kind, args.uid, args.external_id, ctx)
    if query == "list":
        if args.kind.lower() == "genres":
            return engine.list_genres(ctx)
        return engine.list_objects(args.kind, ctx)
    if query == "set":
        return engine.get_set(
            args.uid or args.external_id,
            ctx,
            use_reference=not args.no_reference,
            depth=args.depth,
        )
    if query == "search":
        return engine.search(args.text or "", ctx)
    if query == "by-genre":
        return engine.list_by_metadata("genres", args.uid, args.kind, ctx)
    if query == "by-tag":
        return engine.list_by_metadata("tags", args.uid, args.kind, ctx)
    if query == "brand":
        return engine.get_brand_with_seasons(args.uid, args.external_id, ctx)
    if query == "season":
        return engine.get_season_with_episodes(args.uid, args.external_id, ctx)
    if query == "person":
        return engine.get_person(args.uid, args.external_id, ctx)
    return engine.get_call_to_action(args.uid, args.external_id, ctx)


def main(argv=None) -> int:
    """
    CLI entrypoint for the content graph engine.

    Parses command-line arguments, runs one query against the snapshot,
    and returns a Unix-style exit code (0 on success, non-zero on failure).
    """
    configure_logging()
    logger = logging.getLogger(__name__)

    args = build_parser().parse_args(argv)

    logger.info("=== Content graph query: %s ===", args.query)
    logger.info("Snapshot: %s", args.snapshot)

    try:
        engine = ContentEngine(load_snapshot(args.snapshot))
        ctx = request_context_from_headers(_headers(args))
        logger.info("Language: %s", ctx.language_code)
        if ctx.dimensions.requested:
            logger.info("Dimensions: %s", ctx.dimensions.model_dump())

        result = run_query(engine, args, ctx)
        payload = result.to_graphql() if result is not None else None
        text = json.dumps(payload, indent=2, ensure_ascii=False)

        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(text + "\n", encoding="utf-8")
            logger.info("✓ Wrote result to %s", args.output)
        else:
            sys.stdout.write(text + "\n")

        if payload is None:
            logger.info("No result (not found or filtered out)")

    except Exception as e:
        logger.exception("Query failed with an unhandled exception: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
