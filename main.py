"""CLI entry point for the resume review and job search tool."""

import argparse
import asyncio
import logging
import sys

import httpx

from src.core.cache import SearchCache
from src.core.config import Settings
from src.core.schemas import JobResult, SearchOptions
from src.core.store import (
    InvalidNamespaceError,
    ProfileNotFoundError,
    ProfileStore,
    SuggestionStore,
)
from src.pipeline.orchestrator import JobSearch, build_adapters, export_results_json, with_defaults
from src.review.engine import ALL, ApplyEngine
from src.review.formatting import format_suggestions_list
from src.review.interactive import run_interactive_review


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_ids(value: str) -> list[int] | str:
    """``all`` or a comma-separated list of integers."""
    if value.strip().lower() == ALL:
        return ALL
    try:
        ids = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        msg = f"ids must be 'all' or comma-separated integers, got '{value}'"
        raise argparse.ArgumentTypeError(msg) from None
    if not ids:
        msg = "ids must not be empty"
        raise argparse.ArgumentTypeError(msg)
    return ids


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resume review and multi-source job search",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- search ---
    search_parser = subparsers.add_parser("search", help="Search job boards")
    search_parser.add_argument("query", help="Free-text search query")
    search_parser.add_argument("--site", help="linkedin, indeed, greenhouse or lever")
    search_parser.add_argument("--location", help="Location filter")
    search_parser.add_argument(
        "--remote", action="store_true", default=None, help="Remote jobs only",
    )
    search_parser.add_argument("--results", type=int, help="Results wanted per source")
    search_parser.add_argument("--job-type", help="fulltime, parttime, contract, internship")
    search_parser.add_argument("--hours-old", type=int, help="Only jobs posted within N hours")
    search_parser.add_argument(
        "--greenhouse", action="append", default=[], metavar="BOARD",
        help="Greenhouse board token (repeatable)",
    )
    search_parser.add_argument(
        "--lever", action="append", default=[], metavar="SITE",
        help="Lever site name (repeatable)",
    )
    search_parser.add_argument(
        "--json", action="store_true", help="Print results as JSON",
    )
    _add_common(search_parser)

    # --- review ---
    review_parser = subparsers.add_parser("review", help="Review resume suggestions")
    review_sub = review_parser.add_subparsers(dest="review_command", required=True)

    list_parser = review_sub.add_parser("list", help="List suggestions")
    list_parser.add_argument("job_id", nargs="?", help="Job namespace (default: general review)")
    _add_common(list_parser)

    apply_parser = review_sub.add_parser("apply", help="Apply suggestions by id")
    apply_parser.add_argument("job_id", nargs="?", help="Job namespace (default: general review)")
    apply_parser.add_argument(
        "--ids", type=parse_ids, default=ALL,
        help="Comma-separated suggestion ids, or 'all' (default: all)",
    )
    _add_common(apply_parser)

    interactive_parser = review_sub.add_parser(
        "interactive", help="Approve, skip or edit suggestions one at a time",
    )
    interactive_parser.add_argument("job_id", nargs="?", help="Job namespace")
    _add_common(interactive_parser)

    # --- serve ---
    serve_parser = subparsers.add_parser("serve", help="Run the local review API")
    serve_parser.add_argument("--port", type=int, help="Port (default: from settings)")
    _add_common(serve_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _print_results(results: list[JobResult]) -> None:
    print(f"\n{len(results)} result(s)\n")
    for i, r in enumerate(results, start=1):
        remote = " (remote)" if r.is_remote else ""
        print(f"{i:>3}. {r.title} @ {r.company}")
        print(f"     {r.location}{remote} [{r.source}]")
        if r.salary is not None:
            print(f"     {r.salary.describe()}")
        print(f"     {r.job_url}")


async def run_search(settings: Settings, args: argparse.Namespace) -> list[JobResult]:
    """Run one search across all sources with settings-derived defaults."""
    options = with_defaults(
        SearchOptions(
            site=args.site,
            location=args.location,
            remote=args.remote,
            results=args.results,
            job_type=args.job_type,
            hours_old=args.hours_old,
            greenhouse_boards=args.greenhouse,
            lever_sites=args.lever,
        ),
        settings.search,
    )
    cache: SearchCache[list[JobResult]] = SearchCache(settings.search.cache_ttl_minutes * 60)
    async with httpx.AsyncClient(
        timeout=settings.search.request_timeout, follow_redirects=True,
    ) as client:
        searcher = JobSearch(build_adapters(client), cache)
        return await searcher.search(args.query, options)


def cmd_search(settings: Settings, args: argparse.Namespace) -> None:
    results = asyncio.run(run_search(settings, args))
    if args.json:
        print(export_results_json(results))
    else:
        _print_results(results)


def cmd_review(settings: Settings, args: argparse.Namespace) -> None:
    suggestions = SuggestionStore(settings.storage)
    engine = ApplyEngine(ProfileStore(settings.storage), suggestions)

    if args.review_command == "list":
        print(format_suggestions_list(suggestions.load(args.job_id), args.job_id))
    elif args.review_command == "apply":
        result = engine.apply_by_ids(args.ids, args.job_id)
        print(f"Applied: {result.applied or 'none'}")
        print(f"Skipped: {result.skipped or 'none'}")
        if result.unresolved:
            print(f"No matching path (unchanged): {result.unresolved}")
        if result.backup_created:
            print(f"Backup saved to {settings.storage.backup_path}")
    else:
        run_interactive_review(engine, args.job_id)


def cmd_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from src.api.app import create_app

    port = args.port or settings.server.port
    print(f"Review UI running at http://{settings.server.host}:{port}")
    uvicorn.run(create_app(settings), host=settings.server.host, port=port)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "search":
        cmd_search(settings, args)
    elif args.command == "review":
        try:
            cmd_review(settings, args)
        except (ProfileNotFoundError, InvalidNamespaceError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        cmd_serve(settings, args)


if __name__ == "__main__":
    main()
