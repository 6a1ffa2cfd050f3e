"""Main entry point for CollabMatch."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from collabmatch import __version__
from collabmatch.config.settings import Settings
from collabmatch.errors import CollabMatchError, UserNotFoundError
from collabmatch.utils.logging import configure_logging


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive number")
    return number


def _dump_json(payload: object) -> str:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json")
        return str(value)

    return json.dumps(payload, indent=2, default=_default)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="collabmatch",
        description="CollabMatch: skill-based project matching and code evaluation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m collabmatch init-db
  python -m collabmatch load fixtures/demo.yaml
  python -m collabmatch recommend user-1 --limit 5
  python -m collabmatch evaluate solution.py --language Python
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to the SQLite database (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="commands",
        description="Available commands",
    )

    subparsers.add_parser("init-db", help="Create the database tables")

    load_parser = subparsers.add_parser(
        "load",
        help="Load users, projects and challenges from a YAML/JSON fixture",
    )
    load_parser.add_argument("fixture", type=Path, help="Path to the fixture file")

    recommend_parser = subparsers.add_parser(
        "recommend",
        help="Recommend projects to a user",
    )
    recommend_parser.add_argument("user_id", help="ID of the user to recommend for")
    recommend_parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Maximum number of recommendations (default: MATCHING_DEFAULT_LIMIT)",
    )
    recommend_parser.add_argument(
        "--no-diversify",
        action="store_true",
        help="Return projects in pure score order",
    )
    recommend_parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Seconds allowed for each data fetch (default: REQUEST_TIMEOUT_SECONDS)",
    )
    recommend_parser.add_argument(
        "--json",
        action="store_true",
        help="Print recommendations as JSON",
    )

    evaluate_parser = subparsers.add_parser(
        "evaluate",
        help="Score a code submission",
    )
    evaluate_parser.add_argument("file", type=Path, help="Path to the source file")
    evaluate_parser.add_argument(
        "--language",
        default=None,
        help="Evaluate against this language's features (default: language-agnostic)",
    )
    evaluate_parser.add_argument(
        "--difficulty",
        choices=["easy", "medium", "hard", "expert"],
        default=None,
        help="Challenge difficulty (hard/expert adds encouragement)",
    )

    subparsers.add_parser(
        "thresholds",
        help="Show the active scoring thresholds and weights",
    )

    return parser


async def _init_db(db_path: Path) -> int:
    from collabmatch.store.repository import MatchingRepository

    repo = MatchingRepository(db_path)
    try:
        await repo.initialize()
    finally:
        await repo.close()
    print(f"Initialized: {db_path}")
    return 0


async def _load(db_path: Path, fixture_path: Path) -> int:
    from collabmatch.store.fixtures import apply_fixture, load_fixture
    from collabmatch.store.repository import MatchingRepository

    fixture = load_fixture(fixture_path)
    repo = MatchingRepository(db_path)
    try:
        await repo.initialize()
        counts = await apply_fixture(repo, fixture)
    finally:
        await repo.close()

    for key, count in counts.items():
        print(f"{key}: {count}")
    return 0


async def _recommend(db_path: Path, parsed: argparse.Namespace, timeout: float | None) -> int:
    from collabmatch.matching.service import RecommendationService
    from collabmatch.store.repository import MatchingRepository

    repo = MatchingRepository(db_path)
    try:
        await repo.initialize()
        service = RecommendationService(repo)
        try:
            results = await service.recommend_projects(
                parsed.user_id,
                limit=parsed.limit,
                diversify=not parsed.no_diversify,
                timeout=timeout,
            )
        finally:
            await service.side_effects.drain()
    finally:
        await repo.close()

    if parsed.json:
        print(_dump_json([item.to_dict() for item in results]))
        return 0

    if not results:
        print("No recommendations")
        return 0

    for rank, item in enumerate(results, start=1):
        print(f"{rank}. [{item.score}] {item.project.title or item.project_id}")
        for line in item.match_factors.strengths_highlight:
            print(f"   + {line}")
        for line in item.match_factors.improvement_suggestions:
            print(f"   - {line}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    logger = configure_logging(settings, level=parsed.log_level)

    # If no command specified, show help
    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.debug(f"CollabMatch v{__version__} running {parsed.mode}")
    db_path = parsed.db or settings.database_path

    if parsed.mode == "init-db":
        return asyncio.run(_init_db(db_path))

    if parsed.mode == "load":
        try:
            return asyncio.run(_load(db_path, parsed.fixture))
        except (FileNotFoundError, ValueError) as e:
            print(f"Error loading fixture: {e}", file=sys.stderr)
            return 1

    if parsed.mode == "recommend":
        timeout = parsed.timeout or settings.request_timeout_seconds
        try:
            return asyncio.run(_recommend(db_path, parsed, timeout))
        except UserNotFoundError as e:
            print(str(e), file=sys.stderr)
            return 1
        except CollabMatchError as e:
            print(f"Recommendation failed: {e}", file=sys.stderr)
            return 1

    if parsed.mode == "evaluate":
        from collabmatch.evaluation.heuristics import CodeQualityEvaluator
        from collabmatch.evaluation.service import LanguageFeatureEvaluator

        try:
            # Undecodable bytes only weaken pattern matches
            code = parsed.file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            print(f"Error reading {parsed.file}: {e}", file=sys.stderr)
            return 1

        if parsed.language:
            result = LanguageFeatureEvaluator().evaluate(
                code, parsed.language, parsed.difficulty
            )
        else:
            result = CodeQualityEvaluator().evaluate(code)

        print(f"Score: {result.score}")
        print(f"Status: {result.status}")
        print()
        print(result.feedback)
        return 0

    if parsed.mode == "thresholds":
        from collabmatch.matching.config import get_matching_config

        config = get_matching_config()
        print(
            _dump_json(
                {
                    **config.thresholds(),
                    "diversity_lambda": config.diversity_lambda,
                    "cache_duration_ms": config.cache_duration_ms,
                }
            )
        )
        return 0

    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
