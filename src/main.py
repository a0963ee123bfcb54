# src/main.py - v1
"""CLI entry point: watch and cache commands.

Usage:
    datareplicator watch <uri> [options]
    datareplicator cache <uri> [options]
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from datareplicator.version import __version__

if TYPE_CHECKING:
    from datareplicator.config.settings import Settings

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from pydantic import ValidationError

    from datareplicator.config.settings import ConfigurationError

    try:
        settings = _settings_from_args(args)
    except (ConfigurationError, ValidationError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="datareplicator",
        description=f"datareplicator v{__version__} - keep a local copy of a remote resource",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- watch ---
    p_watch = subparsers.add_parser(
        "watch", help="Replicate a resource and print it whenever it changes",
    )
    p_watch.add_argument("uri", help="resource:, file:, http: or https: URI")
    p_watch.add_argument(
        "--refresh", type=float, default=None, metavar="SECONDS",
        help="Refresh period in seconds",
    )
    p_watch.add_argument(
        "--max-cache-age", type=float, default=None, metavar="SECONDS",
        help="Max age of the cached copy used as fallback",
    )
    _add_cache_dir(p_watch)
    p_watch.add_argument(
        "--fail-on-init-failure", action="store_true",
        help="Exit instead of falling back to the cache when the first load fails",
    )
    p_watch.add_argument(
        "--binary", action="store_true",
        help="Write raw bytes instead of decoded text",
    )
    p_watch.set_defaults(func=_cmd_watch)

    # --- cache ---
    p_cache = subparsers.add_parser(
        "cache", help="Print the cached copy of a resource",
    )
    p_cache.add_argument("uri", help="Endpoint URI the cache was written for")
    p_cache.add_argument(
        "--max-cache-age", type=float, default=None, metavar="SECONDS",
        help="Treat older copies as expired",
    )
    _add_cache_dir(p_cache)
    p_cache.set_defaults(func=_cmd_cache)

    return parser


def _add_cache_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cache-dir", type=Path, default=None,
        help="Cache directory (default: system temp dir)",
    )


def _settings_from_args(args: argparse.Namespace) -> Settings:
    from datareplicator.config.settings import load_settings

    overrides: dict[str, object] = {}
    if getattr(args, "refresh", None) is not None:
        overrides["refresh_period"] = timedelta(seconds=args.refresh)
    if args.max_cache_age is not None:
        overrides["max_cache_age"] = timedelta(seconds=args.max_cache_age)
    if args.cache_dir is not None:
        overrides["cache_dir"] = args.cache_dir
    if getattr(args, "fail_on_init_failure", False):
        overrides["fail_on_init_failure"] = True
    return load_settings(**overrides)


def _cmd_watch(args: argparse.Namespace, settings: Settings) -> int:
    from datareplicator.job.job_factory import start_consuming_binary, start_consuming_text

    if args.binary:
        def on_change(data: bytes) -> None:
            sys.stdout.buffer.write(data)
            sys.stdout.flush()

        job = start_consuming_binary(args.uri, on_change, settings=settings)
    else:
        def on_change_text(text: str) -> None:
            print(text, flush=True)

        job = start_consuming_text(args.uri, on_change_text, settings=settings)

    with job:
        _wait_until_interrupted()
    return 0


def _wait_until_interrupted() -> None:
    threading.Event().wait()


def _cmd_cache(args: argparse.Namespace, settings: Settings) -> int:
    from datareplicator.cache.file_cache import FileCache
    from datareplicator.core.errors import CacheError
    from datareplicator.core.models import Endpoint

    cache = FileCache(
        settings.replication_cache_dir, Endpoint.of(args.uri).uri, settings.max_cache_age
    )
    try:
        payload = cache.load()
    except CacheError as e:
        print(f"No usable cache entry: {e}", file=sys.stderr)
        return 1
    print(payload.as_text())
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage; -v overrides the configured level."""
    from datareplicator.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
