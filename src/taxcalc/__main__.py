"""Entry point for running taxcalcd with uvicorn.

Usage:
    taxcalcd [-c CACHE_SIZE] [-r RATE_LIMIT] [-p PORT] [--host HOST] [-v]
    python -m taxcalc ...

Flags override the TAXCALC_* environment variables read by Settings.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

import uvicorn

from taxcalc.api.app import create_app
from taxcalc.config import Settings, get_settings

logger = logging.getLogger(__name__)


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    """Build argument parser."""
    parser = argparse.ArgumentParser(
        prog="taxcalcd",
        description=(
            "Web server that calculates the net income after tax for a salary. Query "
            "GET /api/v1/?salary=...&pay-frequency=...&state=... for a CSV net amount."
        ),
    )
    parser.add_argument(
        "-c",
        "--cache-size",
        type=int,
        default=defaults.cache_size,
        help=f"number of entries to keep in the response cache (default: {defaults.cache_size})",
    )
    parser.add_argument(
        "-r",
        "--rate-limit",
        type=float,
        default=defaults.rate_limit,
        help=f"seconds between requests to the upstream engine (default: {defaults.rate_limit})",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=defaults.port,
        help=f"port to listen on (default: {defaults.port})",
    )
    parser.add_argument(
        "--host",
        default=defaults.host,
        help=f"interface to bind (default: {defaults.host})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=defaults.debug,
        help="log at debug level",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Run the application."""
    try:
        defaults = get_settings()
        args = build_parser(defaults).parse_args(argv)
        settings = dataclasses.replace(
            defaults,
            cache_size=args.cache_size,
            rate_limit=args.rate_limit,
            port=args.port,
            host=args.host,
            debug=args.verbose,
            log_level="DEBUG" if args.verbose else defaults.log_level,
        )
    except ValueError as e:
        print(f"taxcalcd: invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    logger.info("Starting server on %s:%d", settings.host, settings.port)

    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    except (OSError, SystemExit) as e:
        logger.error("failed to start server: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
