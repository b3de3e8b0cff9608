"""
Entrypoint for running the weather.gov MCP server through stdio.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from .weather_server import create_weather_server

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="MCP server exposing forecasts, alerts and observations from weather.gov."
    )
    parser.add_argument(
        "transport",
        nargs="?",
        default="stdio",
        choices=["stdio"],
        help="MCP transport. Only 'stdio' is available.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=LOG_LEVELS,
        help="Logging verbosity (written to stderr).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    _configure_logging(args.log_level)

    try:
        server = create_weather_server()
        logger.info("Server started with transport %s", args.transport)
        server.run(args.transport, show_banner=False)
    except Exception:
        logger.exception("Fatal: server stopped")
        sys.exit(1)


if __name__ == "__main__":
    main()
