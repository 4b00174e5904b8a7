"""
CLI entry point: run a standalone HTTP transport.

Usage:
    # Listen on the configured port with a health listener
    python -m pmg_http_transport

    # Listen on a specific port, without response compression
    python -m pmg_http_transport --port 8080 --no-serve-gzip

The transport answers ``GET /health`` and 404 for everything else until
interrupted.
"""

import argparse
import asyncio
import logging
from typing import Any, Optional

from pmg_http_transport.core.config import settings
from pmg_http_transport.shared.logging import configure_logging
from pmg_http_transport.transport import HTTPTransport

logger = logging.getLogger(__name__)

HEALTH_ROUTING_KEY = "health"


def health(_payload: Any, _correlation_id: Optional[str], _initiator: Optional[str]) -> dict:
    """Return current transport health status."""
    return {"status": "ok", "version": settings.version}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pmg-http-transport",
        description="Run a standalone message-bus HTTP transport",
    )
    parser.add_argument(
        "--port", type=int, default=settings.port, help="Port to listen on"
    )
    parser.add_argument(
        "--host", default=settings.host, help="Address to bind to"
    )
    parser.add_argument(
        "--no-serve-gzip",
        action="store_true",
        help="Do not compress responses",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
    )
    return parser


async def serve(args: argparse.Namespace) -> None:
    """Listen until the server is stopped."""
    transport = HTTPTransport(
        port=args.port,
        host=args.host,
        serve_gzip=not args.no_serve_gzip,
    )
    transport.add_listener(HEALTH_ROUTING_KEY, health)
    await transport.listen()
    logger.info("Health: http://%s:%d/%s", args.host, transport.bound_port, HEALTH_ROUTING_KEY)
    try:
        await transport.wait_closed()
    finally:
        await transport.disconnect()


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)
    try:
        asyncio.run(serve(args))
    except KeyboardInterrupt:
        logger.info("Shutting down transport...")


if __name__ == "__main__":
    main()
