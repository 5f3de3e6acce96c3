"""
Word Store Service - CLI Entry Point

Usage:
    python -m http_api [--host HOST] [--port PORT] [--config FILE] [--log-level LEVEL]

Examples:
    # Start with endpoints from bound service credentials
    python -m http_api

    # Start against explicit endpoints
    WORDSTORE_REDIS_ENDPOINTS=redis://localhost:6379 python -m http_api --port 8080
"""

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from config import load_settings
from http_api.app import create_app


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Word Store Service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default=None, help="Host to bind (default: from config or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: $PORT or 8080)")
    parser.add_argument("--config", default=None, help="Path to a YAML configuration file")
    parser.add_argument("--log-level", default=None, help="Logging level (default: from config or INFO)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    settings = load_settings(args.config)
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.log_level:
        settings.monitoring.log_level = args.log_level

    setup_logging(settings.monitoring.log_level)

    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.monitoring.log_level.lower(),
    )


if __name__ == "__main__":
    main()
