#!/usr/bin/env python3
"""
Startup script for the Myrkat HTTP Server.

Usage:
    myrkat-http [--port PORT] [--host HOST] [--data-dir DIR]

Environment variables:
    MYRKAT_HTTP_PORT: Server port (default: 8765)
    MYRKAT_HTTP_HOST: Server host (default: 127.0.0.1)
    MYRKAT_LOG_LEVEL: Logging level (default: INFO)
    MYRKAT_DATA_DIR: Collection directory (default: ./myrkat-data)
    MYRKAT_RELAY_TOPICS: Comma-separated topics relayed to WebSocket clients
"""

import argparse
import logging
import os
import sys

logger = logging.getLogger(__name__)


def configure_logging() -> str:
    """Configure logging to stderr from MYRKAT_LOG_LEVEL. Returns the level name."""
    log_level = os.getenv("MYRKAT_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )
    return log_level


def main(argv: list[str] | None = None):
    """Start the HTTP server."""
    parser = argparse.ArgumentParser(description="Myrkat HTTP Server")
    parser.add_argument("--port", type=int, default=None, help="Server port (default: 8765)")
    parser.add_argument("--host", default=None, help="Server host (default: 127.0.0.1)")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")
    parser.add_argument("--data-dir", default=None, help="Collection directory (default: ./myrkat-data)")

    args = parser.parse_args(argv)

    # Set environment variables from args if provided
    if args.port:
        os.environ["MYRKAT_HTTP_PORT"] = str(args.port)
    if args.host:
        os.environ["MYRKAT_HTTP_HOST"] = args.host
    if args.log_level:
        os.environ["MYRKAT_LOG_LEVEL"] = args.log_level.upper()
    if args.data_dir:
        os.environ["MYRKAT_DATA_DIR"] = args.data_dir

    # Get final config
    port = int(os.getenv("MYRKAT_HTTP_PORT", "8765"))
    host = os.getenv("MYRKAT_HTTP_HOST", "127.0.0.1")
    log_level = configure_logging().lower()

    logger.info(f"Starting Myrkat HTTP Server on {host}:{port}")

    try:
        import uvicorn

        uvicorn.run(
            "myrkat.web.app:create_app",
            factory=True,
            host=host,
            port=port,
            log_level=log_level,
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
