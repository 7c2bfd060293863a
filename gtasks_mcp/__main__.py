"""Entry point for running the Google Tasks MCP server."""

import argparse
import logging
import sys
from typing import Optional

from .config import ConfigError, configure_logging, load_config
from .server import build_server, create_client, run_server

logger = logging.getLogger(__name__)


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Google Tasks MCP server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "streamable-http"],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to for HTTP transport (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for HTTP transport (default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: GTASKS_LOG_LEVEL or INFO)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = create_arg_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logger.error(str(e))
        return 1

    log_level = (args.log_level or config.log_level).upper()
    configure_logging(log_level, config.log_file)

    client = create_client(config)
    mcp = build_server(client)
    run_server(
        mcp,
        client,
        transport=args.transport,
        host=args.host,
        port=args.port,
        log_level=log_level,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
