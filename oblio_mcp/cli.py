"""Minimal CLI helpers for running the MCP server."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable

from oblio_mcp.utils.config import READ_ONLY, MissingCredentials, get_credentials

StartSSE = Callable[[str, int], None]
RunStdIO = Callable[[], None]


def build_parser() -> argparse.ArgumentParser:
    """Create an argument parser for the runtime."""

    parser = argparse.ArgumentParser(description="oblio-mcp server")
    parser.add_argument(
        "--transport",
        type=str,
        default="stdio",
        choices=["stdio", "sse"],
        help="Transport mechanism to expose (default: stdio)",
    )
    parser.add_argument(
        "--mcp-host",
        type=str,
        default="127.0.0.1",
        help="Host for the MCP SSE server",
    )
    parser.add_argument(
        "--mcp-port",
        type=int,
        default=8099,
        help="Port for the MCP SSE server",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def run(
    args: argparse.Namespace,
    *,
    logger: logging.Logger,
    start_sse: StartSSE,
    run_stdio: RunStdIO,
) -> None:
    """Check the environment and start the selected transport."""

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)

    try:
        get_credentials()
    except MissingCredentials as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1)

    logger.info(
        "Starting MCP server (transport=%s, mcp=%s:%s, writes=%s)",
        args.transport,
        args.mcp_host,
        args.mcp_port,
        "disabled" if READ_ONLY else "enabled",
    )
    if READ_ONLY:
        logger.warning("Write-capable tools disabled (unset MCP_READ_ONLY to enable writes).")

    if args.transport == "sse":
        if args.mcp_port <= 0 or args.mcp_port > 65535:
            logger.error("Invalid --mcp-port: %s (must be between 1 and 65535)", args.mcp_port)
            raise SystemExit(2)
        logger.debug("MCP SSE server listening on http://%s:%s", args.mcp_host, args.mcp_port)
        start_sse(args.mcp_host, args.mcp_port)
    else:
        logger.debug("Transport: stdio")
        run_stdio()


__all__ = ["build_parser", "run"]
