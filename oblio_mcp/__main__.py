"""Entry point for python -m oblio_mcp."""
from __future__ import annotations

import logging


def main() -> None:
    """Forward to oblio_mcp.cli main entry point."""
    from oblio_mcp.utils.logging import configure_root

    configure_root()

    # Import after logging is configured so module loggers pick it up
    from oblio_mcp.app import MCP_SERVER
    from oblio_mcp.cli import build_parser, run

    logger = logging.getLogger("oblio_mcp.cli")

    def _start_sse(host: str, port: int) -> None:
        """Launch the MCP SSE server."""
        MCP_SERVER.settings.host = host
        MCP_SERVER.settings.port = int(port)
        MCP_SERVER.run(transport="sse")

    def _run_stdio() -> None:
        """Run stdio transport."""
        MCP_SERVER.run()

    parser = build_parser()
    args = parser.parse_args()

    run(args, logger=logger, start_sse=_start_sse, run_stdio=_run_stdio)


if __name__ == "__main__":
    main()
