"""Server assembly: FastMCP instance, dispatcher and registrations."""
from __future__ import annotations

from typing import Callable, Optional

from mcp.server.fastmcp import FastMCP

from .api import register_prompts, register_tools
from .api.dispatcher import ToolDispatcher
from .backends.oblio_client import OblioClient, get_client
from .utils.config import READ_ONLY

SERVER_NAME = "oblio-mcp"


def build_server(
    client_factory: Callable[[], OblioClient] = get_client,
    *,
    read_only: Optional[bool] = None,
) -> tuple[FastMCP, ToolDispatcher]:
    """Create the MCP server with every Oblio tool and prompt registered."""

    server = FastMCP(SERVER_NAME)
    dispatcher = ToolDispatcher(
        client_factory, read_only=READ_ONLY if read_only is None else read_only
    )
    register_tools(server, dispatcher)
    register_prompts(server)
    return server, dispatcher


MCP_SERVER, DISPATCHER = build_server()

__all__ = ["DISPATCHER", "MCP_SERVER", "SERVER_NAME", "build_server"]
