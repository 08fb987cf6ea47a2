"""Tool and prompt registration for oblio-mcp."""
from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from ..backends import documents
from . import prompts
from .dispatcher import ToolDispatcher

_LOGGER = logging.getLogger("oblio_mcp.api.tools")


def register_tools(server: FastMCP, dispatcher: ToolDispatcher) -> list[str]:
    """Register the Oblio tools on the dispatcher and the MCP server."""

    documents.register_entries(dispatcher)
    documents.register(server, dispatcher)
    loaded = [entry.name for entry in dispatcher.entries()]
    _LOGGER.debug("Registered %d tools: %s", len(loaded), ", ".join(loaded))
    return loaded


def register_prompts(server: FastMCP) -> list[str]:
    loaded = prompts.register(server)
    _LOGGER.debug("Registered %d prompts", len(loaded))
    return loaded


__all__ = ["register_prompts", "register_tools"]
