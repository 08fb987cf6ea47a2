"""API surface for oblio-mcp."""

from .tools import register_prompts, register_tools

__all__ = ["register_prompts", "register_tools"]
