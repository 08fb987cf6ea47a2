"""Envelope helpers for MCP tool responses."""
from __future__ import annotations

import json
from typing import Literal

from mcp.server.fastmcp.exceptions import ToolError

ErrorKind = Literal[
    "validation",
    "remote",
    "not_found",
    "transport",
    "disabled",
    "unknown_tool",
    "internal",
]


def envelope_ok(data: object) -> dict[str, object]:
    return {"ok": True, "data": data, "errors": []}


def envelope_error(kind: ErrorKind, message: str) -> dict[str, object]:
    return {"ok": False, "data": None, "errors": [{"kind": kind, "message": message}]}


def error_message(envelope: dict[str, object]) -> str:
    errors = envelope.get("errors") or []
    return "; ".join(str(error["message"]) for error in errors)  # type: ignore[index]


def render_envelope(envelope: dict[str, object]) -> str:
    """Turn an envelope into tool output text.

    Failures are raised as ``ToolError`` so FastMCP answers with an MCP error
    result carrying the message.
    """

    if not envelope.get("ok"):
        raise ToolError(error_message(envelope))
    data = envelope.get("data")
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False)


__all__ = ["ErrorKind", "envelope_error", "envelope_ok", "error_message", "render_envelope"]
