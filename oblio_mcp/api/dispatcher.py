"""Tool dispatch: validate arguments, call the Oblio client, wrap the result."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping

from mcp.types import ToolAnnotations
from pydantic import BaseModel, ValidationError

from ..backends.oblio_client import (
    OblioApiError,
    OblioClient,
    OblioError,
    OblioNotFound,
    OblioTransportError,
)
from ..backends.oblio_models import format_validation_error
from ..utils.config import READ_ONLY
from ..utils.logging import record_write_attempt
from .envelopes import envelope_error, envelope_ok

_LOGGER = logging.getLogger("oblio_mcp.api.dispatcher")

ClientFactory = Callable[[], OblioClient]
Handler = Callable[[OblioClient, Any], object]


@dataclass(frozen=True)
class ToolEntry:
    """A registered tool: its argument schema and the handler behind it."""

    name: str
    title: str
    description: str
    schema: type[BaseModel]
    handler: Handler
    error_prefix: str
    writes: bool = False
    annotations: ToolAnnotations = field(default_factory=ToolAnnotations)


class ToolDispatcher:
    """Routes tool calls to handlers and never raises to the caller.

    Arguments are validated before the client factory is touched, so invalid
    calls cannot reach the network.
    """

    def __init__(self, client_factory: ClientFactory, *, read_only: bool = READ_ONLY) -> None:
        self._client_factory = client_factory
        self._read_only = read_only
        self._entries: Dict[str, ToolEntry] = {}

    def register(self, entry: ToolEntry) -> None:
        if entry.name in self._entries:
            raise ValueError(f"Tool {entry.name} is already registered")
        self._entries[entry.name] = entry

    def entries(self) -> list[ToolEntry]:
        return list(self._entries.values())

    def get(self, name: str) -> ToolEntry:
        return self._entries[name]

    def dispatch(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, object]:
        entry = self._entries.get(name)
        if entry is None:
            return envelope_error("unknown_tool", f"Unknown tool: {name}")

        try:
            args = entry.schema.model_validate(dict(arguments or {}))
        except ValidationError as exc:
            _LOGGER.info("tool.invalid_arguments tool=%s errors=%s", name, exc.error_count())
            return envelope_error(
                "validation", f"Invalid arguments for {name}: {format_validation_error(exc)}"
            )

        if entry.writes:
            if self._read_only:
                return envelope_error(
                    "disabled",
                    f"{entry.error_prefix}: write-capable tools are disabled "
                    "(unset MCP_READ_ONLY to allow writes)",
                )
            record_write_attempt(
                name, arguments=args.model_dump(mode="json", by_alias=True, exclude_none=True)
            )

        try:
            result = entry.handler(self._client_factory(), args)
        except OblioNotFound as exc:
            return envelope_error("not_found", f"{entry.error_prefix}: {exc}")
        except OblioApiError as exc:
            return envelope_error("remote", f"{entry.error_prefix}: {exc}")
        except OblioTransportError as exc:
            return envelope_error("transport", f"{entry.error_prefix}: {exc}")
        except OblioError as exc:
            return envelope_error("validation", f"{entry.error_prefix}: {exc}")
        except Exception as exc:
            _LOGGER.exception("tool.failed tool=%s", name)
            return envelope_error("internal", f"{entry.error_prefix}: {exc}")

        _LOGGER.debug("tool.ok tool=%s", name)
        return envelope_ok(result)


__all__ = ["ToolDispatcher", "ToolEntry"]
