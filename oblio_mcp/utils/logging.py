"""Logging setup and write-attempt audit trail."""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .config import AUDIT_LOG_PATH

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"

_AUDIT_LOGGER = logging.getLogger("oblio_mcp.audit")


def configure_root(level: int = logging.INFO) -> None:
    """(Re)configure the root logger.

    Output goes to stderr so the stdio transport keeps stdout to itself.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def record_write_attempt(
    tool: str, *, audit_path: Optional[Path] = None, **fields: Any
) -> None:
    """Log a write-capable tool call and append it to the audit file, if any.

    An audit file that cannot be written is reported as a warning and never
    raised to the caller.
    """

    _AUDIT_LOGGER.info("write.attempt tool=%s", tool, extra={"tool": tool})

    path = audit_path if audit_path is not None else AUDIT_LOG_PATH
    if path is None:
        return

    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "tool": tool,
        **fields,
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, sort_keys=True, default=str))
            handle.write("\n")
    except OSError:
        # The tool call still goes ahead without an audit line
        _AUDIT_LOGGER.warning("Could not write audit log %s", path, exc_info=True)


__all__ = ["LOG_FORMAT", "configure_root", "record_write_attempt"]
