"""Runtime configuration helpers for the MCP server."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Optional

from dotenv import load_dotenv

# Load .env file from project root (if it exists)
load_dotenv()

CREDENTIAL_VARIABLES: Final[tuple[str, str]] = ("OBLIO_API_EMAIL", "OBLIO_API_SECRET")


def _parse_bool(value: str | None, *, default: bool = False) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    return value in {"1", "true", "yes", "on"}


def _parse_float(value: str | None, *, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(name: str, *, default: bool = False) -> bool:
    return _parse_bool(os.getenv(name), default=default)


def _env_float(name: str, *, default: float) -> float:
    return _parse_float(os.getenv(name), default=default)


OBLIO_API_URL: Final[str] = os.getenv("OBLIO_API_URL", "").strip() or "https://www.oblio.eu"
HTTP_TIMEOUT: Final[float] = _env_float("OBLIO_HTTP_TIMEOUT", default=30.0)
READ_ONLY: Final[bool] = _env_bool("MCP_READ_ONLY", default=False)

_audit_log_env = os.getenv("MCP_AUDIT_LOG", "").strip()
AUDIT_LOG_PATH: Final[Optional[Path]] = (
    Path(_audit_log_env).expanduser() if _audit_log_env else None
)


class MissingCredentials(RuntimeError):
    """Raised when the Oblio API credentials are not configured."""


def get_credentials() -> tuple[str, str]:
    """Return ``(email, secret)`` for the Oblio API.

    Values are read from the environment on each call so that a ``.env`` file
    or the MCP client configuration can provide them.
    """

    missing = [name for name in CREDENTIAL_VARIABLES if not os.getenv(name, "").strip()]
    if missing:
        raise MissingCredentials(
            f"{' and '.join(missing)} environment variable{'s' if len(missing) > 1 else ''} must be set"
        )
    email, secret = (os.environ[name].strip() for name in CREDENTIAL_VARIABLES)
    return email, secret


def get_initial_cif() -> str:
    """Company CIF used until ``set_cif`` changes it (empty when unset)."""

    return os.getenv("CIF", "").strip()


__all__ = [
    "AUDIT_LOG_PATH",
    "HTTP_TIMEOUT",
    "MissingCredentials",
    "OBLIO_API_URL",
    "READ_ONLY",
    "get_credentials",
    "get_initial_cif",
]
