"""HTTP client for the Oblio REST API."""
from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

import httpx

from ..utils.config import (
    HTTP_TIMEOUT,
    OBLIO_API_URL,
    MissingCredentials,
    get_credentials,
    get_initial_cif,
)

_LOGGER = logging.getLogger("oblio_mcp.backends.oblio_client")

TOKEN_PATH = "/api/authorize/token"
# Refresh the bearer token this many seconds before Oblio expires it.
TOKEN_EXPIRY_MARGIN = 60.0

# Nomenclatures that are not scoped to a company
_UNSCOPED_NOMENCLATURES = {"companies"}


class OblioError(Exception):
    """Base class for errors raised by the Oblio client."""


class OblioApiError(OblioError):
    """The Oblio API rejected the request."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class OblioNotFound(OblioApiError):
    """The requested document or resource does not exist."""


class OblioTransportError(OblioError):
    """The request could not be completed (connection, timeout, bad payload)."""


class MissingCif(OblioError):
    """No company CIF has been configured yet."""


class CompanySelector:
    """Holds the company CIF that scopes every Oblio request.

    All reads and writes go through :meth:`get` and :meth:`set`; there is no
    locking, the last write wins.
    """

    def __init__(self, cif: str = "") -> None:
        self._cif = cif

    def get(self) -> str:
        return self._cif

    def set(self, cif: str) -> None:
        self._cif = cif.strip()


class OblioClient:
    """Thin wrapper around the Oblio API: one method per remote endpoint.

    None of the methods retry. Remote failures are raised as
    :class:`OblioApiError` (or :class:`OblioNotFound`) carrying the
    ``statusMessage`` returned by Oblio.
    """

    def __init__(
        self,
        email: str,
        secret: str,
        selector: CompanySelector | None = None,
        *,
        base_url: str = OBLIO_API_URL,
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._email = email
        self._secret = secret
        self.selector = selector if selector is not None else CompanySelector()
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    # CIF selector

    def set_cif(self, cif: str) -> None:
        self.selector.set(cif)

    def get_cif(self) -> str:
        return self.selector.get()

    def _require_cif(self) -> str:
        cif = self.selector.get()
        if not cif:
            raise MissingCif("Company CIF is not set. Call set_cif or configure the CIF variable.")
        return cif

    # Documents

    def create_document(self, kind: str, data: Mapping[str, Any]) -> dict[str, Any]:
        payload = dict(data)
        if not payload.get("cif"):
            payload["cif"] = self._require_cif()
        return self._request("POST", f"/api/docs/{kind}", json=payload)

    def get_document(self, kind: str, series_name: str, number: int) -> dict[str, Any]:
        return self._request(
            "GET", f"/api/docs/{kind}", params=self._document_params(series_name, number)
        )

    def delete_document(
        self,
        kind: str,
        series_name: str,
        number: int,
        *,
        delete_collect: int | None = None,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        params = self._document_params(series_name, number)
        if delete_collect is not None:
            params["deleteCollect"] = delete_collect
        if idempotency_key:
            params["idempotencyKey"] = idempotency_key
        return self._request("DELETE", f"/api/docs/{kind}", params=params)

    def cancel_or_restore(
        self, kind: str, series_name: str, number: int, cancel: bool
    ) -> dict[str, Any]:
        action = "cancel" if cancel else "restore"
        return self._request(
            "PUT", f"/api/docs/{kind}/{action}", json=self._document_params(series_name, number)
        )

    def list_documents(self, kind: str, filters: Mapping[str, Any] | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {"cif": self._require_cif()}
        params.update(_flatten_params(filters or {}))
        return self._request("GET", f"/api/docs/{kind}/list", params=params)

    # Nomenclatures

    def lookup_nomenclature(
        self,
        kind: str,
        name: str | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if kind not in _UNSCOPED_NOMENCLATURES:
            params["cif"] = self._require_cif()
        if name:
            params["name"] = name
        params.update(_flatten_params(filters or {}))
        return self._request("GET", f"/api/nomenclature/{kind}", params=params)

    # Payments and SPV

    def collect_payment(
        self, series_name: str, number: int, collect: Mapping[str, Any]
    ) -> dict[str, Any]:
        payload = self._document_params(series_name, number)
        payload["collect"] = dict(collect)
        return self._request("PUT", "/api/docs/invoice/collect", json=payload)

    def submit_einvoice(self, series_name: str, number: int) -> dict[str, Any]:
        return self._request(
            "POST", "/api/docs/einvoice", json=self._document_params(series_name, number)
        )

    def fetch_einvoice_archive(self, series_name: str, number: int) -> dict[str, Any]:
        return self._request(
            "GET", "/api/docs/einvoice", params=self._document_params(series_name, number)
        )

    def close(self) -> None:
        self._http.close()

    # Internals

    def _document_params(self, series_name: str, number: int) -> dict[str, Any]:
        return {"cif": self._require_cif(), "seriesName": series_name, "number": number}

    def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        _LOGGER.debug("Requesting Oblio access token")
        try:
            response = self._http.post(
                TOKEN_PATH,
                data={"client_id": self._email, "client_secret": self._secret},
            )
        except httpx.HTTPError as exc:
            raise OblioTransportError(f"Could not reach Oblio: {exc}") from exc

        body = _decode_body(response)
        if response.status_code != 200 or "access_token" not in body:
            raise OblioApiError(
                f"Authorization failed: {_status_message(body, response)}",
                status=response.status_code,
            )

        self._token = str(body["access_token"])
        expires_in = _coerce_float(body.get("expires_in"), default=3600.0)
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0.0)
        return self._token

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        token = self._access_token()
        _LOGGER.debug("Oblio request %s %s", method, path)
        try:
            response = self._http.request(
                method,
                path,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise OblioTransportError(f"Could not reach Oblio: {exc}") from exc

        body = _decode_body(response)
        if response.status_code == 401:
            self._token = None

        status = _coerce_status(body.get("status"), default=response.status_code)
        if response.status_code == 404 or status == 404:
            raise OblioNotFound(_status_message(body, response), status=404)
        if response.is_error or not 200 <= status < 300:
            _LOGGER.info(
                "Oblio rejected %s %s status=%s", method, path, response.status_code
            )
            raise OblioApiError(_status_message(body, response), status=status)
        return body


def _decode_body(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError as exc:
        if response.is_error:
            return {}
        raise OblioTransportError(
            f"Oblio returned a non-JSON response (HTTP {response.status_code})"
        ) from exc
    return body if isinstance(body, dict) else {"data": body}


def _status_message(body: Mapping[str, Any], response: httpx.Response) -> str:
    message = body.get("statusMessage")
    if message:
        return str(message)
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


def _coerce_status(value: Any, *, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_float(value: Any, *, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _flatten_params(values: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Encode nested filters the way Oblio expects: ``client[cif]=...``."""

    flat: dict[str, Any] = {}
    for key, value in values.items():
        name = f"{prefix}[{key}]" if prefix else key
        if isinstance(value, Mapping):
            flat.update(_flatten_params(value, name))
        elif value is not None:
            flat[name] = value
    return flat


_CLIENT: Optional[OblioClient] = None


def get_client() -> OblioClient:
    """Return the process-wide client, creating it on first use."""

    global _CLIENT
    if _CLIENT is None:
        try:
            email, secret = get_credentials()
        except MissingCredentials as exc:
            raise OblioError(str(exc)) from exc
        _CLIENT = OblioClient(email, secret, CompanySelector(get_initial_cif()))
        _LOGGER.debug("Oblio client created (cif=%s)", _CLIENT.get_cif() or "<unset>")
    return _CLIENT


__all__ = [
    "CompanySelector",
    "MissingCif",
    "OblioApiError",
    "OblioClient",
    "OblioError",
    "OblioNotFound",
    "OblioTransportError",
    "get_client",
]
