"""Thin async JSON client over the storefront REST backend.

Every gateway goes through ``ApiClient.request``, which owns the three
cross-cutting concerns of talking to the backend:

- URL building (``api_url``): paths are always served under ``/api``;
- bearer auth from the current session, when one exists;
- error translation: 404 becomes ``NotFound``, any other non-2xx status
  or transport failure becomes ``NetworkError``.  When the server sends a
  ``message`` it is surfaced as-is.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from storefront.domain.exceptions import NetworkError, NotFound
from storefront.domain.repository.session import Session

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def api_url(base_url: str, path: str = "") -> str:
    """Join *path* onto *base_url*, making sure it lives under ``/api``."""
    base = base_url.rstrip("/")
    if not path:
        return f"{base}/api"
    if path.startswith("/api"):
        return f"{base}{path}"
    if path.startswith("/"):
        return f"{base}/api{path}"
    return f"{base}/api/{path}"


class ApiClient:

    def __init__(
        self,
        base_url: str,
        session: Session,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._timeout = timeout
        self._transport = transport

    @property
    def session(self) -> Session:
        return self._session

    def url(self, path: str, legacy: bool = False) -> str:
        """Absolute URL for *path*; ``legacy`` paths skip the ``/api`` prefix."""
        if legacy:
            return f"{self._base_url}{path}"
        return api_url(self._base_url, path)

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
        legacy: bool = False,
    ) -> Any:
        """Send one request and return the decoded JSON body ({} if empty)."""
        url = self.url(path, legacy=legacy)
        send_headers = {"Accept": "application/json"}
        token = self._session.token if authenticated else None
        if token:
            send_headers["Authorization"] = f"Bearer {token}"
        if headers:
            send_headers.update(headers)

        logger.debug("%s %s", method, url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(method, url, json=json, headers=send_headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._translate(exc.response) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {url} failed: {exc}") from exc

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(f"{method} {url} returned a non-JSON body") from exc

    # --- Convenience verbs ----------------------------------------------------

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _translate(response: httpx.Response) -> NetworkError | NotFound:
        message = ApiClient._server_message(response) or (
            f"Request failed with status {response.status_code}"
        )
        if response.status_code == 404:
            return NotFound(message)
        return NetworkError(message, status_code=response.status_code)

    @staticmethod
    def _server_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if isinstance(message, str) and message:
                return message
        return None
