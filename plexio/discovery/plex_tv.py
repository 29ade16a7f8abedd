"""Async client for the plex.tv directory service (pins, user, resources)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..common.types import AuthPin, PlexServer, PlexUser
from ..config import DEFAULT_PLEX_API_URL, DEFAULT_PLEX_PRODUCT, DEFAULT_PROBE_TIMEOUT
from ..errors import InvalidResponseError, MissingTokenError, UpstreamError
from .normalize import normalize_servers, to_auth_pin, to_plex_user
from .policy import filter_connections

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json"}


class DirectoryClient:
    """Pin login and resource discovery against plex.tv.

    Every method performs exactly one request; polling and retries are left
    to the caller.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        api_url: str = DEFAULT_PLEX_API_URL,
        product: str = DEFAULT_PLEX_PRODUCT,
        local_discovery: bool = False,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        self._http_client = http_client
        self._api_url = api_url.rstrip("/")
        self._product = product
        self._local_discovery = local_discovery
        self._timeout = timeout

    @property
    def local_discovery(self) -> bool:
        return self._local_discovery

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._api_url}{endpoint}"
        try:
            return await self._http_client.request(
                method,
                url,
                params=params,
                data=data,
                headers=JSON_HEADERS,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Connection error calling {endpoint}: {exc}") from exc

    @staticmethod
    def _ensure_success(response: httpx.Response, endpoint: str) -> None:
        if not response.is_success:
            raise UpstreamError(
                f"plex.tv error {response.status_code} on {endpoint}",
                status_code=response.status_code,
            )

    @staticmethod
    def _json(response: httpx.Response, endpoint: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"plex.tv returned non-JSON body on {endpoint}"
            ) from exc

    async def create_auth_pin(self, client_identifier: str) -> AuthPin:
        """Create a strong pin the user approves at plex.tv/link."""

        response = await self._request(
            "POST",
            "/pins",
            data={
                "strong": "true",
                "X-Plex-Product": self._product,
                "X-Plex-Client-Identifier": client_identifier,
            },
        )
        self._ensure_success(response, "/pins")
        pin = to_auth_pin(self._json(response, "/pins"))
        if pin is None:
            raise UpstreamError("Malformed auth pin in plex.tv response")
        logger.debug("Created auth pin %s", pin.id)
        return pin

    async def get_auth_token(self, auth_pin: AuthPin, client_identifier: str) -> str:
        endpoint = f"/pins/{auth_pin.id}"
        response = await self._request(
            "GET",
            endpoint,
            params={
                "code": auth_pin.code,
                "X-Plex-Client-Identifier": client_identifier,
            },
        )
        self._ensure_success(response, endpoint)
        payload = self._json(response, endpoint)
        token = payload.get("authToken") if isinstance(payload, dict) else None
        if not isinstance(token, str):
            raise MissingTokenError("Missing auth token in Plex response")
        return token

    async def get_plex_user(
        self, token: str, client_identifier: str
    ) -> PlexUser | None:
        """Return the account profile, or ``None`` when plex.tv refuses."""

        response = await self._request(
            "GET",
            "/user",
            params={
                "X-Plex-Product": self._product,
                "X-Plex-Client-Identifier": client_identifier,
                "X-Plex-Token": token,
            },
        )
        if response.status_code != 200:
            logger.info("plex.tv user lookup returned %d", response.status_code)
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning("plex.tv user lookup returned non-JSON body")
            return None
        return to_plex_user(payload)

    async def get_plex_servers(
        self, token: str, client_identifier: str
    ) -> list[PlexServer]:
        response = await self._request(
            "GET",
            "/resources",
            params={
                "includeHttps": 1,
                "includeRelay": 1,
                "X-Plex-Token": token,
                "X-Plex-Client-Identifier": client_identifier,
            },
        )
        self._ensure_success(response, "/resources")
        try:
            payload = response.json()
        except ValueError as exc:
            raise InvalidResponseError("Invalid response from server") from exc
        if not isinstance(payload, list):
            raise InvalidResponseError("Invalid response from server")

        servers = normalize_servers(payload)
        logger.info(
            "Discovered %d servers out of %d resources", len(servers), len(payload)
        )
        return filter_connections(servers, self._local_discovery)


__all__ = ["DirectoryClient", "JSON_HEADERS"]
