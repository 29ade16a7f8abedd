"""Calls made directly against a Plex Media Server."""

from __future__ import annotations

import logging

import httpx

from ..common.types import PlexSection
from ..config import DEFAULT_PROBE_TIMEOUT
from ..errors import InvalidResponseError, UpstreamError
from .normalize import normalize_sections
from .plex_tv import JSON_HEADERS

logger = logging.getLogger(__name__)


async def get_sections(
    client: httpx.AsyncClient,
    server_url: str,
    token: str,
    *,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> list[PlexSection]:
    """Return the show and movie library sections exposed by *server_url*."""

    url = f"{server_url.rstrip('/')}/library/sections"
    try:
        response = await client.get(
            url,
            params={"X-Plex-Token": token},
            headers=JSON_HEADERS,
            timeout=timeout,
        )
    except httpx.HTTPError as exc:
        raise UpstreamError(f"Connection error fetching sections: {exc}") from exc
    if not response.is_success:
        raise UpstreamError(
            f"Plex server error {response.status_code} fetching sections",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise InvalidResponseError("Invalid response from server") from exc
    container = payload.get("MediaContainer") if isinstance(payload, dict) else None
    directories = container.get("Directory") if isinstance(container, dict) else None
    if not isinstance(directories, list):
        raise InvalidResponseError("Invalid response from server")

    sections = normalize_sections(directories)
    logger.debug(
        "Loaded %d of %d sections from %s",
        len(sections),
        len(directories),
        server_url,
    )
    return sections


__all__ = ["get_sections"]
