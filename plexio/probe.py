"""Reachability probes for candidate server URLs.

Both probes answer a soft yes/no question and never raise: timeouts,
connection errors, bad statuses and unreadable bodies all mean ``False``.
"""

from __future__ import annotations

import enum
import logging

import httpx

from .config import DEFAULT_PROBE_TIMEOUT

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = DEFAULT_PROBE_TIMEOUT
TEST_CONNECTION_PATH = "/api/v1/test-connection"

_PROBE_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


class ProbeResult(str, enum.Enum):
    """Tri-state shown next to a URL picker."""

    UNTESTED = "untested"
    ALIVE = "alive"
    DEAD = "dead"

    @classmethod
    def from_verdict(cls, alive: bool) -> "ProbeResult":
        return cls.ALIVE if alive else cls.DEAD


async def is_server_alive_remote(
    client: httpx.AsyncClient,
    backend_origin: str,
    server_url: str,
    token: str,
    *,
    timeout: float = PROBE_TIMEOUT,
) -> bool:
    """Ask the backend whether it can reach *server_url*."""

    try:
        response = await client.get(
            f"{backend_origin.rstrip('/')}{TEST_CONNECTION_PATH}",
            params={"url": server_url, "token": token},
            timeout=timeout,
        )
        response.raise_for_status()
        payload = response.json()
    except _PROBE_ERRORS as exc:
        logger.warning("Remote probe of %s failed: %s", server_url, exc)
        return False
    return isinstance(payload, dict) and payload.get("success") is True


async def is_server_alive_local(
    client: httpx.AsyncClient,
    server_url: str,
    token: str,
    *,
    timeout: float = PROBE_TIMEOUT,
) -> bool:
    """Check *server_url* from this process's own network position."""

    try:
        response = await client.get(
            server_url, params={"X-Plex-Token": token}, timeout=timeout
        )
    except _PROBE_ERRORS as exc:
        logger.warning("Local probe of %s failed: %s", server_url, exc)
        return False
    if response.status_code != 200:
        logger.info("Local probe of %s returned %d", server_url, response.status_code)
        return False
    return True


__all__ = [
    "PROBE_TIMEOUT",
    "ProbeResult",
    "TEST_CONNECTION_PATH",
    "is_server_alive_local",
    "is_server_alive_remote",
]
