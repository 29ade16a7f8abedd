"""Connection selection policy applied right after normalization."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..common.types import PlexServer

logger = logging.getLogger(__name__)


def filter_connections(
    servers: Sequence[PlexServer], local_discovery: bool
) -> list[PlexServer]:
    """Return servers whose connections honour the local discovery flag.

    With the flag off, local connections are removed from new server records;
    relay and public connections are kept as the same objects. The input
    records are never modified.
    """

    if local_discovery:
        logger.debug("Local discovery enabled; keeping all connections")
        return list(servers)

    filtered: list[PlexServer] = []
    for server in servers:
        remaining = tuple(c for c in server.connections if not c.local)
        if len(remaining) != len(server.connections):
            logger.debug(
                "Filtered local connections for server %s: %d -> %d",
                server.name,
                len(server.connections),
                len(remaining),
            )
            server = server.model_copy(update={"connections": remaining})
        filtered.append(server)
    return filtered


__all__ = ["filter_connections"]
