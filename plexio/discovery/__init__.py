"""Directory discovery: plex.tv calls, normalization and connection policy."""

from __future__ import annotations

from .normalize import (
    normalize_connections,
    normalize_sections,
    normalize_servers,
    to_auth_pin,
    to_plex_connection,
    to_plex_section,
    to_plex_server,
    to_plex_user,
)
from .plex_tv import DirectoryClient
from .pms import get_sections
from .policy import filter_connections

__all__ = [
    "DirectoryClient",
    "filter_connections",
    "get_sections",
    "normalize_connections",
    "normalize_sections",
    "normalize_servers",
    "to_auth_pin",
    "to_plex_connection",
    "to_plex_section",
    "to_plex_server",
    "to_plex_user",
]
