"""Shared records and helpers for the discovery, probe and encoder modules."""

from __future__ import annotations

from .types import (
    AuthPin,
    Configuration,
    PlexConnection,
    PlexSection,
    PlexServer,
    PlexUser,
)
from .urls import parse_url_to_ip_port, to_client_scheme
from .validation import to_boolean, to_number_from_unknown, to_string_or_null

__all__ = [
    "AuthPin",
    "Configuration",
    "PlexConnection",
    "PlexSection",
    "PlexServer",
    "PlexUser",
    "parse_url_to_ip_port",
    "to_client_scheme",
    "to_boolean",
    "to_number_from_unknown",
    "to_string_or_null",
]
