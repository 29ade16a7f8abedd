"""Validate raw plex.tv and server payloads into domain records.

Each ``to_*`` function returns the record or ``None``; a ``None`` means the raw
element is dropped. Batch helpers keep the valid subset in order and never
raise, so one malformed resource cannot break a listing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, TypeVar

from pydantic import ValidationError

from ..common.types import AuthPin, PlexConnection, PlexSection, PlexServer, PlexUser
from ..common.validation import (
    to_boolean,
    to_non_negative_int,
    to_string_or_null,
)

logger = logging.getLogger(__name__)

SERVER_PROVIDES_MARKER = "server"
SECTION_TYPES = frozenset({"show", "movie"})

RecordT = TypeVar("RecordT")


def _non_empty(value: Any) -> str | None:
    text = to_string_or_null(value)
    return text or None


def to_plex_connection(raw: Any) -> PlexConnection | None:
    if not isinstance(raw, Mapping):
        return None
    uri = _non_empty(raw.get("uri"))
    address = _non_empty(raw.get("address"))
    port = to_non_negative_int(raw.get("port"))
    local = to_boolean(raw.get("local"))
    relay = to_boolean(raw.get("relay"))
    if uri is None or address is None or port is None:
        return None
    if local is None or relay is None:
        return None
    return PlexConnection(uri=uri, address=address, port=port, local=local, relay=relay)


def to_plex_server(raw: Any) -> PlexServer | None:
    """Build a :class:`PlexServer` from a ``/resources`` entry.

    Only resources whose ``provides`` string mentions ``server`` qualify.
    Every required field must coerce cleanly or the whole resource is
    rejected; invalid connections are dropped one by one instead.
    """

    if not isinstance(raw, Mapping):
        return None
    provides = raw.get("provides")
    if not isinstance(provides, str) or SERVER_PROVIDES_MARKER not in provides:
        return None

    name = _non_empty(raw.get("name"))
    public_address = _non_empty(raw.get("publicAddress"))
    access_token = _non_empty(raw.get("accessToken"))
    relay = to_boolean(raw.get("relay"))
    owned = to_boolean(raw.get("owned"))
    https_required = to_boolean(raw.get("httpsRequired"))
    if name is None or public_address is None or access_token is None:
        return None
    if relay is None or owned is None or https_required is None:
        return None

    raw_connections = raw.get("connections")
    if not isinstance(raw_connections, list):
        raw_connections = []

    return PlexServer(
        name=name,
        source_title=to_string_or_null(raw.get("sourceTitle")),
        public_address=public_address,
        access_token=access_token,
        relay=relay,
        owned=owned,
        https_required=https_required,
        connections=tuple(normalize_connections(raw_connections)),
    )


def to_plex_section(raw: Any) -> PlexSection | None:
    if not isinstance(raw, Mapping):
        return None
    key = to_string_or_null(raw.get("key"))
    title = to_string_or_null(raw.get("title"))
    section_type = raw.get("type")
    if key is None or title is None or section_type not in SECTION_TYPES:
        return None
    return PlexSection(key=key, title=title, type=section_type)


def to_auth_pin(raw: Any) -> AuthPin | None:
    # plex.tv answers with a numeric id; keep it as text.
    if not isinstance(raw, Mapping):
        return None
    raw_id = raw.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, (str, int)):
        return None
    pin_id = str(raw_id)
    code = _non_empty(raw.get("code"))
    if not pin_id or code is None:
        return None
    return AuthPin(id=pin_id, code=code)


def to_plex_user(raw: Any) -> PlexUser | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        return PlexUser.model_validate(
            {"username": raw.get("username"), "thumb": raw.get("thumb") or ""}
        )
    except ValidationError:
        return None


def _normalize(
    raw_items: Iterable[Any],
    convert: Callable[[Any], RecordT | None],
    kind: str,
) -> list[RecordT]:
    records: list[RecordT] = []
    for index, raw in enumerate(raw_items):
        record = convert(raw)
        if record is None:
            logger.debug("Skipping malformed %s at index %d", kind, index)
            continue
        records.append(record)
    return records


def normalize_connections(raw_items: Iterable[Any]) -> list[PlexConnection]:
    return _normalize(raw_items, to_plex_connection, "connection")


def normalize_servers(raw_items: Iterable[Any]) -> list[PlexServer]:
    return _normalize(raw_items, to_plex_server, "resource")


def normalize_sections(raw_items: Iterable[Any]) -> list[PlexSection]:
    return _normalize(raw_items, to_plex_section, "section")


__all__ = [
    "SERVER_PROVIDES_MARKER",
    "to_plex_connection",
    "to_plex_server",
    "to_plex_section",
    "to_auth_pin",
    "to_plex_user",
    "normalize_connections",
    "normalize_servers",
    "normalize_sections",
]
