"""Encode a configuration into the addon install URL.

The payload is canonical JSON (camelCase keys, sorted, compact) wrapped in
URL-safe base64, so decoding and re-encoding yields the same bytes. The
leading UUID segment only keeps identical payloads from sharing a URL.

Decoders must use the URL-safe alphabet (``-`` and ``_``), for example
``base64.urlsafe_b64decode``; a standard-alphabet decoder corrupts those two
characters.
"""

from __future__ import annotations

import base64
import json
import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .common.types import Configuration, PlexSection
from .common.urls import to_client_scheme

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
DEFAULT_CLIENT_SCHEME = "stremio"


@dataclass(frozen=True)
class InstallUrls:
    """The copyable ``https`` URL and its client hand-off counterpart."""

    url: str
    client_url: str


def select_known_sections(
    selected: Iterable[PlexSection], known: Iterable[PlexSection]
) -> tuple[PlexSection, ...]:
    """Drop selections whose key is no longer served by the server."""

    known_keys = {section.key for section in known}
    return tuple(section for section in selected if section.key in known_keys)


def augment_configuration(
    configuration: Configuration,
    known_sections: Iterable[PlexSection],
    *,
    version: str,
    access_token: str,
) -> Configuration:
    sections = select_known_sections(configuration.sections, known_sections)
    dropped = len(configuration.sections) - len(sections)
    if dropped:
        logger.info("Dropped %d stale section(s) from configuration", dropped)
    return configuration.model_copy(
        update={
            "sections": sections,
            "version": version,
            "access_token": access_token,
        }
    )


def encode_payload(payload: Mapping[str, Any]) -> str:
    text = json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def encode_configuration(configuration: Configuration) -> str:
    payload = configuration.model_dump(mode="json", by_alias=True, exclude_none=True)
    return encode_payload(payload)


def decode_configuration(encoded: str) -> dict[str, Any]:
    """Inverse of :func:`encode_configuration`, returning the raw mapping."""

    text = base64.urlsafe_b64decode(encoded.encode("ascii")).decode("utf-8")
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("Encoded configuration must decode to a JSON object")
    return payload


def build_install_url(
    origin: str, encoded: str, *, install_id: uuid.UUID | str | None = None
) -> str:
    segment = install_id if install_id is not None else uuid.uuid4()
    return f"{origin.rstrip('/')}/{segment}/{encoded}/{MANIFEST_NAME}"


def encode(
    configuration: Configuration,
    known_sections: Iterable[PlexSection],
    *,
    origin: str,
    version: str,
    access_token: str,
    client_scheme: str = DEFAULT_CLIENT_SCHEME,
) -> InstallUrls:
    """Filter, augment and encode *configuration* into both install URLs."""

    augmented = augment_configuration(
        configuration, known_sections, version=version, access_token=access_token
    )
    url = build_install_url(origin, encode_configuration(augmented))
    return InstallUrls(url=url, client_url=to_client_scheme(url, client_scheme))


__all__ = [
    "DEFAULT_CLIENT_SCHEME",
    "InstallUrls",
    "MANIFEST_NAME",
    "augment_configuration",
    "build_install_url",
    "decode_configuration",
    "encode",
    "encode_configuration",
    "encode_payload",
    "select_known_sections",
]
