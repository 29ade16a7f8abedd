"""Domain records produced by the normalizer and consumed by the encoder."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PlexSectionType = Literal["show", "movie"]
ConnectionKind = Literal["local", "relay", "public"]


class _PlexRecord(BaseModel):
    """Immutable record that serializes with the camelCase wire names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class AuthPin(_PlexRecord):
    """Short-lived pin exchanged once for an auth token."""

    id: str
    code: str


class PlexUser(_PlexRecord):
    username: str
    thumb: str = ""


class PlexConnection(_PlexRecord):
    """One endpoint through which a server may be reached."""

    uri: str = Field(min_length=1)
    address: str = Field(min_length=1)
    port: int = Field(ge=0)
    local: bool
    relay: bool

    @property
    def kind(self) -> ConnectionKind:
        if self.local:
            return "local"
        if self.relay:
            return "relay"
        return "public"

    @property
    def label(self) -> str:
        return f"{self.address}:{self.port}"


class PlexServer(_PlexRecord):
    """A directory resource that provides a Plex Media Server."""

    name: str = Field(min_length=1)
    source_title: str | None = None
    public_address: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    relay: bool
    owned: bool
    https_required: bool
    connections: tuple[PlexConnection, ...] = ()

    def find_connection(self, uri: str) -> PlexConnection | None:
        for connection in self.connections:
            if connection.uri == uri:
                return connection
        return None


class PlexSection(_PlexRecord):
    """A library section on a media server."""

    key: str
    title: str
    type: PlexSectionType


class Configuration(_PlexRecord):
    """User-authored addon configuration, encoded into the install URL."""

    server_name: str
    discovery_url: str
    streaming_url: str
    sections: tuple[PlexSection, ...] = ()
    include_transcode_original: bool = False
    include_transcode_down: bool = False
    include_plex_tv: bool = False
    version: str | None = None
    access_token: str | None = None


__all__ = [
    "AuthPin",
    "PlexUser",
    "PlexConnection",
    "PlexServer",
    "PlexSection",
    "PlexSectionType",
    "ConnectionKind",
    "Configuration",
]
