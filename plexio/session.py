"""Explicit state machine behind the configuration flow.

``IDLE -> SERVER_SELECTED -> SECTIONS_LOADING -> SECTIONS_READY``. Choosing a
server again from any state starts over; a failed section load falls back to
``SERVER_SELECTED``.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence

import httpx

from .common.types import Configuration, PlexSection, PlexServer
from .discovery.pms import get_sections
from .encoder import DEFAULT_CLIENT_SCHEME, InstallUrls, encode
from .errors import SessionStateError

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    IDLE = "idle"
    SERVER_SELECTED = "server_selected"
    SECTIONS_LOADING = "sections_loading"
    SECTIONS_READY = "sections_ready"


class ConfigurationSession:
    """Tracks the choices that end in an install URL."""

    def __init__(self, servers: Sequence[PlexServer]) -> None:
        self._servers = tuple(servers)
        self._state = SessionState.IDLE
        self._server: PlexServer | None = None
        self._discovery_url: str | None = None
        self._streaming_url: str | None = None
        self._sections: tuple[PlexSection, ...] = ()
        self._configuration: Configuration | None = None
        self._load_generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def servers(self) -> tuple[PlexServer, ...]:
        return self._servers

    @property
    def server(self) -> PlexServer | None:
        return self._server

    @property
    def discovery_url(self) -> str | None:
        return self._discovery_url

    @property
    def streaming_url(self) -> str | None:
        return self._streaming_url

    @property
    def sections(self) -> tuple[PlexSection, ...]:
        return self._sections

    def _require_server(self) -> PlexServer:
        if self._server is None:
            raise SessionStateError("No server selected")
        return self._server

    def _require_connection(self, uri: str) -> str:
        server = self._require_server()
        if server.find_connection(uri) is None:
            raise SessionStateError(f"{uri!r} is not a connection of {server.name!r}")
        return uri

    def select_server(self, name: str) -> PlexServer:
        for server in self._servers:
            if server.name == name:
                break
        else:
            raise SessionStateError(f"Unknown server {name!r}")
        self._server = server
        self._discovery_url = None
        self._streaming_url = None
        self._load_generation += 1
        self._sections = ()
        self._configuration = None
        self._state = SessionState.SERVER_SELECTED
        logger.debug("Selected server %s", name)
        return server

    def select_discovery_url(self, uri: str) -> None:
        self._discovery_url = self._require_connection(uri)
        # Sections belong to the discovery URL they were fetched from.
        self._load_generation += 1
        self._sections = ()
        self._configuration = None
        self._state = SessionState.SERVER_SELECTED

    def select_streaming_url(self, uri: str) -> None:
        self._streaming_url = self._require_connection(uri)

    def begin_sections_load(self) -> int:
        """Enter ``SECTIONS_LOADING`` and return the generation of this load.

        Choosing another server or discovery URL bumps the generation, so
        results reported with an older one are discarded.
        """

        self._require_server()
        if self._discovery_url is None:
            raise SessionStateError("Select a discovery URL before loading sections")
        if self._state is SessionState.SECTIONS_LOADING:
            raise SessionStateError("Sections are already loading")
        self._load_generation += 1
        self._state = SessionState.SECTIONS_LOADING
        return self._load_generation

    def _is_current(self, generation: int) -> bool:
        if generation != self._load_generation:
            logger.debug("Discarding superseded section load %d", generation)
            return False
        return True

    def sections_loaded(
        self, generation: int, sections: Iterable[PlexSection]
    ) -> bool:
        if not self._is_current(generation):
            return False
        if self._state is not SessionState.SECTIONS_LOADING:
            raise SessionStateError("No section load in progress")
        self._sections = tuple(sections)
        self._state = SessionState.SECTIONS_READY
        return True

    def sections_failed(self, generation: int) -> bool:
        if not self._is_current(generation):
            return False
        if self._state is not SessionState.SECTIONS_LOADING:
            raise SessionStateError("No section load in progress")
        self._state = SessionState.SERVER_SELECTED
        return True

    async def load_sections(self, client: httpx.AsyncClient) -> tuple[PlexSection, ...]:
        """Fetch sections from the discovery URL and record them.

        Returns an empty tuple when another server or discovery URL was chosen
        while the request was in flight.
        """

        generation = self.begin_sections_load()
        server = self._require_server()
        assert self._discovery_url is not None
        try:
            sections = await get_sections(
                client, self._discovery_url, server.access_token
            )
        except BaseException:
            self.sections_failed(generation)
            raise
        if not self.sections_loaded(generation, sections):
            return ()
        return self._sections

    def build_configuration(
        self,
        section_keys: Iterable[str],
        *,
        include_transcode_original: bool = False,
        include_transcode_down: bool = False,
        include_plex_tv: bool = False,
    ) -> Configuration:
        if self._state is not SessionState.SECTIONS_READY:
            raise SessionStateError("Sections must be loaded before configuring")
        server = self._require_server()
        if self._streaming_url is None:
            raise SessionStateError("Select a streaming URL before configuring")
        assert self._discovery_url is not None

        by_key = {section.key: section for section in self._sections}
        chosen: list[PlexSection] = []
        for key in section_keys:
            section = by_key.get(key)
            if section is None:
                logger.warning("Ignoring unknown section key %s", key)
                continue
            chosen.append(section)

        self._configuration = Configuration(
            server_name=server.name,
            discovery_url=self._discovery_url,
            streaming_url=self._streaming_url,
            sections=tuple(chosen),
            include_transcode_original=include_transcode_original,
            include_transcode_down=include_transcode_down,
            include_plex_tv=include_plex_tv,
        )
        return self._configuration

    def install_urls(
        self,
        origin: str,
        version: str,
        *,
        client_scheme: str = DEFAULT_CLIENT_SCHEME,
    ) -> InstallUrls:
        ready = self._state is SessionState.SECTIONS_READY
        if self._configuration is None or not ready:
            raise SessionStateError("Build a configuration before encoding it")
        server = self._require_server()
        return encode(
            self._configuration,
            self._sections,
            origin=origin,
            version=version,
            access_token=server.access_token,
            client_scheme=client_scheme,
        )


__all__ = ["ConfigurationSession", "SessionState"]
