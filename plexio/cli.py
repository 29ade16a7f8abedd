"""Command-line configurator: pin login, server choice and install URL."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlencode

import click
import httpx

from . import __version__
from .common.types import PlexServer
from .common.urls import parse_url_to_ip_port
from .config import Settings
from .discovery.plex_tv import DirectoryClient
from .encoder import InstallUrls
from .errors import MissingTokenError, PlexioError
from .probe import ProbeResult, is_server_alive_local, is_server_alive_remote
from .session import ConfigurationSession

logger = logging.getLogger(__name__)

PLEX_AUTH_URL = "https://app.plex.tv/auth#"

Echo = Callable[[str], None]


@dataclass
class ConfigureOptions:
    """Choices collected from the command line."""

    client_identifier: str
    server: str | None = None
    discovery_url: str | None = None
    streaming_url: str | None = None
    sections: tuple[str, ...] = ()
    include_transcode_original: bool = False
    include_transcode_down: bool = False
    include_plex_tv: bool = False
    poll_interval: float = 2.0
    poll_timeout: float = 300.0
    probe: bool = False


def auth_link(client_identifier: str, code: str, product: str) -> str:
    query = urlencode(
        {
            "clientID": client_identifier,
            "code": code,
            "context[device][product]": product,
        }
    )
    return f"{PLEX_AUTH_URL}?{query}"


async def wait_for_token(
    directory: DirectoryClient,
    options: ConfigureOptions,
    echo: Echo,
    product: str,
) -> str:
    """Create a pin and poll it until the user approves or time runs out."""

    pin = await directory.create_auth_pin(options.client_identifier)
    link = auth_link(options.client_identifier, pin.code, product)
    echo(f"Approve access at: {link}")

    deadline = time.monotonic() + options.poll_timeout
    while True:
        try:
            return await directory.get_auth_token(pin, options.client_identifier)
        except MissingTokenError:
            if time.monotonic() >= deadline:
                raise
            logger.debug("Pin %s not approved yet", pin.id)
        await asyncio.sleep(options.poll_interval)


def choose_server(servers: list[PlexServer], name: str | None) -> str:
    if name is not None:
        return name
    if len(servers) == 1:
        return servers[0].name
    names = ", ".join(server.name for server in servers) or "none"
    raise click.UsageError(f"Choose a server with --server (available: {names})")


async def _probe(
    client: httpx.AsyncClient,
    settings: Settings,
    session: ConfigurationSession,
    echo: Echo,
) -> dict[str, ProbeResult]:
    server = session.server
    assert server is not None
    assert session.discovery_url is not None and session.streaming_url is not None
    remote, local = await asyncio.gather(
        is_server_alive_remote(
            client,
            settings.public_origin,
            session.discovery_url,
            server.access_token,
            timeout=settings.probe_timeout,
        ),
        is_server_alive_local(
            client,
            session.streaming_url,
            server.access_token,
            timeout=settings.probe_timeout,
        ),
    )
    results = {
        "discovery": ProbeResult.from_verdict(remote),
        "streaming": ProbeResult.from_verdict(local),
    }
    echo(
        f"Discovery URL {parse_url_to_ip_port(session.discovery_url)}: "
        f"{results['discovery'].value}"
    )
    echo(
        f"Streaming URL {parse_url_to_ip_port(session.streaming_url)}: "
        f"{results['streaming'].value}"
    )
    return results


async def run(
    settings: Settings,
    options: ConfigureOptions,
    *,
    http_client: httpx.AsyncClient | None = None,
    echo: Echo = click.echo,
) -> InstallUrls:
    """Walk the whole configuration flow and return the install URLs."""

    owns_client = http_client is None
    client = http_client or httpx.AsyncClient()
    try:
        directory = DirectoryClient(
            client,
            api_url=settings.plex_api_url,
            product=settings.plex_product,
            local_discovery=settings.local_discovery,
            timeout=settings.probe_timeout,
        )
        token = await wait_for_token(directory, options, echo, settings.plex_product)
        user = await directory.get_plex_user(token, options.client_identifier)
        if user is not None:
            echo(f"Signed in as {user.username}")

        servers = await directory.get_plex_servers(token, options.client_identifier)
        session = ConfigurationSession(servers)
        server = session.select_server(choose_server(servers, options.server))
        if not server.connections:
            raise click.ClickException(
                f"Server {server.name!r} has no usable connections"
            )

        discovery_url = options.discovery_url or server.connections[0].uri
        session.select_discovery_url(discovery_url)
        session.select_streaming_url(options.streaming_url or discovery_url)

        sections = await session.load_sections(client)
        keys = options.sections or tuple(section.key for section in sections)
        session.build_configuration(
            keys,
            include_transcode_original=options.include_transcode_original,
            include_transcode_down=options.include_transcode_down,
            include_plex_tv=options.include_plex_tv,
        )
        if options.probe:
            await _probe(client, settings, session, echo)

        urls = session.install_urls(
            settings.public_origin, __version__, client_scheme=settings.client_scheme
        )
    finally:
        if owns_client:
            await client.aclose()

    echo(f"Install URL: {urls.url}")
    echo(f"Client URL: {urls.client_url}")
    return urls


@click.command()
@click.option(
    "--client-identifier",
    envvar="PLEX_CLIENT_IDENTIFIER",
    show_envvar=True,
    default=lambda: str(uuid.uuid4()),
    help="Client identifier sent to plex.tv (random by default)",
)
@click.option("--server", "server_name", help="Name of the server to configure")
@click.option("--discovery-url", help="Connection URI used by the backend")
@click.option("--streaming-url", help="Connection URI used for playback")
@click.option(
    "--section",
    "sections",
    multiple=True,
    help="Library section key to include (repeatable, default: all)",
)
@click.option("--include-transcode-original", is_flag=True, default=False)
@click.option("--include-transcode-down", is_flag=True, default=False)
@click.option("--include-plex-tv", is_flag=True, default=False)
@click.option(
    "--poll-interval",
    type=click.FloatRange(min=0.0),
    default=2.0,
    show_default=True,
    help="Seconds between auth pin checks",
)
@click.option(
    "--poll-timeout",
    type=click.FloatRange(min=0.0),
    default=300.0,
    show_default=True,
    help="Give up waiting for pin approval after this many seconds",
)
@click.option(
    "--probe/--no-probe",
    default=False,
    show_default=True,
    help="Test the chosen URLs before printing the install URL",
)
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    show_envvar=True,
    type=click.Choice(
        ["critical", "error", "warning", "info", "debug", "notset"],
        case_sensitive=False,
    ),
    default="warning",
    show_default=True,
    help="Logging level for console output",
)
def main(
    client_identifier: str,
    server_name: str | None,
    discovery_url: str | None,
    streaming_url: str | None,
    sections: tuple[str, ...],
    include_transcode_original: bool,
    include_transcode_down: bool,
    include_plex_tv: bool,
    poll_interval: float,
    poll_timeout: float,
    probe: bool,
    log_level: str,
) -> None:
    """Entry-point for the ``plexio-configure`` script."""

    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.INFO))

    options = ConfigureOptions(
        client_identifier=client_identifier,
        server=server_name,
        discovery_url=discovery_url,
        streaming_url=streaming_url,
        sections=sections,
        include_transcode_original=include_transcode_original,
        include_transcode_down=include_transcode_down,
        include_plex_tv=include_plex_tv,
        poll_interval=poll_interval,
        poll_timeout=poll_timeout,
        probe=probe,
    )
    try:
        asyncio.run(run(Settings(), options))
    except MissingTokenError as exc:
        raise click.ClickException("Timed out waiting for pin approval") from exc
    except PlexioError as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":
    main()
