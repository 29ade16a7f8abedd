import asyncio

import httpx
import pytest

from plexio.common.types import PlexConnection, PlexSection, PlexServer
from plexio.encoder import decode_configuration
from plexio.errors import SessionStateError, UpstreamError
from plexio.session import ConfigurationSession, SessionState

PUBLIC = PlexConnection(
    uri="https://1-2-3-4.x.plex.direct:32400",
    address="1.2.3.4",
    port=32400,
    local=False,
    relay=False,
)
RELAY = PlexConnection(
    uri="https://5-6-7-8.x.plex.direct:8443",
    address="5.6.7.8",
    port=8443,
    local=False,
    relay=True,
)
SERVER = PlexServer(
    name="Living Room",
    public_address="1.2.3.4",
    access_token="server-token",
    relay=True,
    owned=True,
    https_required=False,
    connections=(PUBLIC, RELAY),
)
OTHER = SERVER.model_copy(update={"name": "Cabin", "access_token": "cabin-token"})
SECTIONS_PAYLOAD = {
    "MediaContainer": {
        "Directory": [
            {"key": "1", "title": "Movies", "type": "movie"},
            {"key": "2", "title": "TV", "type": "show"},
        ]
    }
}


def _load(session, handler):
    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await session.load_sections(client)

    return asyncio.run(main())


def _ready_session():
    session = ConfigurationSession([SERVER, OTHER])
    session.select_server("Living Room")
    session.select_discovery_url(PUBLIC.uri)
    session.select_streaming_url(RELAY.uri)
    _load(session, lambda request: httpx.Response(200, json=SECTIONS_PAYLOAD))
    return session


def test_initial_state_is_idle():
    session = ConfigurationSession([SERVER])
    assert session.state is SessionState.IDLE
    assert session.server is None


def test_select_unknown_server():
    session = ConfigurationSession([SERVER])
    with pytest.raises(SessionStateError, match="Unknown server"):
        session.select_server("Nope")
    assert session.state is SessionState.IDLE


def test_urls_require_a_server_and_known_connection():
    session = ConfigurationSession([SERVER])
    with pytest.raises(SessionStateError):
        session.select_discovery_url(PUBLIC.uri)
    session.select_server("Living Room")
    with pytest.raises(SessionStateError):
        session.select_discovery_url("https://elsewhere:1")
    with pytest.raises(SessionStateError):
        session.select_streaming_url("https://elsewhere:1")


def test_loading_requires_discovery_url():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    with pytest.raises(SessionStateError):
        session.begin_sections_load()


def test_full_flow_reaches_sections_ready():
    seen = {}

    def handler(request):
        seen["host"] = request.url.host
        seen["token"] = request.url.params["X-Plex-Token"]
        return httpx.Response(200, json=SECTIONS_PAYLOAD)

    session = ConfigurationSession([SERVER, OTHER])
    session.select_server("Living Room")
    assert session.state is SessionState.SERVER_SELECTED
    session.select_discovery_url(PUBLIC.uri)
    sections = _load(session, handler)

    assert session.state is SessionState.SECTIONS_READY
    assert [s.key for s in sections] == ["1", "2"]
    assert seen == {"host": "1-2-3-4.x.plex.direct", "token": "server-token"}


def test_failed_load_returns_to_server_selected():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    session.select_discovery_url(PUBLIC.uri)
    with pytest.raises(UpstreamError):
        _load(session, lambda request: httpx.Response(500))
    assert session.state is SessionState.SERVER_SELECTED
    assert session.sections == ()


def test_sections_loaded_requires_loading_state():
    session = ConfigurationSession([SERVER])
    with pytest.raises(SessionStateError):
        session.sections_loaded(0, [])
    with pytest.raises(SessionStateError):
        session.sections_failed(0)


def test_begin_sections_load_twice_is_rejected():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    session.select_discovery_url(PUBLIC.uri)
    generation = session.begin_sections_load()
    assert session.state is SessionState.SECTIONS_LOADING
    with pytest.raises(SessionStateError):
        session.begin_sections_load()
    movies = PlexSection(key="1", title="Movies", type="movie")
    assert session.sections_loaded(generation, [movies]) is True
    assert session.state is SessionState.SECTIONS_READY


def test_selecting_a_new_server_resets_progress():
    session = _ready_session()
    session.select_server("Cabin")
    assert session.state is SessionState.SERVER_SELECTED
    assert session.discovery_url is None
    assert session.streaming_url is None
    assert session.sections == ()


def test_changing_discovery_url_invalidates_sections():
    session = _ready_session()
    session.select_discovery_url(RELAY.uri)
    assert session.state is SessionState.SERVER_SELECTED
    assert session.sections == ()


def test_build_configuration_requires_ready_state():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    with pytest.raises(SessionStateError):
        session.build_configuration(["1"])


def test_build_configuration_requires_streaming_url():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    session.select_discovery_url(PUBLIC.uri)
    _load(session, lambda request: httpx.Response(200, json=SECTIONS_PAYLOAD))
    with pytest.raises(SessionStateError, match="streaming"):
        session.build_configuration(["1"])


def test_build_configuration_and_install_urls():
    session = _ready_session()
    configuration = session.build_configuration(
        ["2", "missing"], include_plex_tv=True
    )

    assert configuration.server_name == "Living Room"
    assert configuration.discovery_url == PUBLIC.uri
    assert configuration.streaming_url == RELAY.uri
    assert [s.key for s in configuration.sections] == ["2"]
    assert configuration.include_plex_tv is True

    urls = session.install_urls("https://plexio.test", "9.9.9")
    payload = decode_configuration(urls.url.split("/")[4])
    assert payload["accessToken"] == "server-token"
    assert payload["version"] == "9.9.9"
    assert payload["includePlexTv"] is True
    assert urls.client_url.startswith("stremio://plexio.test/")


def test_install_urls_require_configuration():
    session = _ready_session()
    with pytest.raises(SessionStateError):
        session.install_urls("https://plexio.test", "1")


def test_results_of_a_superseded_load_are_discarded():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    session.select_discovery_url(PUBLIC.uri)
    stale = session.begin_sections_load()

    session.select_discovery_url(RELAY.uri)
    current = session.begin_sections_load()

    stale_sections = [PlexSection(key="9", title="Old", type="movie")]
    assert session.sections_loaded(stale, stale_sections) is False
    assert session.sections_failed(stale) is False
    assert session.state is SessionState.SECTIONS_LOADING

    tv = PlexSection(key="2", title="TV", type="show")
    assert session.sections_loaded(current, [tv]) is True
    assert session.state is SessionState.SECTIONS_READY
    assert session.sections == (tv,)


def test_load_finishing_after_url_change_does_not_overwrite_sections():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    session.select_discovery_url(PUBLIC.uri)

    async def main():
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "1-2-3-4.x.plex.direct":
                await release.wait()
                return httpx.Response(
                    200,
                    json={
                        "MediaContainer": {
                            "Directory": [
                                {"key": "9", "title": "Old", "type": "movie"}
                            ]
                        }
                    },
                )
            return httpx.Response(200, json=SECTIONS_PAYLOAD)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            first = asyncio.create_task(session.load_sections(client))
            await asyncio.sleep(0)
            assert session.state is SessionState.SECTIONS_LOADING

            session.select_discovery_url(RELAY.uri)
            second = await session.load_sections(client)
            release.set()
            return await first, second

    first, second = asyncio.run(main())

    assert first == ()
    assert [s.key for s in second] == ["1", "2"]
    assert session.discovery_url == RELAY.uri
    assert session.state is SessionState.SECTIONS_READY
    assert [s.key for s in session.sections] == ["1", "2"]


def test_cancelled_load_returns_to_server_selected():
    session = ConfigurationSession([SERVER])
    session.select_server("Living Room")
    session.select_discovery_url(PUBLIC.uri)

    async def main():
        never = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await never.wait()
            return httpx.Response(200, json=SECTIONS_PAYLOAD)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            task = asyncio.create_task(session.load_sections(client))
            await asyncio.sleep(0)
            assert session.state is SessionState.SECTIONS_LOADING
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

    asyncio.run(main())

    assert session.state is SessionState.SERVER_SELECTED
    assert session.begin_sections_load() > 0
