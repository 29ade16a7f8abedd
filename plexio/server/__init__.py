"""Starlette backend answering reachability checks for the configurator."""

from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import urlsplit

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .. import __version__
from ..config import Settings
from ..probe import TEST_CONNECTION_PATH, is_server_alive_local

logger = logging.getLogger(__name__)

HEALTH_PATH = "/api/v1/health"

HttpClientFactory = Callable[[], httpx.AsyncClient]


def _default_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=False)


def create_app(
    settings: Settings | None = None,
    *,
    http_client_factory: HttpClientFactory | None = None,
) -> Starlette:
    """Build the backend application.

    ``GET /api/v1/test-connection`` probes the given server URL from the
    backend's side of any firewall and reports ``{"success": bool}``.
    """

    app_settings = settings or Settings()
    client_factory = http_client_factory or _default_http_client

    async def test_connection(request: Request) -> Response:
        url = request.query_params.get("url", "").strip()
        token = request.query_params.get("token", "")
        if not url:
            return JSONResponse(
                {"success": False, "error": "Missing url parameter"}, status_code=400
            )
        if urlsplit(url).scheme.lower() not in ("http", "https"):
            return JSONResponse(
                {"success": False, "error": "url must use http or https"},
                status_code=400,
            )
        async with client_factory() as client:
            alive = await is_server_alive_local(
                client, url, token, timeout=app_settings.probe_timeout
            )
        logger.info("Backend probe of %s: %s", url, "alive" if alive else "dead")
        return JSONResponse({"success": alive})

    async def health(request: Request) -> Response:  # noqa: ARG001
        return JSONResponse({"status": "ok", "version": __version__})

    app = Starlette(
        routes=[
            Route(TEST_CONNECTION_PATH, test_connection, methods=["GET"]),
            Route(HEALTH_PATH, health, methods=["GET"]),
        ]
    )
    app.state.settings = app_settings
    return app


settings = Settings()
app = create_app(settings)


def main(argv: list[str] | None = None) -> None:
    """Entry point retained for ``python -m plexio.server`` style callers."""

    from .cli import main as cli_main

    cli_main(argv)


__all__ = ["HEALTH_PATH", "app", "create_app", "main", "settings"]
