"""Command line interface for :mod:`plexio.server`."""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass

import uvicorn

from . import app, settings

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000


@dataclass
class RunConfig:
    """Runtime configuration for the uvicorn server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "info"

    def to_kwargs(self) -> dict[str, object]:
        """Return keyword arguments compatible with ``uvicorn.run``."""

        kwargs: dict[str, object] = {"host": self.host, "port": self.port}
        # uvicorn has no "notset" level
        if self.log_level != "notset":
            kwargs["log_level"] = self.log_level
        return kwargs


def _resolve_log_level(cli_value: str | None) -> str:
    """Return the desired log level name based on CLI or environment input."""

    env_value = os.getenv("LOG_LEVEL")
    if cli_value:
        return cli_value
    if env_value:
        return env_value.lower()
    return "info"


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for running the backend."""

    parser = argparse.ArgumentParser(description="Run the plexio backend")
    parser.add_argument("--bind", help="Host address to bind to (env: PLEXIO_HOST)")
    parser.add_argument(
        "--port", type=int, help="Port to listen on (env: PLEXIO_PORT)"
    )
    parser.add_argument(
        "--probe-timeout",
        type=float,
        default=settings.probe_timeout,
        help="Seconds to wait for a probed server (env: PROBE_TIMEOUT)",
    )
    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=["critical", "error", "warning", "info", "debug", "notset"],
        help="Logging verbosity (env: LOG_LEVEL)",
    )
    args = parser.parse_args(argv)

    env_host = os.getenv("PLEXIO_HOST")
    env_port = os.getenv("PLEXIO_PORT")

    port: int
    if env_port is not None:
        try:
            port = int(env_port)
        except ValueError:
            parser.error("PLEXIO_PORT must be an integer")
    else:
        port = args.port if args.port is not None else DEFAULT_PORT

    if args.probe_timeout <= 0:
        parser.error("--probe-timeout must be positive")
    settings.probe_timeout = args.probe_timeout

    log_level_name = _resolve_log_level(args.log_level)
    logging.basicConfig(level=getattr(logging, log_level_name.upper(), logging.INFO))

    run_config = RunConfig(
        host=env_host or args.bind or DEFAULT_HOST,
        port=port,
        log_level=log_level_name,
    )
    uvicorn.run(app, **run_config.to_kwargs())


__all__ = ["RunConfig", "main", "app", "settings"]
