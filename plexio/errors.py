"""Exceptions raised by the discovery and configuration layers."""

from __future__ import annotations


class PlexioError(Exception):
    """Base exception for plexio failures surfaced to callers."""


class UpstreamError(PlexioError):
    """A directory or server call failed at the transport or HTTP level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidResponseError(PlexioError):
    """The top-level shape of an upstream response was not what we expected."""


class MissingTokenError(PlexioError):
    """The auth pin has not been approved yet (or has expired)."""


class SessionStateError(PlexioError):
    """A configuration session transition was requested out of order."""


__all__ = [
    "PlexioError",
    "UpstreamError",
    "InvalidResponseError",
    "MissingTokenError",
    "SessionStateError",
]
