"""URL helpers shared by the prober, encoder and command line tools."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

__all__ = ["parse_url_to_ip_port", "to_client_scheme", "DEFAULT_PORTS"]

DEFAULT_PORTS = {"https": 443, "http": 80}

_HYPHENATED_IP_RE = re.compile(r"^\d+-\d+-\d+-\d+$")
_HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def parse_url_to_ip_port(url: str) -> str:
    """Return ``host:port`` for *url*, expanding plex.direct style hostnames.

    Hostnames such as ``12-34-56-78.<hash>.plex.direct`` carry the server's IP
    in their first label, so they are reported as ``12.34.56.78``. Missing
    ports fall back to the scheme default.
    """

    parts = urlsplit(url)
    hostname = parts.hostname or ""
    if _HYPHENATED_IP_RE.match(hostname):
        hostname = hostname.replace("-", ".")
    else:
        first, _, rest = hostname.partition(".")
        if rest and _HYPHENATED_IP_RE.match(first):
            hostname = first.replace("-", ".")

    port = parts.port or DEFAULT_PORTS.get(parts.scheme.lower())
    return f"{hostname}:{port}" if port else hostname


def to_client_scheme(url: str, scheme: str = "stremio") -> str:
    """Rewrite a leading ``http://``/``https://`` to ``{scheme}://``."""

    return _HTTP_SCHEME_RE.sub(f"{scheme}://", url, count=1)
