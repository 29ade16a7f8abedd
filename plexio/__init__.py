"""plexio package."""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("plexio")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
