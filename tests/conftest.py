import sys
from pathlib import Path

import pytest

# Ensure package root is importable when tests are executed directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_SETTINGS_ENV = (
    "PLEX_API_URL",
    "PLEX_PRODUCT",
    "LOCAL_DISCOVERY",
    "VITE_LOCAL_DISCOVERY",
    "PLEXIO_ORIGIN",
    "CLIENT_SCHEME",
    "PROBE_TIMEOUT",
    "PLEXIO_HOST",
    "PLEXIO_PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """Keep the developer's environment out of Settings()."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
