from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PLEX_API_URL = "https://plex.tv/api/v2"
DEFAULT_PLEX_PRODUCT = "Plexio"
DEFAULT_PROBE_TIMEOUT = 25.0


class Settings(BaseSettings):
    """Application configuration settings."""

    plex_api_url: str = Field(
        default=DEFAULT_PLEX_API_URL, validation_alias="PLEX_API_URL"
    )
    plex_product: str = Field(
        default=DEFAULT_PLEX_PRODUCT, validation_alias="PLEX_PRODUCT"
    )
    local_discovery: bool = Field(
        default=False,
        validation_alias=AliasChoices("LOCAL_DISCOVERY", "VITE_LOCAL_DISCOVERY"),
    )
    public_origin: str = Field(
        default="http://localhost:8000", validation_alias="PLEXIO_ORIGIN"
    )
    client_scheme: str = Field(default="stremio", validation_alias="CLIENT_SCHEME")
    probe_timeout: float = Field(
        default=DEFAULT_PROBE_TIMEOUT, gt=0, validation_alias="PROBE_TIMEOUT"
    )

    @field_validator("local_discovery", mode="before")
    @classmethod
    def _parse_local_discovery(cls, value: object) -> bool:
        # Only the literal string "true" opts in; unknown values keep local
        # connections hidden.
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return False

    @field_validator("plex_api_url", "public_origin", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    model_config = SettingsConfigDict(case_sensitive=False)


__all__ = ["Settings", "DEFAULT_PLEX_API_URL", "DEFAULT_PROBE_TIMEOUT"]
