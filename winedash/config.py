"""Dashboard configuration.

All settings come from environment variables prefixed with ``WINEDASH_``
(or a local ``.env``), e.g. ``WINEDASH_API_BASE_URL=http://api:8001``.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEOJSON_URL = "https://raw.githubusercontent.com/johan/world.geo.json/master/countries.geo.json"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class DashboardSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WINEDASH_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    api_base_url: str = Field(default="http://localhost:8001", min_length=8, description="Backend root URL.")
    http_timeout_seconds: float = Field(default=20.0, gt=0, description="Timeout per request (seconds).")
    user_agent: str = Field(default="wine-dashboard/0.1", min_length=1)
    geojson_url: str = Field(default=DEFAULT_GEOJSON_URL, description="World polygons keyed by properties.name.")

    country_min_wines: int = Field(default=50, ge=0)
    bucket_page_size: int = Field(default=10, ge=1, le=200)
    country_first_page_size: int = Field(default=10, ge=1, le=200)
    country_page_size: int = Field(default=20, ge=1, le=200)
    scatter_page_size: int = Field(default=300, ge=1, le=5000)
    search_page_size: int = Field(default=20, ge=1, le=100)
    price_bucket_width: float = Field(default=10, gt=0)
    points_bucket_width: float = Field(default=1, gt=0)

    rag_cache_size: int = Field(default=64, ge=1)
    cache_ttl_seconds: int = Field(default=300, ge=0)
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> DashboardSettings:
    return DashboardSettings()


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    if getattr(configure_logging, "_configured", False):
        return
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    root.debug("logging configured at %s", level_name)
    configure_logging._configured = True  # type: ignore[attr-defined]
