"""Application configuration loading via Pydantic settings."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


_GRAFANA_DASHBOARD_API = "https://grafana.com/api/dashboards/"


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    route_prefix: str = Field(default="badgedata", alias="BADGEDATA_PREFIX")
    grafana_dashboard_api: str = Field(default=_GRAFANA_DASHBOARD_API, alias="GRAFANA_DASHBOARD_API")
    cache_refresh_seconds: int = Field(default=3600, gt=0, alias="CACHE_REFRESH_SECONDS")
    max_ids: int = Field(default=50, gt=0, alias="MAX_IDS")
    fetch_timeout_seconds: float = Field(default=10.0, gt=0, alias="FETCH_TIMEOUT_SECONDS")
    dedupe_ids: bool = Field(default=False, alias="DEDUPE_IDS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("route_prefix")
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        prefix = value.strip("/")
        if not prefix or "/" in prefix:
            raise ValueError("BADGEDATA_PREFIX must be a single non-empty path segment")
        return prefix

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def cache_refresh(self) -> timedelta:
        """Freshness window after which a cached record is fetched again."""

        return timedelta(seconds=self.cache_refresh_seconds)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()  # type: ignore[call-arg]
