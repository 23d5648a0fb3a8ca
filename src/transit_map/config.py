"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "Transit Map API"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Agency feed location
    agency: str = Field(
        default="autobusosalmassora",
        validation_alias=AliasChoices("AGENCY", "GTFS_AGENCY"),
    )
    data_base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATA_BASE_URL", "GTFS_DATA_BASE_URL"),
    )
    data_dir: str = Field(
        default="./data",
        validation_alias=AliasChoices("DATA_DIR", "GTFS_DATA_DIR"),
    )
    load_on_startup: bool = True

    # Resource fetching
    fetch_timeout_sec: int = 30
    fetch_max_retries: int = Field(default=3, ge=1, le=10)
    fetch_backoff_base: float = 2.0

    # Departures board
    max_upcoming_departures: int = Field(default=3, ge=1, le=20)
    imminent_threshold_min: float = 1.0
    timezone: str = "Europe/Madrid"

    # Map presentation
    default_route_color: str = "007bff"
    map_center_lat: float = 39.95
    map_center_lon: float = -0.07
    map_zoom: int = 13
    map_tile_url: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
    map_tile_attribution: str = "\u00a9 OpenStreetMap"
    cluster_max_radius: int = Field(default=80, ge=1)
    disable_clustering_at_zoom: int = Field(default=16, ge=0, le=22)

    def resource_location(self, resource: str) -> str:
        """Return the URL or filesystem path of a feed resource for the agency."""
        if self.data_base_url:
            return f"{self.data_base_url.rstrip('/')}/{self.agency}/{resource}"
        return f"{self.data_dir.rstrip('/')}/{self.agency}/{resource}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
