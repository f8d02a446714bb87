from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_SEED_PATH = Path(__file__).resolve().parent / "data" / "profiles.yaml"


class Settings(BaseSettings):
    """
    Centralized application settings leveraging environment overrides.
    """

    app_name: str = "Profile Directory"
    environment: str = Field("local", validation_alias="ENVIRONMENT")
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field("INFO", description="Level applied to the package logger")
    max_payload_bytes: int = Field(64 * 1024, ge=1024)

    # Store
    seed_profiles_path: Path = DEFAULT_SEED_PATH
    store_read_latency_ms: int = Field(0, ge=0)
    store_write_latency_ms: int = Field(1000, ge=0)
    store_delete_latency_ms: int = Field(800, ge=0)

    # Favorites
    favorites_storage_path: Optional[Path] = Field(
        None, description="JSON file backing the favorites storage; memory when unset"
    )
    favorites_storage_key: str = "favoriteProfiles"

    # Geocoding stub
    geocode_jitter_degrees: float = Field(0.01, ge=0.0)

    # Map
    map_focused_zoom: int = Field(15, ge=0, le=22)
    map_max_fit_zoom: int = Field(15, ge=0, le=22)
    map_default_zoom: int = Field(10, ge=0, le=22)
    map_default_center_lat: float = Field(40.7128, ge=-90.0, le=90.0)
    map_default_center_lng: float = Field(-74.006, ge=-180.0, le=180.0)
    map_viewport_width_px: int = Field(640, ge=1)
    map_viewport_height_px: int = Field(600, ge=1)

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
