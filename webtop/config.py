from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyHttpUrl, Field

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost",
    "http://127.0.0.1",
    "http://localhost:5173",
    "http://localhost:3000",
]

DEFAULT_WALLPAPER = "https://cdn.mos.cms.futurecdn.net/AoWXgnHSxAAPxqymPQMQYL-1200-80.jpg"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- Backend API ---
    backend_url: AnyHttpUrl = Field(default="http://localhost:3001", validation_alias="BACKEND_URL")
    request_timeout: float = Field(default=30.0, validation_alias="REQUEST_TIMEOUT")
    container_request_timeout: float = Field(default=30.0, validation_alias="CONTAINER_REQUEST_TIMEOUT")
    backend_retries: int = Field(default=0, validation_alias="BACKEND_RETRIES")

    # --- Storage / logs ---
    data_dir: str = Field(default="data", validation_alias="DATA_DIR")
    log_dir: str = Field(default="logs", validation_alias="LOG_DIR")
    log_to_files: bool = Field(default=True, validation_alias="LOG_TO_FILES")

    # --- CORS ---
    cors_allowed_origins: str = Field(default=",".join(DEFAULT_ALLOWED_ORIGINS), validation_alias="CORS_ALLOWED_ORIGINS")

    # --- Window manager ---
    viewport_width: int = Field(default=1920, validation_alias="VIEWPORT_WIDTH")
    viewport_height: int = Field(default=1040, validation_alias="VIEWPORT_HEIGHT")
    layout_gap: int = Field(default=8, validation_alias="LAYOUT_GAP")
    default_layout_mode: str = Field(default="tiling", validation_alias="DEFAULT_LAYOUT_MODE")
    snap_enabled: bool = Field(default=True, validation_alias="SNAP_ENABLED")
    snap_threshold: int = Field(default=20, validation_alias="SNAP_THRESHOLD")
    desktop_count: int = Field(default=4, validation_alias="DESKTOP_COUNT")

    # --- Launcher ---
    launcher_result_limit: int = Field(default=50, validation_alias="LAUNCHER_RESULT_LIMIT")
    fuzzy_threshold: float = Field(default=0.4, validation_alias="FUZZY_THRESHOLD")
    default_package_query: str = Field(default="firefox gimp vlc", validation_alias="DEFAULT_PACKAGE_QUERY")

    # --- Preferences defaults ---
    default_wallpaper: str = Field(default=DEFAULT_WALLPAPER, validation_alias="DEFAULT_WALLPAPER")
    default_window_opacity: float = Field(default=0.95, validation_alias="DEFAULT_WINDOW_OPACITY")
    default_use_gradient: bool = Field(default=False, validation_alias="DEFAULT_USE_GRADIENT")

    # Optional bearer token forwarded to the backend
    backend_token: Optional[str] = Field(default=None, validation_alias="BACKEND_TOKEN")


@lru_cache
def get_settings() -> Settings:
    return Settings()
