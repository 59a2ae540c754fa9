"""
API service settings.

Read from environment variables (case-insensitive) and an optional .env
file. Engine constants such as grid size and floor height live in
siteplan.config; this module only covers the HTTP service and the request
limits it enforces.
"""
from functools import lru_cache
from typing import List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from siteplan.config import DEFAULT_MAX_GRID_CELLS, DEFAULT_MAX_RECT_STEPS


class Settings(BaseSettings):
    """HTTP service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ---- server ------------------------------------------------------------
    api_host: str = "0.0.0.0"
    api_port: int = Field(8000, ge=1, le=65535)
    environment: str = "development"
    log_level: str = "info"
    debug: bool = False

    # ---- browser clients (map view and module builder) ---------------------
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    cors_credentials: bool = True

    # ---- per-request geometry limits ---------------------------------------
    max_grid_cells: int = Field(DEFAULT_MAX_GRID_CELLS, gt=0)
    max_rect_steps: int = Field(DEFAULT_MAX_RECT_STEPS, gt=0)

    @property
    def cors_origins_list(self) -> List[str]:
        """Comma-separated CORS_ORIGINS as a list, blanks removed."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @model_validator(mode="after")
    def check_production_origins(self) -> "Settings":
        if self.is_production and any("localhost" in o.lower() for o in self.cors_origins_list):
            raise ValueError("CORS_ORIGINS must not include localhost in production")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Settings instance, built once per process."""
    return Settings()


settings = get_settings()
