"""Application configuration using Pydantic Settings v2.

Loads configuration from environment variables with .env file support.
All settings are validated at startup and available as typed attributes.
"""

from __future__ import annotations

import functools
import json
from typing import Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ValueDock ROI engine settings.

    Configuration is loaded from environment variables.
    A .env file in the project root is also read if present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────
    app_name: str = "ValueDock ROI Engine"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ── Backend ──────────────────────────────────────────────────
    backend_host: str = "0.0.0.0"  # noqa: S104 - intentional for container deployments  # nosec B104
    backend_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # ── ROI Calculation ──────────────────────────────────────────
    roi_default_time_horizon_months: int = 36
    roi_min_time_horizon_months: int = 12
    roi_max_time_horizon_months: int = 120
    roi_default_cashflow_months: int = 24

    # ── ROI Controller (debounce gate) ───────────────────────────
    roi_min_rerun_ms: int = 200

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from JSON string or list."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(item) for item in parsed]
            except (json.JSONDecodeError, TypeError):
                return [origin.strip() for origin in v.split(",")]
        if isinstance(v, list):
            return [str(item) for item in v]
        return ["http://localhost:3000"]

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Accept log levels in any case."""
        return str(v).upper()

    @model_validator(mode="after")
    def check_time_horizon_bounds(self) -> Settings:
        """The default horizon must sit inside the allowed range."""
        if self.roi_min_time_horizon_months > self.roi_max_time_horizon_months:
            raise ValueError("roi_min_time_horizon_months must not exceed roi_max_time_horizon_months")
        if not (
            self.roi_min_time_horizon_months
            <= self.roi_default_time_horizon_months
            <= self.roi_max_time_horizon_months
        ):
            raise ValueError("roi_default_time_horizon_months must lie within the min/max horizon")
        return self

    @property
    def roi_min_rerun_seconds(self) -> float:
        """Debounce interval expressed in seconds."""
        return self.roi_min_rerun_ms / 1000.0


@functools.lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()
