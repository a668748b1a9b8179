"""Application configuration using Pydantic Settings."""

import json
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BODY_METHODS = ("POST", "PUT", "PATCH")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ----- Application -----
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False

    # ----- Server -----
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    timeout_keep_alive: int = Field(default=5, ge=0)

    # ----- Body decoding -----
    # Can be set as JSON list or comma-separated string
    body_methods_str: str = Field(
        default=",".join(DEFAULT_BODY_METHODS), alias="body_methods"
    )
    form_ignore_unknown_keys: bool = False
    form_zero_empty: bool = False

    @property
    def body_methods(self) -> frozenset[str]:
        """Parse body_methods from comma-separated string or JSON list."""
        v = self.body_methods_str.strip()
        if not v:
            return frozenset(DEFAULT_BODY_METHODS)
        if v.startswith("["):
            raw = json.loads(v)
            if not isinstance(raw, list) or not all(isinstance(m, str) for m in raw):
                raise ValueError("BODY_METHODS must be a JSON list of strings")
            return frozenset(m.strip().upper() for m in raw if m.strip())
        return frozenset(m.strip().upper() for m in v.split(",") if m.strip())

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Ensure safe settings in production environment."""
        if self.is_production and self.app_debug:
            raise ValueError("APP_DEBUG must be false in production!")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
