"""Settings from RESTMAP_* environment variables (or a local .env file).

List values are JSON, e.g. RESTMAP_PATHS='["app/resources"]'.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RESTMAP_", env_file=".env", case_sensitive=False)

    # Discovery
    paths: list[str] = []
    extensions: list[str] = ["py"]
    declaration_source: Literal["ast", "import"] = "ast"

    # Compilation
    handle_policy: Literal["none", "push"] = "none"

    # Observability
    log_level: str = "INFO"
    log_format: Literal["rich", "plain"] = "rich"

    @field_validator("declaration_source", "handle_policy", "log_format", mode="before")
    @classmethod
    def lower_choice(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    return Settings()
