"""
codemap Configuration

Settings are loaded from:
1. Environment variables (prefixed with CODEMAP_)
2. ~/.codemap/.env file

Key settings:
- CODEMAP_LOG_LEVEL: Default logging level for the CLI (default: WARNING)
- CODEMAP_STRICT_DECODE: Reject unknown fields when reading graph JSON
- CODEMAP_CHECK_EDGES: Reject edges pointing outside the node list
- CODEMAP_OUTPUT_FILE: Default output path for `codemap normalize`
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """codemap configuration settings."""

    log_level: str = "WARNING"

    # Decoding
    strict_decode: bool = True
    check_edges: bool = False

    # Output
    output_file: str = "codemap-graph.json"

    model_config = SettingsConfigDict(
        env_prefix="CODEMAP_",
        env_file=Path.home() / ".codemap" / ".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = str(value).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and load again from the environment."""
    get_settings.cache_clear()
    return get_settings()
