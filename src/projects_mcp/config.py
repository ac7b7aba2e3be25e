"""Configuration management for Projects MCP."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Projects MCP"
    app_version: str = "0.1.0"
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # GitHub
    github_token: Optional[str] = Field(default=None)
    github_api_url: str = Field(default="https://api.github.com")
    github_graphql_url: str = Field(default="https://api.github.com/graphql")
    github_api_version: str = Field(default="2022-11-28")
    http_timeout: float = Field(default=30.0, description="Per-request timeout in seconds")

    # Resolution
    field_resolution_page_size: int = Field(
        default=100,
        description="Page size used when listing fields to resolve a field/option by name",
    )
    item_scan_max_pages: int = Field(
        default=5,
        description="Pages scanned to locate a freshly added item's numeric ID",
    )
    item_scan_page_size: int = Field(
        default=50,
        description="Items per page during the item scan",
    )

    @field_validator("github_api_url", "github_graphql_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        return str(v).rstrip("/")

    @field_validator("field_resolution_page_size", "item_scan_max_pages", "item_scan_page_size")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
