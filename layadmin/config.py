"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _normalize_prefix(value: str) -> str:
    """Return *value* with exactly one leading slash and no trailing slash."""
    stripped = value.strip().strip("/")
    return f"/{stripped}" if stripped else ""


class Settings(BaseSettings):
    """LayAdmin settings."""

    model_config = SettingsConfigDict(
        env_prefix="LAYADMIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False
    title: str = "LayAdmin"

    # Routes
    web_route_prefix: str = "/admin"
    api_route_prefix: str = "/api/admin"
    middleware: list[str] = Field(default_factory=lambda: ["layadmin.https"])

    # HTTPS enforcement for admin routes
    force_https: bool = False
    trust_forwarded_proto: bool = False

    # Page configuration cache
    cache_store: str = "default"
    cache_key: str = "layadmin_page_config"
    cache_ttl_seconds: int = Field(default=3600, ge=0)
    cache_dir: Path = Path("./storage/cache/layadmin")

    # Paths
    page_config_dir: Path = Path("./resources/config")
    views_dir: Path | None = None
    public_dir: Path = Path("./public")

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    @field_validator("web_route_prefix")
    @classmethod
    def _check_web_prefix(cls, value: str) -> str:
        prefix = _normalize_prefix(value)
        if not prefix:
            raise ValueError("web_route_prefix must not be empty or '/'")
        return prefix

    @field_validator("api_route_prefix")
    @classmethod
    def _check_api_prefix(cls, value: str) -> str:
        prefix = _normalize_prefix(value)
        if not prefix:
            raise ValueError("api_route_prefix must not be empty or '/'")
        return prefix
