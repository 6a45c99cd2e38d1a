"""
Configuration management for GamblShield Discovery.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Grounding service (Gemini + Google Search) settings."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"),
    )
    model: str = "gemini-3-flash-preview"
    request_timeout: int = 60  # seconds

    # Prompt shaping
    max_known_patterns: int = 20
    max_sources_per_site: int = 3


class AgentSettings(BaseSettings):
    """Discovery agent settings."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    seed_query: str = "situs slot gacor terbaru 2024"
    cycle_delay: int = 15  # seconds between autonomous cycles
    analysis_delay: float = 1.0  # seconds spent in the learning phase
    log_limit: int = 50
    min_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    autostart: bool = False
    export_dir: Path = Field(default=Path("./exports"))

    @field_validator("export_dir", mode="before")
    @classmethod
    def ensure_path(cls, v):
        """Convert string to Path."""
        return Path(v)


class APISettings(BaseSettings):
    """API server settings."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


class RegistrySettings(BaseSettings):
    """Registry persistence settings. No URL means in-memory only."""

    model_config = SettingsConfigDict(
        env_prefix="REGISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = None


class Settings(BaseSettings):
    """Main settings class that combines all settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sub-settings
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    api: APISettings = Field(default_factory=APISettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    activity_log_file: Optional[Path] = None  # dashboard activity stream only


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience access
settings = get_settings()


APP_NAME = "GamblShield Discovery"
APP_VERSION = "2.6.0"
