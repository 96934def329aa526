"""
Application configuration management using Pydantic Settings.
All settings are loaded from environment variables.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # LLM Provider Configuration
    # =========================================================================
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")
    google_api_key: str = Field(default="")
    llm_provider: Literal["openai", "anthropic", "google"] = Field(default="openai")

    # =========================================================================
    # Structured Extraction Configuration
    # =========================================================================
    extraction_model: str = Field(default="gpt-4o")
    extraction_temperature: float = Field(default=0.1)
    extraction_max_tokens: int = Field(default=200)

    # =========================================================================
    # Audio Processing Configuration
    # =========================================================================
    whisper_model: str = Field(default="whisper-1")
    transcription_temperature: float = Field(default=0.2)
    max_recording_ms: int = Field(default=60_000)

    # Applies to both network calls (transcription and extraction)
    request_timeout_seconds: float = Field(default=30.0)

    # =========================================================================
    # Result Cache Configuration
    # =========================================================================
    cache_ttl_hours: int = Field(default=24)
    cache_max_entries: int = Field(default=100)
    cache_sweep_interval_seconds: int = Field(default=3600)

    @property
    def cache_ttl_ms(self) -> int:
        """Cache TTL expressed in epoch milliseconds."""
        return self.cache_ttl_hours * 60 * 60 * 1000

    # =========================================================================
    # Confidence Policy
    # =========================================================================
    transcription_confidence_threshold: float = Field(default=0.90)
    extraction_confidence_threshold: float = Field(default=0.85)
    # warn: flag and continue to extraction; block: ask for a new recording
    low_confidence_policy: Literal["warn", "block"] = Field(default="warn")

    # =========================================================================
    # Locale Defaults
    # =========================================================================
    default_language: Literal["en", "hi", "es", "fr"] = Field(default="en")
    default_currency: str = Field(default="USD")

    # =========================================================================
    # Storage Configuration
    # =========================================================================
    database_url: str = Field(default="sqlite:///./saypay.db")

    # =========================================================================
    # Logging Configuration
    # =========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="json")

    # =========================================================================
    # Application Settings
    # =========================================================================
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )


# Global settings instance
settings = Settings()
