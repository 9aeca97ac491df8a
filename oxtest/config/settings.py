"""Configuration management for OXTest tooling."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PARSE_ERROR_POLICIES = ("abort", "skip")


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Parsing Configuration
    parse_error_policy: str = Field(
        default="abort",
        description="What a script parse does on a bad line (abort or skip)",
    )
    script_encoding: str = Field(
        default="utf-8", description="Encoding used to read .ox.test files"
    )

    # Conversion Configuration
    playwright_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used when conversion has to emit placeholder code",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: str = Field(
        default="text",
        description="Log format (json or text)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path"
    )

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ["json", "text"]:
            raise ValueError(f"Invalid log format: {v}")
        return v

    @field_validator("parse_error_policy")
    def validate_parse_error_policy(cls, v: str) -> str:
        """Validate parse error policy."""
        policy = v.lower()
        if policy not in PARSE_ERROR_POLICIES:
            raise ValueError(
                f"Invalid parse error policy: {v}. Allowed values: {list(PARSE_ERROR_POLICIES)}"
            )
        return policy


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    # Load .env file if it exists
    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    return Settings()
