# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to scan defaults, output locations, and logging config

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="PREBID_MONITOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )

    # Execution Configuration
    concurrency_mode: Literal["sequential", "pooled"] = Field(
        default="pooled", description="Run visits one at a time or through a bounded worker pool"
    )
    max_parallelism: int = Field(default=5, ge=1, description="Worker count for pooled mode")
    visit_timeout_ms: int = Field(default=60000, gt=0, description="Navigation timeout handed to the page inspector")
    deadline_grace_s: float = Field(
        default=15.0, ge=0.0, description="Extra seconds allowed on top of the visit timeout before a visit is abandoned"
    )
    settle_delay_s: float = Field(
        default=6.0, ge=0.0, description="Seconds to let ad libraries initialise before the page is inspected"
    )
    headless: bool = Field(default=True, description="Run the browser without a visible window")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
        ),
        description="User agent presented by the scanning browser",
    )

    # Source Configuration
    default_input_file: Path = Field(default=Path("src/input.txt"), description="Input file used when none is given")
    max_repository_urls: int = Field(default=100, ge=1, description="Ceiling on URLs loaded from a GitHub repository")
    chunk_size: int = Field(default=0, description="URLs per chunk, zero or less disables chunking")
    github_api_base: str = Field(default="https://api.github.com", description="GitHub REST API base URL")
    http_timeout_s: float = Field(default=30.0, gt=0.0, description="Timeout for repository HTTP requests")

    # Output Configuration
    output_dir: Path = Field(default=Path("store"), description="Root directory for dated result stores")
    error_dir: Path = Field(default=Path("errors"), description="Directory holding per-category URL error logs")

    # Logging Configuration
    log_mode: Literal["interactive", "production"] = Field(default="interactive", description="Logging output mode")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")


# Global config instance - lazy loaded when first accessed
_config_instance: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Creates the config on first access, subsequent calls return the same instance.

    Returns:
        Config: The application configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Reload configuration from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        Config: A fresh configuration instance
    """
    global _config_instance
    _config_instance = Config()
    return _config_instance
