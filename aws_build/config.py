"""Configuration settings for aws_build.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RUST_VERSION = "stable"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the AWS_BUILD_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="AWS_BUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Toolchain
    rust_version: str = Field(
        default=DEFAULT_RUST_VERSION,
        min_length=1,
        description="Rust version to install, anything rustup understands",
    )

    # Container runtime
    container_cmd: Literal["docker", "sudo-docker", "podman"] | None = Field(
        default=None,
        description="Container command (auto-detected from PATH if not set)",
    )
    relabel: Literal["shared", "unshared"] | None = Field(
        default=None,
        description="Relabel bind mounts (z or Z volume option)",
    )

    # Output
    strip: bool = Field(
        default=False,
        description="Strip debug symbols from the built executable",
    )

    # Paths
    tmp_dir: Path | None = Field(
        default=None,
        description="Parent directory for the image build context "
        "(uses system default if not set)",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["DEFAULT_RUST_VERSION", "Settings", "get_settings", "print_settings_json"]
