"""Application configuration loaded from environment variables via pydantic-settings.

Usage:
    from redshift_dataset_annotator.config import settings
    print(settings.aws_region)
"""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path relative to this file, not CWD.
_ENV_FILE = Path(__file__).parent / ".env"

CONFIG_SUBDIR = "redshift-data-set-annotator"


def default_config_dir() -> Path:
    """Return $XDG_CONFIG_HOME/<subdir>, falling back to ~/.config/<subdir>."""
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / CONFIG_SUBDIR
    return Path.home() / ".config" / CONFIG_SUBDIR


class Settings(BaseSettings):
    """All application settings. Loaded from environment variables and .env file.

    Environment variables are case-insensitive. For example, AWS_REGION or
    aws_region will both work.
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars not defined here
    )

    # --- AWS ---
    aws_region: str | None = Field(
        default=None,
        description="AWS region for QuickSight and the Redshift Data API. None = boto3 default chain.",
    )
    aws_account_id: str | None = Field(
        default=None,
        description="QuickSight account id. None = resolved via STS GetCallerIdentity.",
    )

    # --- Logging ---
    log_level: str = Field(
        default="info",
        description="Minimum log level (debug, info, warning, error)",
    )
    log_format: str = Field(
        default="json",
        description="Log renderer: 'json' or 'console'",
    )

    # --- Profile configuration file ---
    config_dir: Path = Field(
        default_factory=default_config_dir,
        description="Directory holding config.yaml with Redshift connection profiles",
    )

    # --- Redshift Data API ---
    redshift_query_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout in seconds for the column comment query",
    )
    redshift_poll_interval_seconds: float = Field(
        default=0.5,
        description="Delay between DescribeStatement polls",
    )

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.yaml"


# Singleton instance, import this everywhere
settings = Settings()
