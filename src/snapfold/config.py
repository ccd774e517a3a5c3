"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `SNAPFOLD_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from snapfold.models.outline import OutlineMode, OutlineOptions


class Settings(BaseSettings):
    """Snapfold settings.

    All fields are environment-configurable. Prefix is `SNAPFOLD_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="SNAPFOLD_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")

    # Outline generation
    max_lines: int = Field(default=500, ge=1)
    mode: OutlineMode = Field(default="smart")
    preserve_structure: bool = Field(default=True)
    fold_threshold: int = Field(default=3, ge=0, le=32)
    text_limit: int = Field(default=50, ge=1)

    # Search
    search_line_limit: int = Field(default=100, ge=1, le=100)

    # Snapshot history used by `search` and `diff`
    history_dir: Path = Field(default=Path(".snapfold"))

    def outline_options(self) -> OutlineOptions:
        """Build outline options from the configured defaults."""

        return OutlineOptions(
            max_lines=self.max_lines,
            mode=self.mode,
            preserve_structure=self.preserve_structure,
            fold_threshold=self.fold_threshold,
            text_limit=self.text_limit,
        )


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("SNAPFOLD_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
