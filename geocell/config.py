"""
Configuration management for geocell.

Uses pydantic-settings for environment variable loading with sensible defaults.
"""

import logging

from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """geocell configuration."""

    # Covering defaults for new coverers
    default_min_level: int = 0
    default_max_level: int = 30
    default_level_mod: int = 1
    default_max_cells: int = 8

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "GEOCELL_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging for applications and scripts using geocell.

    The library never calls this itself; it only logs through
    ``logging.getLogger("geocell...")``.
    """
    logging.basicConfig(
        level=level if level is not None else settings.log_level,
        format=LOG_FORMAT,
    )


# Global settings instance
settings = Settings()
