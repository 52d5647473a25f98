"""Filter settings and configuration."""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated

from loguru import logger
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FilterSettings(BaseSettings):
    """
    Default parameters of the Savitzky-Golay filter.

    Settings can be configured via:

    1. Environment variables (e.g., SAVGOL_WINDOW_WIDTH=7)
    2. .env file in the project root
    3. Default values defined below

    All settings use the SAVGOL_ prefix for environment variables.

    .. rubric:: Examples

    Set a 7x5 window of order 1 via environment::

        export SAVGOL_WINDOW_WIDTH=7
        export SAVGOL_WINDOW_HEIGHT=5
        export SAVGOL_ORDER=1
    """

    window_width: Annotated[
        int,
        Field(default=5, description="Regression window width in pixels", gt=0),
    ]
    window_height: Annotated[
        int,
        Field(default=5, description="Regression window height in pixels", gt=0),
    ]
    order: Annotated[
        int,
        Field(default=2, description="Polynomial order of the local fit", ge=0),
    ]

    model_config = SettingsConfigDict(
        env_prefix="SAVGOL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        validate_assignment=True,
        extra="ignore",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def app_version(self) -> str:
        """
        Get the package version from package metadata.

        :return: The version from pyproject.toml.
                 Falls back to "0.0.0" if the package is not installed.
        """
        try:
            return version("savgol-smoothing")
        except PackageNotFoundError:
            logger.warning("Could not determine package version, using fallback '0.0.0'")
            return "0.0.0"

    def log_startup_config(self) -> None:
        """Log the active filter configuration."""
        logger.info("=" * 60)
        logger.info("Savitzky-Golay filter - Configuration:")
        logger.info(f"  Version: {self.app_version}")
        logger.info(f"  Window: {self.window_width}x{self.window_height}")
        logger.info(f"  Order: {self.order}")
        logger.info("=" * 60)


@lru_cache
def get_settings() -> FilterSettings:
    """
    Get cached settings instance.

    :return: The filter settings, created once per process.
    """
    return FilterSettings()  # type: ignore
