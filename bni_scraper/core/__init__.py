"""Core infrastructure for BNI Profile Scraper."""

from .config import get_config, ScraperConfig, default_output_dir, OUTPUT_FORMATS
from .errors import (
    ScraperError,
    ConfigError,
    TargetError,
    TargetTimeout,
    TargetNoData,
    TargetTransportError,
    RunInfrastructureFailure,
    RunAlreadyActiveError,
)

__all__ = [
    # Config
    "get_config",
    "ScraperConfig",
    "default_output_dir",
    "OUTPUT_FORMATS",
    # Errors
    "ScraperError",
    "ConfigError",
    "TargetError",
    "TargetTimeout",
    "TargetNoData",
    "TargetTransportError",
    "RunInfrastructureFailure",
    "RunAlreadyActiveError",
]
