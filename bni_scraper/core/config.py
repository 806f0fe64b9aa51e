"""Configuration management for BNI Profile Scraper.

Loads configuration from environment variables with .env file support.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import platformdirs
from dotenv import load_dotenv

from .errors import ConfigError

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

OUTPUT_FORMATS = ("csv", "xlsx", "both")


def default_output_dir() -> Path:
    """Get the user's downloads directory."""
    return Path(platformdirs.user_downloads_dir())


@dataclass
class ScraperConfig:
    """Scraper configuration."""

    directory_url: Optional[str] = None

    # Dispatch groups
    batch_size: int = 5  # Profiles scraped concurrently per group
    dispatch_spacing: float = 2.0  # Seconds between consecutive page opens
    group_delay: float = 3.0  # Pause between groups
    long_pause_every: int = 15  # Take a long pause every N groups
    long_pause: float = 15.0

    # Retries and timeouts (seconds)
    max_attempts: int = 3  # 1 initial + 2 retries
    load_timeout: float = 15.0
    render_settle: float = 2.0
    extract_timeout: float = 12.0
    inter_attempt_delay: float = 2.0
    listing_timeout: float = 30.0

    # Browser
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    # Output
    output_dir: Path = field(default_factory=default_output_dir)
    output_format: str = "csv"
    filename_prefix: str = "BNI"
    write_snapshot: bool = True

    # Initial per-profile estimate used before any profile has finished
    estimated_seconds_per_profile: float = 8.0

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of validation error messages, empty if valid.
        """
        errors = []
        if self.batch_size < 1:
            errors.append("BNI_BATCH_SIZE must be at least 1")
        if self.max_attempts < 1:
            errors.append("BNI_MAX_ATTEMPTS must be at least 1")
        if self.long_pause_every < 1:
            errors.append("BNI_LONG_PAUSE_EVERY must be at least 1")
        for name in ("load_timeout", "extract_timeout", "listing_timeout"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be positive")
        for name in ("dispatch_spacing", "group_delay", "long_pause",
                     "render_settle", "inter_attempt_delay"):
            if getattr(self, name) < 0:
                errors.append(f"{name} must not be negative")
        if self.output_format not in OUTPUT_FORMATS:
            errors.append(
                f"BNI_OUTPUT_FORMAT must be one of {', '.join(OUTPUT_FORMATS)}"
            )
        return errors

    def with_overrides(self, **overrides: Any) -> "ScraperConfig":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_config() -> ScraperConfig:
    """Load configuration from environment variables.

    Returns:
        ScraperConfig instance populated from environment.

    Raises:
        ConfigError: If a numeric variable cannot be parsed.
    """
    defaults = ScraperConfig()

    def number(name: str, default: Any, cast: type) -> Any:
        raw = os.environ.get(name, "")
        if not raw.strip():
            return default
        try:
            return cast(raw)
        except ValueError as e:
            raise ConfigError(f"{name} must be a number, got {raw!r}") from e

    output_dir = os.environ.get("BNI_OUTPUT_DIR", "")

    return ScraperConfig(
        directory_url=os.environ.get("BNI_DIRECTORY_URL") or None,
        batch_size=number("BNI_BATCH_SIZE", defaults.batch_size, int),
        dispatch_spacing=number("BNI_DISPATCH_SPACING", defaults.dispatch_spacing, float),
        group_delay=number("BNI_GROUP_DELAY", defaults.group_delay, float),
        long_pause_every=number("BNI_LONG_PAUSE_EVERY", defaults.long_pause_every, int),
        long_pause=number("BNI_LONG_PAUSE", defaults.long_pause, float),
        max_attempts=number("BNI_MAX_ATTEMPTS", defaults.max_attempts, int),
        load_timeout=number("BNI_LOAD_TIMEOUT", defaults.load_timeout, float),
        render_settle=number("BNI_RENDER_SETTLE", defaults.render_settle, float),
        extract_timeout=number("BNI_EXTRACT_TIMEOUT", defaults.extract_timeout, float),
        inter_attempt_delay=number(
            "BNI_RETRY_DELAY", defaults.inter_attempt_delay, float
        ),
        listing_timeout=number("BNI_LISTING_TIMEOUT", defaults.listing_timeout, float),
        headless=_env_bool("BNI_HEADLESS", defaults.headless),
        user_agent=os.environ.get("BNI_USER_AGENT") or defaults.user_agent,
        output_dir=Path(output_dir).expanduser() if output_dir else defaults.output_dir,
        output_format=os.environ.get("BNI_OUTPUT_FORMAT", defaults.output_format).lower(),
        filename_prefix=os.environ.get("BNI_FILENAME_PREFIX") or defaults.filename_prefix,
        write_snapshot=_env_bool("BNI_WRITE_SNAPSHOT", defaults.write_snapshot),
    )
