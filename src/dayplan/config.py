"""Configuration management for dayplan."""

import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.analyzer import AnalyzeOptions
from .core.clock import parse_duration
from .core.model import DEFAULT_DURATION_MIN, DEFAULT_TIMEZONE, OverlapPolicy

logger = logging.getLogger(__name__)

DAYPLAN_HOME = Path(os.environ.get("DAYPLAN_HOME", Path.home() / "dayplan"))
CONFIG_FILE = DAYPLAN_HOME / "config" / "dayplan.conf"


@dataclass
class Config:
    """dayplan configuration: defaults for every analysis."""

    timezone: str = DEFAULT_TIMEZONE
    default_duration_min: int = DEFAULT_DURATION_MIN
    overlap_policy: OverlapPolicy = OverlapPolicy.WARNING

    def to_options(self, day: date | str | None = None, timezone: str | None = None) -> AnalyzeOptions:
        """Analysis options seeded from this config; explicit arguments win."""
        return AnalyzeOptions(
            day=day,
            timezone=timezone or self.timezone,
            default_duration_min=self.default_duration_min,
            overlap_policy=self.overlap_policy,
        )


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config() -> Config:
    """Load configuration from dayplan.conf file."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                try:
                    ZoneInfo(value)
                    config.timezone = value
                except (ZoneInfoNotFoundError, ValueError):
                    logger.warning(f"Ignoring unknown TIMEZONE: {value}")
            case "default_duration":
                try:
                    config.default_duration_min = parse_duration(value)
                except ValueError as e:
                    logger.warning(f"Ignoring DEFAULT_DURATION: {e}")
            case "overlap_policy":
                try:
                    config.overlap_policy = OverlapPolicy(value.lower())
                except ValueError:
                    logger.warning(f"Ignoring OVERLAP_POLICY {value!r}, expected warning, error or ignore")
            case _:
                logger.debug(f"Unknown config key: {key}")

    return config
