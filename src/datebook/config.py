"""Configuration management for Datebook."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DATEBOOK_HOME = Path(os.environ.get("DATEBOOK_HOME", Path.home() / "datebook"))
CONFIG_FILE = DATEBOOK_HOME / "config" / "datebook.conf"
DATA_DIR = DATEBOOK_HOME / "data"


@dataclass
class Config:
    """Datebook configuration."""

    data_file: str = field(default_factory=lambda: str(DATA_DIR / "appointments.xml"))
    confirmation: str = "Y"
    # Range of the "upcoming" listing
    week_days: int = 7
    # Longest allowed appointment, checked by the shell
    max_duration_years: int = 1


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]

    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key.upper()}: {value!r}")
        return default
    if parsed < 1:
        logger.warning(f"Ignoring {key.upper()} below 1: {parsed}")
        return default
    return parsed


def load_config(path: Path | None = None) -> Config:
    """Load configuration from datebook.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_file":
                config.data_file = value
            case "confirmation":
                config.confirmation = value
            case "week_days":
                config.week_days = _parse_int(key, value, config.week_days)
            case "max_duration_years":
                config.max_duration_years = _parse_int(key, value, config.max_duration_years)
            case _:
                logger.debug(f"Unknown config key: {key}")

    return config
