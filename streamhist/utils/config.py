"""
Configuration management for the streaming histogram tools.
"""

import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigurationError

KERNEL_NAMES = ("gaussian", "triangular", "epanechnikov", "uniform")
BANDWIDTH_RULES = ("silverman", "scott", "fd", "sturges", "bin_width", "auto")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULTS: dict[str, Any] = {
    "STREAMHIST_BINS": 10,
    "STREAMHIST_WIDTH": 10,
    "STREAMHIST_LOG_LEVEL": "WARNING",
    "STREAMHIST_KERNEL": "gaussian",
    "STREAMHIST_BANDWIDTH_RULE": "silverman",
}


def load_config(config_file: Path | None = None) -> dict[str, Any]:
    """Load configuration from defaults, a JSON file and environment variables.

    Later sources win: defaults, then the config file, then the environment
    (including a `.env` file in the working directory).
    """
    config = dict(DEFAULTS)

    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    if config_file is not None:
        try:
            with open(config_file) as f:
                config.update(json.load(f))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Failed to load config file {config_file}: {e}") from e

    env_config = {key: os.getenv(key) for key in DEFAULTS}
    config.update({k: v for k, v in env_config.items() if v is not None})

    for key in ("STREAMHIST_BINS", "STREAMHIST_WIDTH"):
        try:
            config[key] = int(config[key])
        except (ValueError, TypeError):
            # left as is, validate_config reports it
            pass

    return config


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value."""
    config = load_config()
    return config.get(key, default)


def validate_config(config: dict[str, Any]) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    for key in ("STREAMHIST_BINS", "STREAMHIST_WIDTH"):
        if key in config:
            value = config[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                errors.append(f"Invalid positive integer for {key}: {value}")

    if config.get("STREAMHIST_KERNEL", "gaussian") not in KERNEL_NAMES:
        errors.append(f"Unknown kernel: {config['STREAMHIST_KERNEL']}")

    if config.get("STREAMHIST_BANDWIDTH_RULE", "silverman") not in BANDWIDTH_RULES:
        errors.append(f"Unknown bandwidth rule: {config['STREAMHIST_BANDWIDTH_RULE']}")

    level = str(config.get("STREAMHIST_LOG_LEVEL", "WARNING")).upper()
    if level not in LOG_LEVELS:
        errors.append(f"Unknown log level: {config['STREAMHIST_LOG_LEVEL']}")

    return errors
