"""
Utility modules shared by the histogram core and its command line tools.
"""

from .config import get_config_value, load_config, validate_config
from .exceptions import (
    ConfigurationError,
    EmptyHistogram,
    HistogramFormatError,
    InvalidBandwidth,
    InvalidCapacity,
    InvalidInput,
    InvalidQuantile,
    StreamHistError,
)
from .logging import get_logger, log_execution_time, setup_logging

__all__ = [
    "StreamHistError",
    "InvalidCapacity",
    "InvalidInput",
    "InvalidQuantile",
    "EmptyHistogram",
    "InvalidBandwidth",
    "HistogramFormatError",
    "ConfigurationError",
    "setup_logging",
    "get_logger",
    "log_execution_time",
    "load_config",
    "get_config_value",
    "validate_config",
]
