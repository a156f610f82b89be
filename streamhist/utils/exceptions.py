"""
Custom exceptions for the streaming histogram package.
"""


class StreamHistError(Exception):
    """Base exception for all streaming histogram errors."""

    pass


class InvalidCapacity(StreamHistError, ValueError):
    """Exception raised when a histogram capacity is smaller than one."""

    pass


class InvalidInput(StreamHistError, ValueError):
    """Exception raised for NaN or infinite values and malformed bins."""

    pass


class InvalidQuantile(StreamHistError, ValueError):
    """Exception raised for probabilities outside of [0, 1]."""

    pass


class EmptyHistogram(StreamHistError, ValueError):
    """Exception raised when statistics are requested from an empty histogram."""

    pass


class InvalidBandwidth(StreamHistError, ValueError):
    """Exception raised for non-positive or non-finite kernel bandwidths."""

    pass


class HistogramFormatError(StreamHistError):
    """Exception raised when a serialized histogram cannot be decoded."""

    pass


class ConfigurationError(StreamHistError):
    """Exception raised for configuration errors."""

    pass
