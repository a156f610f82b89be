"""
Type definitions for serialized histograms.
"""

from typing import NotRequired, TypedDict


class HistogramPayload(TypedDict):
    """Flat, order-preserving form of a histogram."""

    means: list[float]
    counts: list[int]
    capacity: NotRequired[int]
    min: NotRequired[float | None]
    max: NotRequired[float | None]
