"""
Streaming histograms as described in "A Streaming Parallel Decision Tree
Algorithm" by Ben-Haim and Tom-Tov (2010).

This package provides a bounded-memory approximate histogram built in a single
pass over a stream of numbers, its summary and order statistics, and a kernel
density estimator derived from it.

    from streamhist import KernelDensity, StreamHist

    hist = StreamHist(capacity=10)
    for x in (1.13, 2.67, 0.4, 2.2):
        hist.insert(x)

    hist.mean(), hist.quantile(0.9)
    KernelDensity.from_hist(hist).density(3.14)
"""

from . import bandwidth
from .bins import Bin, BinSet
from .density import KERNELS, KernelDensity
from .hist import StreamHist
from .utils.exceptions import (
    EmptyHistogram,
    HistogramFormatError,
    InvalidBandwidth,
    InvalidCapacity,
    InvalidInput,
    InvalidQuantile,
    StreamHistError,
)

__all__ = [
    "Bin",
    "BinSet",
    "StreamHist",
    "KernelDensity",
    "KERNELS",
    "bandwidth",
    "StreamHistError",
    "InvalidCapacity",
    "InvalidInput",
    "InvalidQuantile",
    "EmptyHistogram",
    "InvalidBandwidth",
    "HistogramFormatError",
]

__version__ = "0.1.0"
