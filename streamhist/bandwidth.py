"""
Rules of thumb for picking the kernel bandwidth from a `StreamHist`.

Every rule takes a non-empty histogram and returns a bandwidth. The sample
size `n` is the total count of the histogram. Rules built on the data range
use the observed minimum and maximum.
"""

from collections.abc import Callable
from math import log2

from .hist import StreamHist


def silverman(hist: StreamHist) -> float:
    """Silverman's rule: `0.9 * min(std, iqr / 1.34) * n^(-1/5)`.

    Falls back to the standard deviation when the interquartile range is zero.
    """
    n = hist.total_count()
    std = hist.std_dev()
    iqr = hist.iqr()
    spread = min(std, iqr / 1.34) if iqr > 0 else std
    return 0.9 * spread * n ** -0.2


def scott(hist: StreamHist) -> float:
    """Scott's rule for histogram bin widths: `3.5 * std * n^(-1/3)`."""
    n = hist.total_count()
    return 3.5 * hist.std_dev() * n ** (-1.0 / 3.0)


def fd(hist: StreamHist) -> float:
    """Freedman-Diaconis rule: `2 * iqr * n^(-1/3)`."""
    n = hist.total_count()
    return 2.0 * hist.iqr() * n ** (-1.0 / 3.0)


def sturges(hist: StreamHist) -> float:
    """Data range divided by Sturges' number of bins `1 + log2(n)`."""
    k = 1.0 + log2(hist.total_count())
    return (hist.max - hist.min) / k


def bin_width(hist: StreamHist) -> float:
    """Average width of the histogram's own bins over the data range."""
    return (hist.max - hist.min) / len(hist)


def auto(hist: StreamHist) -> float:
    """Maximum of the Sturges and Freedman-Diaconis rules (as in numpy)."""
    return max(sturges(hist), fd(hist))


RULES: dict[str, Callable[[StreamHist], float]] = {
    "silverman": silverman,
    "scott": scott,
    "fd": fd,
    "sturges": sturges,
    "bin_width": bin_width,
    "auto": auto,
}
