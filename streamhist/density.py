"""
Weighted kernel density estimation on top of a streaming histogram.

A `KernelDensity` places one kernel at every bin mean, weighted by the share of
observations the bin holds:

    f(x) = sum_i w_i * K((x - mean_i) / h) / h,    w_i = count_i / total_count
"""

from collections.abc import Callable
from math import isfinite

import numpy as np
from scipy.stats import norm

from . import bandwidth as _bandwidth
from .hist import StreamHist
from .utils.exceptions import EmptyHistogram, InvalidBandwidth

ArrayFn = Callable[[np.ndarray], np.ndarray]


def gaussian(u: np.ndarray) -> np.ndarray:
    """Standard normal density."""
    return norm.pdf(u)


def triangular(u: np.ndarray) -> np.ndarray:
    """`1 - |u|` on [-1, 1]."""
    return 1.0 - np.minimum(np.abs(u), 1.0)


def epanechnikov(u: np.ndarray) -> np.ndarray:
    """`3/4 * (1 - u^2)` on [-1, 1]."""
    return 0.75 * (1.0 - np.minimum(np.abs(u), 1.0) ** 2)


def uniform(u: np.ndarray) -> np.ndarray:
    """`1/2` on [-1, 1]."""
    return np.where(np.abs(u) <= 1.0, 0.5, 0.0)


KERNELS: dict[str, ArrayFn] = {
    "gaussian": gaussian,
    "triangular": triangular,
    "epanechnikov": epanechnikov,
    "uniform": uniform,
}


class KernelDensity:
    """
    Immutable kernel density estimator built from a histogram snapshot.

    The bin means and weights are copied into read-only arrays at construction,
    so later changes to the source histogram do not affect the estimator and
    `density` can be called from any number of threads.

    Typical use:
        kde = KernelDensity.from_hist(hist)                 # Silverman, Gaussian
        kde = KernelDensity.from_hist(hist, bandwidth=0.5)  # explicit bandwidth
        kde.density(1.2), kde.density(np.linspace(0, 3, 100))

    Args:
        means: Kernel centres.
        weights: Non-negative weights summing to one.
        bandwidth: Kernel width h (> 0, finite).
        kernel: Name of the kernel, one of `KERNELS`.

    Raises:
        InvalidBandwidth: If `bandwidth` is not a positive finite number.
        ValueError: If the kernel is unknown or the arrays do not match.
    """

    def __init__(
        self,
        means: np.ndarray,
        weights: np.ndarray,
        bandwidth: float,
        kernel: str = "gaussian",
    ) -> None:
        if kernel not in KERNELS:
            raise ValueError(f"unknown kernel {kernel!r}, expected one of {sorted(KERNELS)}")
        if not (isfinite(bandwidth) and bandwidth > 0):
            raise InvalidBandwidth(
                f"bandwidth must be a positive number, got {bandwidth}; pass it explicitly"
            )
        means = np.array(means, dtype=np.float64)
        weights = np.array(weights, dtype=np.float64)
        if means.shape != weights.shape or means.ndim != 1:
            raise ValueError("means and weights must be 1-d arrays of equal length")
        means.setflags(write=False)
        weights.setflags(write=False)

        self._means = means
        self._weights = weights
        self._bandwidth = float(bandwidth)
        self._kernel_name = kernel
        self._kernel = KERNELS[kernel]

    @classmethod
    def from_hist(
        cls,
        hist: StreamHist,
        bandwidth: float | None = None,
        kernel: str = "gaussian",
        rule: str = "silverman",
    ) -> "KernelDensity":
        """
        Snapshot `hist` into a density estimator.

        Args:
            hist: Non-empty histogram; it is only read.
            bandwidth: Explicit bandwidth. When None, `rule` picks it.
            kernel: Kernel name.
            rule: Bandwidth rule name from `bandwidth.RULES`.

        Raises:
            EmptyHistogram: If `hist` holds no data.
            InvalidBandwidth: If the bandwidth is not positive, e.g. when a rule
                is applied to a histogram with no spread.
        """
        if hist.is_empty():
            raise EmptyHistogram("cannot estimate a density from an empty histogram")
        if bandwidth is None:
            if rule not in _bandwidth.RULES:
                raise ValueError(
                    f"unknown bandwidth rule {rule!r}, expected one of {sorted(_bandwidth.RULES)}"
                )
            bandwidth = _bandwidth.RULES[rule](hist)
        total = hist.total_count()
        means = [b.mean for b in hist]
        weights = [b.count / total for b in hist]
        return cls(np.asarray(means), np.asarray(weights), bandwidth, kernel)

    @property
    def bandwidth(self) -> float:
        return self._bandwidth

    @property
    def kernel(self) -> str:
        return self._kernel_name

    @property
    def means(self) -> np.ndarray:
        return self._means

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    def __repr__(self) -> str:
        return (
            f"KernelDensity(kernels={len(self._means)}, bandwidth={self._bandwidth!r}, "
            f"kernel={self._kernel_name!r})"
        )

    def density(self, x: float | np.ndarray) -> float | np.ndarray:
        """
        Evaluate the estimator at `x`.

        Args:
            x: A number or an array-like of numbers. NaN maps to NaN.

        Returns:
            A float for scalar input, otherwise an array shaped like `x`.
        """
        xs = np.asarray(x, dtype=np.float64)
        u = (xs[..., np.newaxis] - self._means) / self._bandwidth
        result = (self._kernel(u) * self._weights).sum(axis=-1) / self._bandwidth
        result = np.where(np.isnan(xs), np.nan, result)
        if result.ndim == 0:
            return float(result)
        return result
