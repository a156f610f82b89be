"""
Streaming histogram of Ben-Haim & Tom-Tov (2010).

A `StreamHist` keeps at most `capacity` bins. Each inserted value becomes a bin
of its own and, whenever that overflows the capacity, the two bins with the
closest means are merged into their weighted average. Summary statistics and
order statistics are read off the bins, the latter by trapezoidal
interpolation between neighbouring bin means.

Typical use:
    hist = StreamHist(capacity=20)
    for x in stream:
        hist.insert(x)
    hist.mean(), hist.quantile(0.95), hist.ecdf(3.0)

Reference:
    Y. Ben-Haim and E. Tom-Tov, "A Streaming Parallel Decision Tree
    Algorithm", JMLR 11 (2010), 849-872.
"""

from collections.abc import Iterable, Iterator
from math import isfinite, isnan, sqrt

import numpy as np

from .bins import Bin, BinSet
from .utils.exceptions import EmptyHistogram, InvalidCapacity, InvalidInput, InvalidQuantile


def _check_capacity(capacity: int) -> int:
    if isinstance(capacity, bool) or int(capacity) != capacity or capacity < 1:
        raise InvalidCapacity(f"capacity must be an integer >= 1, got {capacity!r}")
    return int(capacity)


class StreamHist:
    """
    Bounded-memory approximate histogram built in a single pass.

    Args:
        capacity: Upper bound for the number of bins (>= 1).

    Raises:
        InvalidCapacity: If `capacity` is smaller than one.

    Attributes:
        capacity (int): Current bound on the number of bins.
        min (float | None): Smallest value ever inserted, None while empty.
        max (float | None): Largest value ever inserted, None while empty.

    Notes:
        - Not safe for concurrent mutation; serialize writers externally.
        - Statistics assume all mass of a bin sits at its mean.
    """

    def __init__(self, capacity: int = 10) -> None:
        self._capacity = _check_capacity(capacity)
        self._bins = BinSet()
        self._min: float | None = None
        self._max: float | None = None

    # ------------------------ construction ------------------------

    @classmethod
    def with_capacity(cls, capacity: int) -> "StreamHist":
        """Empty histogram holding at most `capacity` bins."""
        return cls(capacity)

    @classmethod
    def from_values(cls, values: Iterable[float], capacity: int | None = None) -> "StreamHist":
        """
        Histogram of `values`.

        Args:
            values: Finite numbers, in arrival order.
            capacity: Bound on the number of bins. Defaults to the number of
                distinct values, so that no bins get merged.
        """
        values = [float(v) for v in values]
        if capacity is None:
            capacity = max(1, len(set(values)))
        hist = cls(capacity)
        hist.extend(values)
        return hist

    @classmethod
    def from_bins(
        cls,
        bins: Iterable[Bin | tuple[float, int]],
        capacity: int | None = None,
        min: float | None = None,
        max: float | None = None,
    ) -> "StreamHist":
        """
        Rebuild a histogram from its bins without merging any of them.

        Args:
            bins: `Bin` instances or `(mean, count)` pairs in any order; equal
                means are combined.
            capacity: Bound on the number of bins, defaults to the number of bins.
            min: Smallest observed value, defaults to the first bin mean.
            max: Largest observed value, defaults to the last bin mean.

        Raises:
            InvalidCapacity: If `capacity` is below one or below the number of bins.
            InvalidInput: If a bin, `min` or `max` is invalid or inconsistent.
        """
        binset = BinSet.from_bins(bins)
        if capacity is None:
            capacity = len(binset) or 1
        hist = cls(capacity)
        if len(binset) > hist._capacity:
            raise InvalidCapacity(
                f"{len(binset)} bins do not fit in a histogram of capacity {capacity}"
            )
        hist._bins = binset
        if len(binset):
            lo = binset[0].mean if min is None else float(min)
            hi = binset[-1].mean if max is None else float(max)
            if not (isfinite(lo) and isfinite(hi)) or lo > binset[0].mean or hi < binset[-1].mean:
                raise InvalidInput(f"min={lo} and max={hi} do not enclose the bin means")
            hist._min, hist._max = lo, hi
        return hist

    def copy(self) -> "StreamHist":
        other = StreamHist(self._capacity)
        other._bins = self._bins.copy()
        other._min, other._max = self._min, self._max
        return other

    # ------------------------ accessors ------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def bins(self) -> tuple[Bin, ...]:
        """Snapshot of the bins, ascending by mean."""
        return tuple(self._bins)

    @property
    def min(self) -> float | None:
        return self._min

    @property
    def max(self) -> float | None:
        return self._max

    def __len__(self) -> int:
        return len(self._bins)

    def __iter__(self) -> Iterator[Bin]:
        return iter(self._bins)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StreamHist):
            return NotImplemented
        return (
            self._bins == other._bins
            and self._capacity == other._capacity
            and self._min == other._min
            and self._max == other._max
        )

    def __repr__(self) -> str:
        return (
            f"StreamHist(capacity={self._capacity}, bins={len(self._bins)}, "
            f"count={self.total_count()}, min={self._min}, max={self._max})"
        )

    def is_empty(self) -> bool:
        return len(self._bins) == 0

    def total_count(self) -> int:
        """Number of values absorbed by the histogram."""
        return self._bins.total_count()

    # ------------------------ mutation ------------------------

    def insert(self, x: float) -> None:
        """
        Insert one observation (Algorithm 1, "update procedure").

        Raises:
            InvalidInput: If `x` is NaN or infinite. The histogram is unchanged.
        """
        x = float(x)
        self._bins.insert_point(x)
        if self._min is None or x < self._min:
            self._min = x
        if self._max is None or x > self._max:
            self._max = x
        if len(self._bins) > self._capacity:
            self._bins.merge_closest()

    def extend(self, values: Iterable[float]) -> None:
        for x in values:
            self.insert(x)

    def resize(self, capacity: int) -> None:
        """
        Change the capacity, merging the closest bins while there are too many.

        Growing the capacity never splits bins; it only raises the ceiling for
        future inserts.

        Raises:
            InvalidCapacity: If `capacity` is smaller than one.
        """
        self._capacity = _check_capacity(capacity)
        self._trim()

    def _trim(self) -> None:
        while len(self._bins) > self._capacity:
            self._bins.merge_closest()

    def merge(self, other: "StreamHist") -> "StreamHist":
        """
        Combine two histograms into a new one (Algorithm 2, "merge procedure").

        The result holds the bins of both inputs, reduced to the larger of the
        two capacities. Neither input is modified.
        """
        result = StreamHist(max(self._capacity, other._capacity))
        result._bins = BinSet.from_bins([*self._bins, *other._bins])
        lows = [v for v in (self._min, other._min) if v is not None]
        highs = [v for v in (self._max, other._max) if v is not None]
        result._min = min(lows) if lows else None
        result._max = max(highs) if highs else None
        result._trim()
        return result

    # ------------------------ summary statistics ------------------------

    def _require_data(self) -> None:
        if self.is_empty():
            raise EmptyHistogram("the histogram is empty")

    def _arrays(self) -> tuple[np.ndarray, np.ndarray]:
        means = np.fromiter((b.mean for b in self._bins), dtype=np.float64, count=len(self._bins))
        counts = np.fromiter((b.count for b in self._bins), dtype=np.float64, count=len(self._bins))
        return means, counts

    def mean(self) -> float:
        """
        Count-weighted mean of the bin means.

        Raises:
            EmptyHistogram: If nothing was inserted.
        """
        self._require_data()
        means, counts = self._arrays()
        return float(np.average(means, weights=counts))

    def variance(self) -> float:
        """
        Count-weighted (population) variance of the bin means.

        Raises:
            EmptyHistogram: If nothing was inserted.
        """
        self._require_data()
        means, counts = self._arrays()
        m = np.average(means, weights=counts)
        return float(np.average((means - m) ** 2, weights=counts))

    def std_dev(self) -> float:
        return sqrt(self.variance())

    # ------------------------ order statistics ------------------------

    def _neighbors(self, index: int) -> tuple[float, float, float, float]:
        """
        `(p_i, m_i, p_j, m_j)` of the bins at `index - 1` and `index`.

        Outside of the bins, zero-count phantom bins sit at the observed
        minimum and maximum.
        """
        if index <= 0:
            first = self._bins[0]
            return self._min, 0.0, first.mean, float(first.count)
        if index >= len(self._bins):
            last = self._bins[-1]
            return last.mean, float(last.count), self._max, 0.0
        left, right = self._bins[index - 1], self._bins[index]
        return left.mean, float(left.count), right.mean, float(right.count)

    def count_by(self, x: float) -> float:
        """
        Approximate number of observations not larger than `x` (Algorithm 3, "sum procedure").

        Raises:
            InvalidInput: If `x` is NaN.
        """
        if isnan(x):
            raise InvalidInput(f"{x} is not a number")
        if self.is_empty() or x <= self._min:
            return 0.0
        if x > self._max:
            return float(self.total_count())

        idx = self._bins.partition_point(x)
        total = float(sum(self._bins[i].count for i in range(idx - 1)))

        pi, mi, pj, mj = self._neighbors(idx)
        if pj - pi <= 0.0:
            s = 0.0
        else:
            mb = mi + (mj - mi) / (pj - pi) * (x - pi)
            s = (mi + mb) / 2.0 * (x - pi) / (pj - pi)
        return total + mi / 2.0 + s

    def ecdf(self, x: float) -> float:
        """
        Approximate cumulative probability at `x`.

        Returns 0 at or below the smallest observed value and 1 above the largest.

        Raises:
            EmptyHistogram: If nothing was inserted.
            InvalidInput: If `x` is NaN.
        """
        self._require_data()
        return self.count_by(x) / self.total_count()

    def quantile(self, q: float) -> float:
        """
        Approximate `q`-quantile (Algorithm 4, "uniform procedure").

        Finds the pair of neighbouring bins whose interpolated cumulative count
        straddles `q * total_count` and solves the trapezoid between them for
        the position of the target.

        Args:
            q: Probability in [0, 1]. `quantile(0)` is the minimum and
               `quantile(1)` the maximum observed value.

        Raises:
            InvalidQuantile: If `q` is not in [0, 1].
            EmptyHistogram: If nothing was inserted.
        """
        if not (0.0 <= q <= 1.0):
            raise InvalidQuantile(f"{q} is not a valid probability")
        self._require_data()
        if q == 0.0:
            return self._min
        if q == 1.0:
            return self._max

        target = q * self.total_count()
        idx, cumulative = self._find_cumulative(target)

        pi, mi, pj, mj = self._neighbors(idx)
        d = target - cumulative
        a = mj - mi
        if a == 0.0:
            z = d / mi
        else:
            b = 2.0 * mi
            c = -2.0 * d
            z = (-b + sqrt(max(b * b - 4.0 * a * c, 0.0))) / (2.0 * a)
        z = min(max(z, 0.0), 1.0)
        return pi + (pj - pi) * z

    def _find_cumulative(self, target: float) -> tuple[int, float]:
        """
        Index of the right bin of the straddling pair and the cumulative count
        up to the midpoint of the left bin.
        """
        idx = 0
        total = 0.0
        prev = 0.0
        for b in self._bins:
            half = b.count / 2.0
            if total + prev + half > target:
                break
            total += prev + half
            prev = half
            idx += 1
        return idx, total

    def median(self) -> float:
        return self.quantile(0.5)

    # ------------------------ fast approximations ------------------------
    # Step-function variants without interpolation.

    def fast_count_by(self, x: float) -> float:
        """Sum of the counts of bins with mean not larger than `x`."""
        if isnan(x):
            raise InvalidInput(f"{x} is not a number")
        if self.is_empty() or x <= self._min:
            return 0.0
        if x > self._max:
            return float(self.total_count())
        return float(sum(b.count for b in self._bins if b.mean <= x))

    def fast_ecdf(self, x: float) -> float:
        self._require_data()
        return self.fast_count_by(x) / self.total_count()

    def fast_quantile(self, q: float) -> float:
        """Mean of the last bin whose cumulative count is at most `q * total_count`."""
        if not (0.0 <= q <= 1.0):
            raise InvalidQuantile(f"{q} is not a valid probability")
        self._require_data()
        target = q * self.total_count()
        result = self._min
        cumulative = 0
        for b in self._bins:
            cumulative += b.count
            if cumulative > target:
                break
            result = b.mean
        return result

    def iqr(self) -> float:
        """Interquartile range from the fast quantile approximation."""
        return self.fast_quantile(0.75) - self.fast_quantile(0.25)
