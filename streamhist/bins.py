from bisect import bisect_left
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from math import isfinite
from numbers import Integral

from .utils.exceptions import InvalidInput


@dataclass(frozen=True, slots=True)
class Bin:
    """
    A `count` observations collapsed to their arithmetic `mean`.

    Bins are immutable; merging two bins produces a new one:

        Bin(1.0, 2) + Bin(2.0, 3) == Bin(1.6, 5)

    Raises:
        InvalidInput: If `mean` is NaN or infinite, or `count` is not an integer >= 1.
    """

    mean: float
    count: int = 1

    def __post_init__(self) -> None:
        if not isfinite(self.mean):
            raise InvalidInput(f"{self.mean} is not a number")
        if isinstance(self.count, bool) or not isinstance(self.count, Integral):
            raise InvalidInput(f"bin count must be an integer, got {self.count!r}")
        if self.count < 1:
            raise InvalidInput(f"bin count must be >= 1, got {self.count}")

    def __add__(self, other: "Bin") -> "Bin":
        """Merge two bins into their count-weighted mean."""
        total = self.count + other.count
        mean = (self.mean * self.count + other.mean * other.count) / total
        # rounding must not push the result outside of the merged pair
        lo, hi = sorted((self.mean, other.mean))
        return Bin(min(max(mean, lo), hi), total)

    def as_tuple(self) -> tuple[float, int]:
        return self.mean, self.count


def _as_count(count: float) -> int:
    if isinstance(count, bool):
        raise InvalidInput(f"bin count must be an integer, got {count!r}")
    try:
        integral = float(count).is_integer()
    except (TypeError, ValueError):
        integral = False
    if not integral:
        raise InvalidInput(f"bin count must be an integer, got {count!r}")
    return int(count)


class BinSet:
    """
    Ordered collection of bins with strictly increasing means.

    The bins live in a contiguous list sorted by mean. No two bins share a mean:
    inserting a value equal to an existing mean increments that bin's count.
    The running total of counts is kept alongside so `total_count()` is O(1).

    Typical use:
        bins = BinSet()
        for x in (1.0, 2.0, 2.0, 5.0):
            bins.insert_point(x)
        bins.merge_closest()      # (1.0,1) + (2.0,2) -> (1.667,3)
    """

    __slots__ = ("_bins", "_total")

    def __init__(self) -> None:
        self._bins: list[Bin] = []
        self._total = 0

    @classmethod
    def from_bins(cls, bins: Iterable[Bin | tuple[float, int]]) -> "BinSet":
        """
        Build a bin set from bins in any order.

        Bins with identical means are combined by summing their counts, so the
        result satisfies the ordering invariant without any merging of distinct
        means.

        Args:
            bins: `Bin` instances or `(mean, count)` pairs.
        """
        items = [b if isinstance(b, Bin) else Bin(float(b[0]), _as_count(b[1])) for b in bins]
        items.sort(key=lambda b: b.mean)
        result = cls()
        for b in items:
            if result._bins and result._bins[-1].mean == b.mean:
                last = result._bins[-1]
                result._bins[-1] = Bin(last.mean, last.count + b.count)
            else:
                result._bins.append(b)
            result._total += b.count
        return result

    def copy(self) -> "BinSet":
        other = BinSet()
        other._bins = list(self._bins)
        other._total = self._total
        return other

    def __len__(self) -> int:
        return len(self._bins)

    def __iter__(self) -> Iterator[Bin]:
        return iter(self._bins)

    def __getitem__(self, index: int) -> Bin:
        return self._bins[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinSet):
            return NotImplemented
        return self._bins == other._bins

    def __repr__(self) -> str:
        inner = ", ".join(f"({b.mean!r}, {b.count})" for b in self._bins)
        return f"BinSet([{inner}])"

    def total_count(self) -> int:
        return self._total

    def partition_point(self, x: float) -> int:
        """Index of the first bin whose mean is not smaller than `x`."""
        return bisect_left(self._bins, x, key=lambda b: b.mean)

    def insert_point(self, x: float) -> None:
        """
        Add one observation `x`.

        A new bin `(x, 1)` is spliced in at its sorted position, unless a bin
        with mean exactly `x` exists, in which case its count is incremented.

        Raises:
            InvalidInput: If `x` is NaN or infinite.
        """
        if not isfinite(x):
            raise InvalidInput(f"{x} is not a number")
        i = self.partition_point(x)
        if i < len(self._bins) and self._bins[i].mean == x:
            self._bins[i] = Bin(x, self._bins[i].count + 1)
        else:
            self._bins.insert(i, Bin(x))
        self._total += 1

    def closest_pair(self) -> int:
        """
        Index `i` of the adjacent pair `(i, i+1)` with the smallest gap of means.

        Ties go to the leftmost pair.
        """
        if len(self._bins) < 2:
            raise ValueError("at least two bins are needed to find the closest pair")
        best = 0
        best_gap = self._bins[1].mean - self._bins[0].mean
        for i in range(1, len(self._bins) - 1):
            gap = self._bins[i + 1].mean - self._bins[i].mean
            if gap < best_gap:
                best, best_gap = i, gap
        return best

    def merge_closest(self) -> None:
        """
        Replace the closest adjacent pair of bins by their weighted average.

        The merged mean lies strictly between the two old means, so ordering is
        preserved and the total count is unchanged.

        Raises:
            ValueError: If there are fewer than two bins.
        """
        i = self.closest_pair()
        self._bins[i] = self._bins[i] + self._bins.pop(i + 1)
