import math
import random

import pytest

from streamhist import Bin, InvalidCapacity, InvalidInput, StreamHist


def means(hist):
    return [b.mean for b in hist]


@pytest.mark.parametrize("capacity", [0, -1])
def test_invalid_capacity(capacity):
    with pytest.raises(InvalidCapacity):
        StreamHist.with_capacity(capacity)


def test_empty_histogram():
    hist = StreamHist.with_capacity(5)
    assert hist.is_empty()
    assert hist.capacity == 5
    assert hist.total_count() == 0
    assert hist.min is None and hist.max is None
    assert list(hist) == []


def test_four_inserts_into_three_bins():
    hist = StreamHist.with_capacity(3)
    for x in (1.0, 2.0, 3.0, 4.0):
        hist.insert(x)
    assert hist.bins == (Bin(1.5, 2), Bin(3.0, 1), Bin(4.0, 1))
    assert hist.total_count() == 4
    assert hist.mean() == pytest.approx(2.5)


def test_insert_sequence():
    hist = StreamHist.with_capacity(3)

    hist.insert(10.0)
    assert hist.bins == (Bin(10.0),)

    hist.insert(30.0)
    hist.insert(20.0)
    assert hist.bins == (Bin(10.0), Bin(20.0), Bin(30.0))

    # equal value increments the count
    hist.insert(10.0)
    assert hist.bins == (Bin(10.0, 2), Bin(20.0), Bin(30.0))

    hist.insert(35.0)
    assert hist.bins == (Bin(10.0, 2), Bin(20.0), Bin(32.5, 2))

    hist.insert(1.0)
    assert hist.bins == (Bin(7.0, 3), Bin(20.0), Bin(32.5, 2))

    hist.insert(37.0)
    assert hist.bins == (Bin(7.0, 3), Bin(20.0), Bin(34.0, 3))

    hist.insert(22.0)
    assert hist.bins == (Bin(7.0, 3), Bin(21.0, 2), Bin(34.0, 3))
    assert hist.min == 1.0
    assert hist.max == 37.0


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_insert_rejects_non_finite(value):
    hist = StreamHist.from_values([1.0, 2.0, 3.0])
    before = hist.copy()
    with pytest.raises(InvalidInput):
        hist.insert(value)
    assert hist == before


@pytest.mark.parametrize("capacity", [1, 2, 5, 17])
def test_invariants_hold_after_every_insert(capacity):
    rng = random.Random(capacity)
    hist = StreamHist(capacity)
    for n in range(1, 500):
        hist.insert(round(rng.gauss(0.0, 10.0), 1))
        ms = means(hist)
        assert len(hist) <= capacity
        assert all(a < b for a, b in zip(ms, ms[1:]))
        assert hist.total_count() == n


def test_capacity_one_collapses_to_mean():
    hist = StreamHist(1)
    hist.extend([1.0, 2.0, 3.0, 6.0])
    assert len(hist) == 1
    assert hist.bins[0].count == 4
    assert hist.bins[0].mean == pytest.approx(3.0)


def test_resize_down():
    hist = StreamHist.from_values([float(x) for x in range(1, 11)])
    assert hist.capacity == 10
    assert len(hist) == 10
    hist.resize(5)
    assert hist.capacity == 5
    assert hist.bins == (Bin(1.5, 2), Bin(3.5, 2), Bin(5.5, 2), Bin(7.5, 2), Bin(9.5, 2))
    assert hist.min == 1.0
    assert hist.max == 10.0


def test_resize_up_keeps_bins():
    hist = StreamHist.from_values([float(x) for x in range(1, 11)])
    hist.resize(5)
    bins = hist.bins
    hist.resize(20)
    assert hist.capacity == 20
    assert hist.bins == bins


def test_resize_is_idempotent():
    rng = random.Random(7)
    hist = StreamHist(50)
    hist.extend(rng.uniform(0, 100) for _ in range(1000))
    once = hist.copy()
    once.resize(8)
    twice = hist.copy()
    twice.resize(8)
    twice.resize(8)
    assert once == twice


def test_resize_rejects_zero():
    hist = StreamHist.from_values([1.0, 2.0])
    with pytest.raises(InvalidCapacity):
        hist.resize(0)
    assert hist.capacity == 2


def test_merge():
    h1 = StreamHist.from_values([1.0, 2.0, 3.0])
    h2 = StreamHist.from_bins([Bin(0.0), Bin(1.0, 2), Bin(2.5), Bin(6.0, 2)])
    merged = h1.merge(h2)
    assert merged.capacity == 4
    assert merged.bins == (Bin(0.0, 1), Bin(1.0, 3), Bin(2.5, 3), Bin(6.0, 2))
    assert merged.total_count() == h1.total_count() + h2.total_count()
    assert merged.min == 0.0
    assert merged.max == 6.0

    merged.resize(3)
    assert merged.bins == (Bin(0.75, 4), Bin(2.5, 3), Bin(6.0, 2))


def test_merge_leaves_inputs_untouched():
    h1 = StreamHist.from_values([1.0, 3.0, 5.0])
    h2 = StreamHist.from_values([2.0, 4.0, 6.0])
    h1_before, h2_before = h1.copy(), h2.copy()
    merged = h1.merge(h2)
    merged.insert(100.0)
    assert h1 == h1_before
    assert h2 == h2_before


def test_merge_empty():
    merged = StreamHist(3).merge(StreamHist(5))
    assert merged.is_empty()
    assert merged.capacity == 5
    assert merged.min is None

    hist = StreamHist.from_values([1.0, 2.0])
    assert hist.merge(StreamHist(1)) == hist


def test_merge_conserves_mass():
    rng = random.Random(3)
    a = StreamHist(7)
    b = StreamHist(12)
    a.extend(rng.expovariate(1.0) for _ in range(333))
    b.extend(rng.gauss(5.0, 1.0) for _ in range(222))
    merged = a.merge(b)
    assert merged.total_count() == 555
    assert len(merged) <= 12


def test_from_values_default_capacity():
    hist = StreamHist.from_values([5.0, 1.0, 3.0, 1.0])
    assert hist.capacity == 3
    assert hist.bins == (Bin(1.0, 2), Bin(3.0), Bin(5.0))


def test_from_bins():
    hist = StreamHist.from_bins([(5.0, 1), (1.0, 2), (3.0, 4)], capacity=10, min=0.5, max=6.0)
    assert hist.bins == (Bin(1.0, 2), Bin(3.0, 4), Bin(5.0, 1))
    assert hist.capacity == 10
    assert hist.min == 0.5
    assert hist.max == 6.0

    hist = StreamHist.from_bins([(5.0, 1), (1.0, 2)])
    assert hist.capacity == 2
    assert hist.min == 1.0
    assert hist.max == 5.0


def test_from_bins_does_not_merge():
    with pytest.raises(InvalidCapacity):
        StreamHist.from_bins([(1.0, 1), (2.0, 1), (3.0, 1)], capacity=2)


def test_from_bins_rejects_bad_range():
    with pytest.raises(InvalidInput):
        StreamHist.from_bins([(1.0, 1), (2.0, 1)], min=1.5)


def test_iteration_is_restartable():
    hist = StreamHist.from_values([3.0, 1.0, 2.0])
    assert list(hist) == list(hist)
    assert [b.as_tuple() for b in hist] == [(1.0, 1), (2.0, 1), (3.0, 1)]
