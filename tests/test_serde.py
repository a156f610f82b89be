import json
import random

import pyarrow.parquet as pq
import pytest

from streamhist import Bin, HistogramFormatError, InvalidInput, StreamHist
from streamhist import serde


@pytest.fixture
def hist():
    rng = random.Random(11)
    h = StreamHist(12)
    h.extend(rng.uniform(-5.0, 5.0) for _ in range(300))
    return h


def test_pairs_round_trip(hist):
    pairs = serde.to_pairs(hist)
    assert pairs == [(b.mean, b.count) for b in hist]
    restored = serde.from_pairs(pairs, capacity=hist.capacity, min=hist.min, max=hist.max)
    assert restored == hist


def test_json_round_trip(hist):
    assert serde.from_json(serde.to_json(hist)) == hist


def test_json_round_trip_empty():
    hist = StreamHist(5)
    assert serde.to_json(hist) == '{"means": [], "counts": [], "capacity": 5, "min": null, "max": null}'
    assert serde.from_json(serde.to_json(hist)) == hist


def test_from_json_defaults():
    hist = serde.from_json('{"means": [3, 1, 2], "counts": [2, 3, 4]}')
    assert hist.bins == (Bin(1.0, 3), Bin(2.0, 4), Bin(3.0, 2))
    assert hist.capacity == 3
    assert hist.min == 1.0
    assert hist.max == 3.0


def test_from_json_with_range():
    hist = serde.from_json('{"means": [3, 1, 2], "counts": [2, 3, 4], "min": 0, "max": 5}')
    assert hist.min == 0.0
    assert hist.max == 5.0


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        '{"means": [1.0]}',
        '{"means": [1.0, 2.0], "counts": [1]}',
        '{"means": [1.0], "counts": [0]}',
        '{"means": [1.0], "counts": [1.5]}',
        '{"means": [1.0, 2.0], "counts": [1, 1], "capacity": 1}',
        '{"means": [1.0], "counts": [1], "min": 2.0}',
    ],
)
def test_from_json_rejects_malformed(text):
    with pytest.raises(HistogramFormatError):
        serde.from_json(text)


def test_loading_never_merges(hist):
    payload = serde.to_dict(hist)
    payload["capacity"] = len(hist) + 20
    restored = serde.from_dict(payload)
    assert restored.bins == hist.bins
    assert restored.capacity == len(hist) + 20


@pytest.mark.parametrize("name", ["hist.json", "hist.JSON", "hist.parquet", "hist.bin"])
def test_save_load_round_trip(name, hist, tmp_path):
    path = tmp_path / name
    serde.save(hist, path)
    assert serde.load(path) == hist


def test_json_file_is_plain_json(hist, tmp_path):
    path = tmp_path / "hist.json"
    serde.write_json(hist, path)
    payload = json.loads(path.read_text())
    assert payload["counts"] == [b.count for b in hist]
    assert payload["capacity"] == 12


def test_parquet_round_trip_empty(tmp_path):
    path = tmp_path / "empty.parquet"
    serde.write_parquet(StreamHist(4), path)
    assert serde.read_parquet(path) == StreamHist(4)


def test_read_parquet_rejects_other_files(tmp_path):
    path = tmp_path / "garbage.parquet"
    path.write_bytes(b"definitely not parquet")
    with pytest.raises(HistogramFormatError):
        serde.read_parquet(path)


def test_to_frame(hist):
    df = serde.to_frame(hist)
    assert list(df.columns) == ["mean", "count"]
    assert df["count"].sum() == 300
    assert df["mean"].is_monotonic_increasing


def test_from_pairs_rejects_fractional_counts():
    with pytest.raises(InvalidInput):
        serde.from_pairs([(1.0, 1.5), (2.0, 2.9)])


def test_read_parquet_rejects_corrupt_metadata(hist, tmp_path):
    path = tmp_path / "corrupt.parquet"
    serde.write_parquet(hist, path)
    table = pq.read_table(path)
    meta = dict(table.schema.metadata)
    meta[b"streamhist"] = b"{not json"
    pq.write_table(table.replace_schema_metadata(meta), path)
    with pytest.raises(HistogramFormatError):
        serde.read_parquet(path)
