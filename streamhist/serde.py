"""
Serialization of streaming histograms.

A histogram is stored as its ordered `(mean, count)` pairs plus the capacity
and the observed range. Loading never re-merges bins, so a round trip gives
back an equal histogram. Two on-disk forms are supported: JSON and a parquet
table (columns `mean` and `count`, the rest in the schema metadata).
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .hist import StreamHist
from .types import HistogramPayload
from .utils.exceptions import HistogramFormatError, StreamHistError

logger = logging.getLogger(__name__)

_METADATA_KEY = b"streamhist"


def to_pairs(hist: StreamHist) -> list[tuple[float, int]]:
    """Bins of `hist` as `(mean, count)` pairs, ascending by mean."""
    return [b.as_tuple() for b in hist]


def from_pairs(
    pairs: Iterable[tuple[float, int]],
    capacity: int | None = None,
    min: float | None = None,
    max: float | None = None,
) -> StreamHist:
    """Rebuild a histogram from `(mean, count)` pairs, see `StreamHist.from_bins`."""
    return StreamHist.from_bins(pairs, capacity=capacity, min=min, max=max)


def to_dict(hist: StreamHist) -> HistogramPayload:
    return {
        "means": [b.mean for b in hist],
        "counts": [b.count for b in hist],
        "capacity": hist.capacity,
        "min": hist.min,
        "max": hist.max,
    }


def from_dict(payload: dict[str, Any]) -> StreamHist:
    """
    Rebuild a histogram from a payload produced by `to_dict`.

    `capacity`, `min` and `max` are optional and default as in
    `StreamHist.from_bins`.

    Raises:
        HistogramFormatError: If the payload is malformed.
    """
    try:
        means = payload["means"]
        counts = payload["counts"]
    except (KeyError, TypeError) as e:
        raise HistogramFormatError(f"histogram payload needs 'means' and 'counts': {e}") from e
    if len(means) != len(counts):
        raise HistogramFormatError(
            f"'means' and 'counts' differ in length ({len(means)} != {len(counts)})"
        )
    try:
        if any(isinstance(c, bool) or not float(c).is_integer() for c in counts):
            raise HistogramFormatError(f"counts must be integers, got {counts}")
        return from_pairs(
            zip((float(m) for m in means), (int(c) for c in counts)),
            capacity=payload.get("capacity"),
            min=payload.get("min"),
            max=payload.get("max"),
        )
    except (StreamHistError, TypeError, ValueError) as e:
        raise HistogramFormatError(f"invalid histogram payload: {e}") from e


def to_json(hist: StreamHist) -> str:
    return json.dumps(to_dict(hist))


def from_json(text: str) -> StreamHist:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise HistogramFormatError(f"invalid JSON: {e}") from e
    return from_dict(payload)


def to_frame(hist: StreamHist) -> pd.DataFrame:
    """Bins of `hist` as a DataFrame with `mean` and `count` columns."""
    return pd.DataFrame(
        {
            "mean": pd.Series([b.mean for b in hist], dtype="float64"),
            "count": pd.Series([b.count for b in hist], dtype="int64"),
        }
    )


def write_json(hist: StreamHist, path: Path | str) -> None:
    Path(path).write_text(to_json(hist))
    logger.debug(f"Wrote {len(hist)} bins to {path}")


def read_json(path: Path | str) -> StreamHist:
    hist = from_json(Path(path).read_text())
    logger.debug(f"Read {len(hist)} bins from {path}")
    return hist


def write_parquet(hist: StreamHist, path: Path | str) -> None:
    """Write the bins as a parquet table; capacity and range go to the schema metadata."""
    table = pa.Table.from_pandas(to_frame(hist), preserve_index=False)
    meta = {"capacity": hist.capacity, "min": hist.min, "max": hist.max}
    schema_meta = dict(table.schema.metadata or {})
    schema_meta[_METADATA_KEY] = json.dumps(meta).encode()
    pq.write_table(table.replace_schema_metadata(schema_meta), path)
    logger.debug(f"Wrote {len(hist)} bins to {path}")


def read_parquet(path: Path | str) -> StreamHist:
    """
    Read a histogram written by `write_parquet`.

    Raises:
        HistogramFormatError: If the file is not a histogram table.
    """
    try:
        table = pq.read_table(path)
    except pa.ArrowInvalid as e:
        raise HistogramFormatError(f"{path} is not a parquet file: {e}") from e
    raw = (table.schema.metadata or {}).get(_METADATA_KEY)
    if raw is None:
        raise HistogramFormatError(f"{path} carries no histogram metadata")
    if not {"mean", "count"} <= set(table.column_names):
        raise HistogramFormatError(f"{path} needs 'mean' and 'count' columns")
    try:
        meta = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HistogramFormatError(f"{path} carries corrupt histogram metadata: {e}") from e
    if not isinstance(meta, dict):
        raise HistogramFormatError(f"{path} carries corrupt histogram metadata: {meta!r}")
    df = table.to_pandas()
    hist = from_dict(
        {
            "means": df["mean"].tolist(),
            "counts": df["count"].tolist(),
            "capacity": meta.get("capacity"),
            "min": meta.get("min"),
            "max": meta.get("max"),
        }
    )
    logger.debug(f"Read {len(hist)} bins from {path}")
    return hist


def is_json(path: Path | str) -> bool:
    return str(path).lower().endswith(".json")


def save(hist: StreamHist, path: Path | str) -> None:
    """Write `hist` as JSON when `path` ends with `.json`, as parquet otherwise."""
    if is_json(path):
        write_json(hist, path)
    else:
        write_parquet(hist, path)


def load(path: Path | str) -> StreamHist:
    """Counterpart of `save`."""
    if is_json(path):
        return read_json(path)
    return read_parquet(path)
