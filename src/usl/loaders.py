"""CSV ingestion of load-test results."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd

from .errors import MalformedInputError
from .measurement import Measurement


def _column(frame: pd.DataFrame, col: int, skip_headers: bool) -> pd.Series:
    """Return 1-based column ``col`` as floats, reporting the first bad cell."""
    offset = 2 if skip_headers else 1
    if col < 1 or col > frame.shape[1]:
        raise MalformedInputError(
            f"column {col} not present (file has {frame.shape[1]} columns)",
            column=col,
        )
    raw = frame.iloc[:, col - 1]
    values = pd.to_numeric(raw.str.strip(), errors="coerce")
    bad = values.isna()
    if bad.any():
        idx = int(bad.to_numpy().argmax())
        line = int(frame.index[idx]) + offset
        cell = raw.iloc[idx]
        if pd.isna(cell):
            message = f"invalid line at line {line}: missing column {col}"
        else:
            message = f"invalid value {cell!r} at line {line}, column {col}"
        raise MalformedInputError(message, line=line, column=col)
    return values.astype(float)


def load_measurements(
    path: Union[str, Path],
    n_col: int = 1,
    x_col: int = 2,
    r_col: Optional[int] = None,
    skip_headers: bool = False,
) -> Tuple[Measurement, ...]:
    """
    Read measurements from a CSV file.

    Columns are 1-based. Each row gives concurrency and throughput, or
    concurrency and latency when ``r_col`` is set.

    Raises:
        FileNotFoundError: when ``path`` does not exist.
        MalformedInputError: on empty input, missing columns or non-numeric cells.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Measurements file not found: {path}")
    try:
        frame = pd.read_csv(
            path,
            header=None,
            dtype=str,
            skiprows=1 if skip_headers else 0,
            skip_blank_lines=False,
        )
    except pd.errors.EmptyDataError as exc:
        raise MalformedInputError(f"no measurements in {path}") from exc
    except pd.errors.ParserError as exc:
        raise MalformedInputError(f"cannot parse {path}: {exc}") from exc
    # Blank lines are read as empty rows and dropped here so that the index
    # keeps each row's position in the file.
    frame = frame.dropna(how="all")
    if frame.empty:
        raise MalformedInputError(f"no measurements in {path}")

    concurrency = _column(frame, n_col, skip_headers)
    if r_col is not None:
        second = _column(frame, r_col, skip_headers)
        make = Measurement.from_concurrency_and_latency
    else:
        second = _column(frame, x_col, skip_headers)
        make = Measurement.from_concurrency_and_throughput

    offset = 2 if skip_headers else 1
    measurements = []
    for row, n, value in zip(frame.index, concurrency, second):
        try:
            measurements.append(make(n, value))
        except ValueError as exc:
            line = int(row) + offset
            raise MalformedInputError(f"{exc} at line {line}", line=line) from exc
    return tuple(measurements)


def measurements_frame(measurements: Iterable[Measurement]) -> pd.DataFrame:
    """Tabulate measurements with one row each."""
    rows: List[dict] = [m.as_dict() for m in measurements]
    return pd.DataFrame(rows, columns=["concurrency", "throughput", "latency"])
