"""Tests for CSV ingestion and bundled datasets."""

import math

import pytest

from usl.datasets import describe_datasets, get_measurements, list_datasets
from usl.errors import MalformedInputError
from usl.loaders import load_measurements, measurements_frame
from usl.measurement import Measurement


def test_parsing_example_file(example_csv):
    want = [
        Measurement.from_concurrency_and_throughput(1, 65),
        Measurement.from_concurrency_and_throughput(18, 996),
        Measurement.from_concurrency_and_throughput(36, 1652),
        Measurement.from_concurrency_and_throughput(72, 1853),
        Measurement.from_concurrency_and_throughput(108, 1829),
        Measurement.from_concurrency_and_throughput(144, 1775),
        Measurement.from_concurrency_and_throughput(216, 1702),
    ]

    got = load_measurements(example_csv)

    assert len(got) == len(want)
    for g, w in zip(got, want):
        assert math.isclose(g.concurrency, w.concurrency, rel_tol=1e-3)
        assert math.isclose(g.throughput, w.throughput, rel_tol=1e-3)
        assert math.isclose(g.latency, w.latency, rel_tol=1e-3)


def test_headers_and_latency_column(tmp_path):
    path = tmp_path / "latency.csv"
    path.write_text("label,n,r\na,2,0.5\nb,4,0.8\n")

    got = load_measurements(path, n_col=2, r_col=3, skip_headers=True)

    assert got[0] == Measurement.from_concurrency_and_latency(2, 0.5)
    assert math.isclose(got[1].throughput, 5.0)


def test_bad_throughput_reports_line_and_column(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("1,10\n2,f\n")

    with pytest.raises(MalformedInputError) as excinfo:
        load_measurements(path)

    assert excinfo.value.line == 2
    assert excinfo.value.column == 2


def test_line_numbers_count_blank_lines(tmp_path):
    path = tmp_path / "gaps.csv"
    path.write_text("1,10\n\n2,f\n")

    with pytest.raises(MalformedInputError) as excinfo:
        load_measurements(path)

    assert excinfo.value.line == 3
    assert "line 3" in str(excinfo.value)


def test_line_numbers_with_header_and_blank_lines(tmp_path):
    path = tmp_path / "gaps.csv"
    path.write_text("label,n,x\n1,10\n\n\n2,0\n")

    with pytest.raises(MalformedInputError) as excinfo:
        load_measurements(path, n_col=1, x_col=2, skip_headers=True)

    assert excinfo.value.line == 5


def test_blank_lines_are_skipped(tmp_path):
    path = tmp_path / "gaps.csv"
    path.write_text("1,10\n\n2,19\n\n")

    got = load_measurements(path)

    assert [m.concurrency for m in got] == [1.0, 2.0]


def test_bad_concurrency(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("f,1\n")

    with pytest.raises(MalformedInputError) as excinfo:
        load_measurements(path)

    assert excinfo.value.column == 1


def test_missing_column(tmp_path):
    path = tmp_path / "short.csv"
    path.write_text("1\n2\n")

    with pytest.raises(MalformedInputError):
        load_measurements(path)


def test_zero_throughput_row(tmp_path):
    path = tmp_path / "zero.csv"
    path.write_text("1,10\n2,0\n")

    with pytest.raises(MalformedInputError) as excinfo:
        load_measurements(path)

    assert excinfo.value.line == 2


def test_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")

    with pytest.raises(MalformedInputError):
        load_measurements(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_measurements(tmp_path / "nope.csv")


def test_measurements_frame(example_measurements):
    df = measurements_frame(example_measurements)
    assert list(df.columns) == ["concurrency", "throughput", "latency"]
    assert len(df) == 7
    assert (df["concurrency"] - df["throughput"] * df["latency"]).abs().max() < 1e-9


def test_datasets_listing_and_lookup():
    assert list(list_datasets()) == ["example", "ramp"]
    assert len(get_measurements("RAMP")) == 32
    with pytest.raises(KeyError):
        get_measurements("missing")


def test_dataset_descriptions():
    text = describe_datasets()
    assert text.startswith("example: HTTP server load test")
    assert "ramp: Load ramp from 1 to 32 concurrent workers" in text
