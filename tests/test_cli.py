"""Integration-style checks for the command line tools."""

import json
import math
import sys

import pandas as pd
import pytest

import compare
import fit_usl
import plots


def run(monkeypatch, module, *args):
    monkeypatch.setattr(sys, "argv", [module.__name__, *args])
    module.main()


def test_fit_usl_predictions(monkeypatch, capsys, example_csv):
    run(monkeypatch, fit_usl, "--in", str(example_csv), "1", "2", "3")
    out, err = capsys.readouterr()

    rows = [line.split(",") for line in out.strip().splitlines()]
    assert [float(n) for n, _ in rows] == [1.0, 2.0, 3.0]
    expected = [89.987785, 175.083978, 255.626353]
    for (_, x), want in zip(rows, expected):
        assert math.isclose(float(x), want, rel_tol=1e-3)

    assert err.startswith("USL parameters: σ=")
    assert "max concurrency: 96" in err
    assert "contention constrained" in err


def test_fit_usl_dataset_and_plot(monkeypatch, capsys, tmp_path):
    chart = tmp_path / "charts" / "ramp.png"
    run(monkeypatch, fit_usl, "--dataset", "ramp", "--plot", str(chart), "20")
    out, _ = capsys.readouterr()

    n, x = out.strip().split(",")
    assert math.isclose(float(x), 11063.63, rel_tol=1e-4)
    assert chart.exists()


def test_fit_usl_requires_input(monkeypatch):
    with pytest.raises(SystemExit):
        run(monkeypatch, fit_usl)


def test_fit_usl_insufficient_data(monkeypatch, tmp_path):
    path = tmp_path / "few.csv"
    path.write_text("1,10\n2,19\n3,27\n")

    with pytest.raises(SystemExit) as excinfo:
        run(monkeypatch, fit_usl, "--in", str(path))

    assert "at least 6" in str(excinfo.value)


def test_fit_usl_malformed_input(monkeypatch, tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("1,10\n2,oops\n")

    with pytest.raises(SystemExit) as excinfo:
        run(monkeypatch, fit_usl, "--in", str(path))

    assert "line 2" in str(excinfo.value)


def test_plots_writes_figures(monkeypatch, tmp_path):
    run(monkeypatch, plots, "--dataset", "example", "--reports-dir", str(tmp_path))

    assert (tmp_path / "usl_throughput.png").exists()
    assert (tmp_path / "usl_latency.png").exists()


def test_compare_summarizes_each_dataset(monkeypatch, tmp_path, example_csv):
    results = tmp_path / "predictions.csv"
    summary = tmp_path / "summary.csv"
    run(
        monkeypatch,
        compare,
        str(example_csv),
        "--dataset",
        "ramp",
        "--grid-points",
        "10",
        "--results-out",
        str(results),
        "--summary-out",
        str(summary),
        "--reports-dir",
        str(tmp_path / "reports"),
    )

    summary_df = pd.read_csv(summary)
    assert summary_df["dataset"].tolist() == ["ramp", "example"]
    assert summary_df["constraint"].tolist() == ["contention", "contention"]
    ramp = summary_df.iloc[0]
    assert math.isclose(ramp["sigma"], 0.02671591, rel_tol=1e-4)

    predictions_df = pd.read_csv(results)
    assert len(predictions_df) == 20
    assert (tmp_path / "reports" / "usl_throughput_compare.png").exists()
    assert (tmp_path / "reports" / "usl_coefficients.png").exists()


def test_fit_usl_superlinear_fit(monkeypatch, capsys, superlinear_csv):
    run(monkeypatch, fit_usl, "--in", str(superlinear_csv), "4")
    out, err = capsys.readouterr()

    n, x = out.strip().split(",")
    assert float(n) == 4.0
    assert math.isclose(float(x), 100 * 4 * (1 + 0.002 * 16), rel_tol=1e-2)
    assert "max concurrency: nan" in err


def test_plots_and_compare_superlinear_fit(monkeypatch, tmp_path, superlinear_csv):
    reports = tmp_path / "reports"
    summary = tmp_path / "summary.csv"
    run(monkeypatch, plots, "--in", str(superlinear_csv), "--reports-dir", str(reports))
    run(
        monkeypatch,
        compare,
        str(superlinear_csv),
        "--results-out",
        str(tmp_path / "predictions.csv"),
        "--summary-out",
        str(summary),
        "--reports-dir",
        str(reports),
    )

    assert (reports / "usl_throughput.png").exists()
    row = pd.read_csv(summary).iloc[0]
    assert math.isnan(row["max_concurrency"])
    assert not row["limitless"]


def test_fit_usl_help_describes_datasets(monkeypatch, capsys):
    with pytest.raises(SystemExit):
        run(monkeypatch, fit_usl, "--help")
    out, _ = capsys.readouterr()

    assert "Load ramp from 1 to 32" in " ".join(out.split())


def test_fit_usl_json_diagnostics(monkeypatch, capsys, example_csv):
    run(monkeypatch, fit_usl, "--in", str(example_csv), "--log-level", "INFO", "--log-json")
    _, err = capsys.readouterr()

    events = [json.loads(line) for line in err.splitlines() if line.startswith("{")]
    assert "fit.converged" in [e["event"] for e in events]
