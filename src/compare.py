"""Batch comparison of USL fits across several datasets."""

from __future__ import annotations

import argparse
import math
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from tqdm import tqdm

from usl import (
    Measurement,
    Model,
    USLError,
    build,
    configure_logging,
    describe_datasets,
    get_measurements,
    list_datasets,
    load_measurements,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fit and compare USL models for several datasets.")
    parser.add_argument("inputs", nargs="*", type=Path, help="CSV files with measurements.")
    parser.add_argument(
        "--dataset",
        action="append",
        default=[],
        choices=list(list_datasets()),
        help=f"Bundled dataset to include, repeatable ({describe_datasets()}).",
    )
    parser.add_argument("--n-col", type=int, default=1, help="Column of concurrency values.")
    parser.add_argument("--x-col", type=int, default=2, help="Column of throughput values.")
    parser.add_argument("--r-col", type=int, help="Column of latency values (replaces --x-col).")
    parser.add_argument("--skip-headers", action="store_true", help="Skip the first line of each CSV.")
    parser.add_argument(
        "--grid-points",
        type=int,
        default=50,
        help="Number of concurrency levels in the prediction grid.",
    )
    parser.add_argument(
        "--results-out",
        type=Path,
        default=Path("outputs/usl_predictions.csv"),
        help="CSV where the prediction grid of every dataset will be stored.",
    )
    parser.add_argument(
        "--summary-out",
        type=Path,
        default=Path("outputs/usl_summary.csv"),
        help="CSV with one row of coefficients per dataset.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=Path("reports"),
        help="Directory where comparison figures will be written.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostics written to stderr.",
    )
    parser.add_argument("--log-json", action="store_true", help="Write diagnostics as JSON lines.")
    return parser.parse_args()


def collect_sources(args: argparse.Namespace) -> List[Tuple[str, Sequence[Measurement]]]:
    sources: List[Tuple[str, Sequence[Measurement]]] = []
    for name in args.dataset:
        sources.append((name, get_measurements(name)))
    for path in args.inputs:
        measurements = load_measurements(
            path,
            n_col=args.n_col,
            x_col=args.x_col,
            r_col=args.r_col,
            skip_headers=args.skip_headers,
        )
        sources.append((path.stem, measurements))
    if not sources:
        raise SystemExit("Provide at least one CSV file or --dataset.")
    return sources


def summary_row(name: str, model: Model, measurements: Sequence[Measurement]) -> Dict[str, object]:
    row: Dict[str, object] = {"dataset": name, "measurements": len(measurements)}
    row.update(model.as_dict())
    row["constraint"] = model.constraint()
    row["limitless"] = model.limitless()
    if not model.has_peak():
        row["max_concurrency"] = math.nan
        row["max_throughput"] = math.nan
    else:
        row["max_concurrency"] = model.max_concurrency()
        row["max_throughput"] = model.max_throughput()
    return row


def prediction_grid(
    name: str, model: Model, measurements: Sequence[Measurement], points: int
) -> pd.DataFrame:
    upper = max(m.concurrency for m in measurements)
    if model.has_peak():
        upper = max(upper, 1.5 * model.max_concurrency())
    grid = np.linspace(1.0, upper, points)
    return pd.DataFrame(
        {
            "dataset": name,
            "concurrency": grid,
            "throughput": model.throughput_at_concurrency(grid),
            "latency": model.latency_at_concurrency(grid),
        }
    )


def fit_all(
    sources: Sequence[Tuple[str, Sequence[Measurement]]], grid_points: int
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    rows = []
    grids = []
    for name, measurements in tqdm(sources, desc="Fitting", unit="dataset"):
        try:
            model = build(measurements)
        except (USLError, ValueError) as exc:
            raise SystemExit(f"{name}: {exc}") from exc
        rows.append(summary_row(name, model, measurements))
        grids.append(prediction_grid(name, model, measurements, grid_points))
    return pd.DataFrame(rows), pd.concat(grids, ignore_index=True)


def plot_curves(
    predictions: pd.DataFrame,
    sources: Sequence[Tuple[str, Sequence[Measurement]]],
    reports_dir: Path,
) -> None:
    fig, ax = plt.subplots(figsize=(10, 5))
    for name, measurements in sources:
        curve = predictions[predictions["dataset"] == name]
        (line,) = ax.plot(curve["concurrency"], curve["throughput"], label=f"{name} (USL)")
        ax.scatter(
            [m.concurrency for m in measurements],
            [m.throughput for m in measurements],
            marker="x",
            color=line.get_color(),
        )
    ax.set_xlabel("Concurrency (N)")
    ax.set_ylabel("Throughput (X)")
    ax.set_title("Throughput vs. concurrency")
    ax.legend()
    fig.tight_layout()
    fig.savefig(reports_dir / "usl_throughput_compare.png", dpi=150)
    plt.close(fig)


def plot_coefficients(summary: pd.DataFrame, reports_dir: Path) -> None:
    names = summary["dataset"].tolist()
    x = np.arange(len(names))
    width = 0.35

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(x - width / 2, summary["sigma"], width=width, label="σ (contention)")
    ax.bar(x + width / 2, summary["kappa"], width=width, label="κ (coherency)")
    ax.set_xticks(list(x))
    ax.set_xticklabels(names)
    ax.set_ylabel("Coefficient")
    ax.set_title("USL coefficients per dataset")
    ax.legend()
    fig.tight_layout()
    fig.savefig(reports_dir / "usl_coefficients.png", dpi=150)
    plt.close(fig)


def main() -> None:
    args = parse_args()
    configure_logging(args.log_level, format_json=args.log_json)
    if args.grid_points < 2:
        raise SystemExit("--grid-points must be >= 2.")

    try:
        sources = collect_sources(args)
    except (FileNotFoundError, USLError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    summary_df, predictions_df = fit_all(sources, args.grid_points)

    args.results_out.parent.mkdir(parents=True, exist_ok=True)
    args.summary_out.parent.mkdir(parents=True, exist_ok=True)
    predictions_df.to_csv(args.results_out, index=False)
    summary_df.to_csv(args.summary_out, index=False)

    args.reports_dir.mkdir(parents=True, exist_ok=True)
    plot_curves(predictions_df, sources, args.reports_dir)
    plot_coefficients(summary_df, args.reports_dir)

    for row in summary_df.itertuples(index=False):
        print(
            f"  {row.dataset:<12} σ={row.sigma:.6f} κ={row.kappa:.6g} λ={row.lam:.4f} "
            f"{row.constraint}"
        )
    print(f"Predictions: {args.results_out.resolve()}")
    print(f"Summary: {args.summary_out.resolve()}")
    print(f"Charts saved to {args.reports_dir.resolve()}")


if __name__ == "__main__":
    main()
