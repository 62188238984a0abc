"""Utility to draw a fitted USL model against its measurements."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np

from usl import (
    Measurement,
    Model,
    build,
    configure_logging,
    describe_datasets,
    get_measurements,
    list_datasets,
    load_measurements,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate USL charts for one dataset.")
    parser.add_argument("--in", dest="input", type=Path, help="CSV file with measurements.")
    parser.add_argument(
        "--dataset",
        type=str,
        choices=list(list_datasets()),
        help=f"Bundled dataset to plot instead of --in ({describe_datasets()}).",
    )
    parser.add_argument("--n-col", type=int, default=1, help="Column of concurrency values.")
    parser.add_argument("--x-col", type=int, default=2, help="Column of throughput values.")
    parser.add_argument("--r-col", type=int, help="Column of latency values (replaces --x-col).")
    parser.add_argument("--skip-headers", action="store_true", help="Skip the first line.")
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=Path("reports"),
        help="Directory where PNG files will be saved.",
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


def concurrency_grid(model: Model, measurements: Sequence[Measurement], points: int = 200) -> np.ndarray:
    """Concurrency values covering the observations and, if finite, the peak."""
    upper = max(m.concurrency for m in measurements)
    if model.has_peak():
        upper = max(upper, 1.5 * model.max_concurrency())
    return np.linspace(0.0, upper, points)


def plot_throughput(
    model: Model, measurements: Sequence[Measurement], out: Path, title: str = "Throughput vs. concurrency"
) -> None:
    grid = concurrency_grid(model, measurements)
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(grid, model.throughput_at_concurrency(grid), label="Predicted")
    ax.scatter(
        [m.concurrency for m in measurements],
        [m.throughput for m in measurements],
        marker="x",
        color="black",
        label="Actual",
    )
    if model.has_peak():
        ax.scatter(
            [model.max_concurrency()],
            [model.max_throughput()],
            marker="o",
            s=60,
            color="#c44e52",
            zorder=5,
            label="Peak",
        )
    ax.set_xlabel("Concurrency (N)")
    ax.set_ylabel("Throughput (X)")
    ax.set_title(title)
    ax.legend(loc="lower right")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_latency(
    model: Model, measurements: Sequence[Measurement], out: Path, title: str = "Latency vs. concurrency"
) -> None:
    grid = concurrency_grid(model, measurements)
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(grid, model.latency_at_concurrency(grid), label="Predicted")
    ax.scatter(
        [m.concurrency for m in measurements],
        [m.latency for m in measurements],
        marker="x",
        color="black",
        label="Actual",
    )
    ax.set_xlabel("Concurrency (N)")
    ax.set_ylabel("Latency (R)")
    ax.set_title(title)
    ax.legend(loc="upper left")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def main() -> None:
    args = parse_args()
    configure_logging(args.log_level, format_json=args.log_json)
    if args.dataset:
        measurements = get_measurements(args.dataset)
    elif args.input is not None:
        measurements = load_measurements(
            args.input,
            n_col=args.n_col,
            x_col=args.x_col,
            r_col=args.r_col,
            skip_headers=args.skip_headers,
        )
    else:
        raise SystemExit("Either --in or --dataset must be provided.")

    model = build(measurements)
    args.reports_dir.mkdir(parents=True, exist_ok=True)
    plot_throughput(model, measurements, args.reports_dir / "usl_throughput.png")
    plot_latency(model, measurements, args.reports_dir / "usl_latency.png")

    print(f"Figures saved to {args.reports_dir.resolve()}")


if __name__ == "__main__":
    main()
