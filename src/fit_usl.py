"""Command line interface to fit a USL model from load-test results.

Reads (concurrency, throughput) or (concurrency, latency) pairs from a CSV
file, fits the Universal Scalability Law and prints the model on stderr.
Every extra positional argument is a concurrency level whose predicted
throughput is written to stdout as ``N,X``:

    usl --in data.csv 128 256 512
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence, Tuple

from usl import (
    Measurement,
    Model,
    SolverConfig,
    USLError,
    build,
    configure_logging,
    describe_datasets,
    get_logger,
    get_measurements,
    list_datasets,
    load_measurements,
)
from plots import plot_throughput

logger = get_logger("usl.cli")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="usl",
        description="Fit a Universal Scalability Law model and predict throughput.",
    )
    parser.add_argument("--in", dest="input", type=Path, help="Input CSV file (required unless --dataset).")
    parser.add_argument(
        "--dataset",
        type=str,
        choices=list(list_datasets()),
        help=f"Bundled dataset shortcut used instead of --in ({describe_datasets()}).",
    )
    parser.add_argument("--n-col", type=int, default=1, help="Column index of concurrency values.")
    parser.add_argument("--x-col", type=int, default=2, help="Column index of throughput values.")
    parser.add_argument(
        "--r-col",
        type=int,
        help="Column index of latency values; throughput is then derived.",
    )
    parser.add_argument("--skip-headers", action="store_true", help="Skip the first line.")
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=SolverConfig.max_iterations,
        help="Iteration budget of the least-squares solver.",
    )
    parser.add_argument("--plot", type=Path, help="Write a throughput chart (PNG) to this path.")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostics written to stderr.",
    )
    parser.add_argument("--log-json", action="store_true", help="Write diagnostics as JSON lines.")
    parser.add_argument("points", nargs="*", type=float, help="Concurrency levels to predict.")
    return parser.parse_args()


def resolve_measurements(args: argparse.Namespace) -> Tuple[Measurement, ...]:
    """Return the measurements selected by --dataset or --in."""
    if args.dataset:
        return get_measurements(args.dataset)
    if args.input is None:
        raise SystemExit("No input file provided: use --in or --dataset.")
    try:
        return load_measurements(
            args.input,
            n_col=args.n_col,
            x_col=args.x_col,
            r_col=args.r_col,
            skip_headers=args.skip_headers,
        )
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc


def print_model(model: Model) -> None:
    print(model, file=sys.stderr)
    print(file=sys.stderr)


def print_predictions(model: Model, points: Sequence[float]) -> None:
    for n in points:
        print(f"{n:f},{model.throughput_at_concurrency(n):f}")


def main() -> None:
    args = parse_args()
    configure_logging(args.log_level, format_json=args.log_json)

    try:
        measurements = resolve_measurements(args)
        config = SolverConfig(max_iterations=args.max_iterations)
        model = build(measurements, config)
    except (USLError, ValueError) as exc:
        logger.debug("usl.failed", error=str(exc))
        raise SystemExit(f"usl: {exc}") from exc

    print_model(model)
    print_predictions(model, args.points)

    if args.plot is not None:
        args.plot.parent.mkdir(parents=True, exist_ok=True)
        plot_throughput(model, measurements, args.plot)
        logger.info("usl.plot_written", path=str(args.plot))


if __name__ == "__main__":
    main()
