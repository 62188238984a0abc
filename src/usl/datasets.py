"""Bundled sample datasets of (concurrency, throughput) load-test results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from .measurement import Measurement


@dataclass(frozen=True)
class Dataset:
    name: str
    description: str
    points: Tuple[Tuple[float, float], ...]


DATASETS: Dict[str, Dataset] = {
    "example": Dataset(
        name="example",
        description="HTTP server load test, seven concurrency levels",
        points=(
            (1, 65),
            (18, 996),
            (36, 1652),
            (72, 1853),
            (108, 1829),
            (144, 1775),
            (216, 1702),
        ),
    ),
    "ramp": Dataset(
        name="ramp",
        description="Load ramp from 1 to 32 concurrent workers",
        points=(
            (1, 955.16),
            (2, 1878.91),
            (3, 2688.01),
            (4, 3548.68),
            (5, 4315.54),
            (6, 5130.43),
            (7, 5931.37),
            (8, 6531.08),
            (9, 7219.8),
            (10, 7867.61),
            (11, 8278.71),
            (12, 8646.7),
            (13, 9047.84),
            (14, 9426.55),
            (15, 9645.37),
            (16, 9897.24),
            (17, 10097.6),
            (18, 10240.5),
            (19, 10532.39),
            (20, 10798.52),
            (21, 11151.43),
            (22, 11518.63),
            (23, 11806),
            (24, 12089.37),
            (25, 12075.41),
            (26, 12177.29),
            (27, 12211.41),
            (28, 12158.93),
            (29, 12155.27),
            (30, 12118.04),
            (31, 12140.4),
            (32, 12074.39),
        ),
    ),
}


def list_datasets() -> Iterable[str]:
    """Return available dataset identifiers."""
    return sorted(DATASETS.keys())


def describe_datasets() -> str:
    """One-line help text naming each dataset and what it holds."""
    return "; ".join(f"{name}: {DATASETS[name].description}" for name in list_datasets())


def get_measurements(name: str) -> Tuple[Measurement, ...]:
    """Return the measurements of a named dataset."""
    key = name.lower()
    if key not in DATASETS:
        raise KeyError(f"Dataset '{name}' is not defined. Available: {list(list_datasets())}")
    return tuple(
        Measurement.from_concurrency_and_throughput(n, x) for n, x in DATASETS[key].points
    )
