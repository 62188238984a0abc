"""Simultaneous observations of concurrency, throughput and latency."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Dict, Union

Latency = Union[float, timedelta]

# Relative slack allowed between N and X*R for directly observed triples.
LITTLE_REL_TOL = 1e-6


def _seconds(value: Latency) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


@dataclass(frozen=True)
class Measurement:
    """
    One simultaneous sample of concurrency N, throughput X and latency R.

    The three values are tied by Little's Law, ``N = X * R``. Use the
    ``from_*`` constructors when only two of them were observed.
    """

    concurrency: float
    throughput: float
    latency: float

    def __post_init__(self) -> None:
        for name in ("concurrency", "throughput", "latency"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}.")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value!r}.")
        if not math.isclose(
            self.concurrency,
            self.throughput * self.latency,
            rel_tol=LITTLE_REL_TOL,
            abs_tol=1e-12,
        ):
            raise ValueError(
                "Measurement violates Little's law: "
                f"N={self.concurrency!r} but X*R={self.throughput * self.latency!r}."
            )

    @classmethod
    def from_concurrency_and_latency(cls, n: float, r: Latency) -> "Measurement":
        """Measurement of latency at a given concurrency; X = N / R."""
        r = _seconds(r)
        if r == 0:
            raise ValueError("Latency must be non-zero to derive throughput.")
        return cls(concurrency=float(n), throughput=float(n / r), latency=r)

    @classmethod
    def from_concurrency_and_throughput(cls, n: float, x: float) -> "Measurement":
        """Measurement of throughput at a given concurrency; R = N / X."""
        if x == 0:
            raise ValueError("Throughput must be non-zero to derive latency.")
        return cls(concurrency=float(n), throughput=float(x), latency=float(n / x))

    @classmethod
    def from_throughput_and_latency(cls, x: float, r: Latency) -> "Measurement":
        """Measurement of latency at a given throughput; N = X * R."""
        r = _seconds(r)
        return cls(concurrency=float(x * r), throughput=float(x), latency=r)

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def __str__(self) -> str:
        return f"(n={self.concurrency:g},x={self.throughput:g},r={self.latency:g})"
