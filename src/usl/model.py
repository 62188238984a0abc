"""Closed-form equations of the Universal Scalability Law."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, Union

import numpy as np

from .errors import UndefinedForLimitlessSystemError

FloatOrArray = Union[float, np.ndarray]


def _as_output(value: np.ndarray) -> FloatOrArray:
    """Unwrap 0-d results so scalar inputs give plain floats back."""
    if np.ndim(value) == 0:
        return float(value)
    return value


@dataclass(frozen=True)
class Model:
    """
    USL coefficients for one system.

    sigma is the contention coefficient, kappa the coherency coefficient and
    lam the ideal throughput of a single unit of concurrency.

    Every prediction accepts a scalar or a numpy array. Results follow IEEE
    arithmetic: a vanishing denominator gives ``inf`` and a negative radicand
    gives ``nan`` rather than an exception, so callers should check
    ``limitless()`` and the coefficient signs before inverting the curve.
    """

    sigma: float
    kappa: float
    lam: float

    def _denominator(self, n: np.ndarray) -> np.ndarray:
        return 1.0 + self.sigma * (n - 1.0) + self.kappa * n * (n - 1.0)

    def _radicand(self, r: np.ndarray) -> np.ndarray:
        return (
            self.sigma ** 2
            + self.kappa ** 2
            + 2.0 * self.kappa * (2.0 * self.lam * r + self.sigma - 2.0)
        )

    def throughput_at_concurrency(self, n: FloatOrArray) -> FloatOrArray:
        """Expected throughput X at concurrency N."""
        n = np.asarray(n, dtype=float)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            x = (self.lam * n) / self._denominator(n)
        return _as_output(x)

    def latency_at_concurrency(self, n: FloatOrArray) -> FloatOrArray:
        """Expected mean latency R at concurrency N."""
        n = np.asarray(n, dtype=float)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            r = self._denominator(n) / self.lam
        return _as_output(r)

    def max_concurrency(self) -> float:
        """
        Concurrency at which throughput peaks, rounded down.

        Returns nan when the peak is undefined because sigma > 1 or
        kappa < 0, as happens for fits of superlinear data.

        Raises:
            UndefinedForLimitlessSystemError: when kappa is zero.
        """
        if self.limitless():
            raise UndefinedForLimitlessSystemError(
                "model is limitless (kappa=0): throughput has no finite peak",
                context=self.as_dict(),
            )
        with np.errstate(invalid="ignore"):
            return float(np.floor(np.sqrt((1.0 - self.sigma) / self.kappa)))

    def has_peak(self) -> bool:
        """True when throughput has a finite maximum."""
        return not self.limitless() and math.isfinite(self.max_concurrency())

    def max_throughput(self) -> float:
        """Throughput at max_concurrency(); same restriction on kappa."""
        return self.throughput_at_concurrency(self.max_concurrency())

    def latency_at_throughput(self, x: FloatOrArray) -> FloatOrArray:
        """Expected mean latency R at throughput X."""
        x = np.asarray(x, dtype=float)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            r = (self.sigma - 1.0) / (self.sigma * x - self.lam)
        return _as_output(r)

    def throughput_at_latency(self, r: FloatOrArray) -> FloatOrArray:
        """Expected throughput X at mean latency R."""
        r = np.asarray(r, dtype=float)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            x = (np.sqrt(self._radicand(r)) - self.kappa + self.sigma) / (
                2.0 * self.kappa * r
            )
        return _as_output(x)

    def concurrency_at_latency(self, r: FloatOrArray) -> FloatOrArray:
        """Expected concurrency N at mean latency R."""
        r = np.asarray(r, dtype=float)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            n = (self.kappa - self.sigma + np.sqrt(self._radicand(r))) / (
                2.0 * self.kappa
            )
        return _as_output(n)

    def concurrency_at_throughput(self, x: FloatOrArray) -> FloatOrArray:
        """Expected concurrency N at throughput X (Little's law)."""
        x = np.asarray(x, dtype=float)
        with np.errstate(invalid="ignore", over="ignore"):
            n = np.asarray(self.latency_at_throughput(x)) * x
        return _as_output(n)

    def contention_constrained(self) -> bool:
        return self.sigma > self.kappa

    def coherency_constrained(self) -> bool:
        return self.sigma < self.kappa

    def limitless(self) -> bool:
        """True when the system scales without a throughput peak."""
        return self.kappa == 0

    def constraint(self) -> str:
        if self.contention_constrained():
            return "contention"
        if self.coherency_constrained():
            return "coherency"
        return "balanced"

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def __str__(self) -> str:
        lines = [f"USL parameters: σ={self.sigma!r}, κ={self.kappa!r}, λ={self.lam!r}"]
        if self.limitless():
            lines.append("\tlimitless (no finite peak)")
        else:
            lines.append(
                f"\tmax throughput: {self.max_throughput()!r}, "
                f"max concurrency: {self.max_concurrency():g}"
            )
        if self.constraint() != "balanced":
            lines.append(f"\t{self.constraint()} constrained")
        return "\n".join(lines)
