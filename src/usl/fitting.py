"""Estimate USL coefficients from a set of measurements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from operator import attrgetter
from typing import Iterable, Optional, Tuple

import numpy as np

from .errors import FitDidNotConvergeError, InsufficientDataError, NonConvergenceError
from .log import get_logger
from .measurement import Measurement
from .model import Model
from .solver import SolverConfig, levenberg_marquardt

logger = get_logger(__name__)

MIN_MEASUREMENTS = 6
INITIAL_SIGMA = 0.1
INITIAL_KAPPA = 0.01


class Fitter(ABC):
    """Strategy that turns observations into a Model."""

    @abstractmethod
    def fit(self, measurements: Iterable[Measurement]) -> Model:
        raise NotImplementedError


class LevenbergMarquardtFitter(Fitter):
    """Fit the USL curve to observed throughput by damped least squares."""

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config or SolverConfig()

    def fit(self, measurements: Iterable[Measurement]) -> Model:
        """
        Fit sigma, kappa and lambda to the measurements.

        Raises:
            InsufficientDataError: fewer than six measurements were given.
            ValueError: a measurement has non-positive concurrency.
            FitDidNotConvergeError: the solver gave up; the solver error is
                chained as the cause.
        """
        points = prepare(measurements)
        n = np.array([m.concurrency for m in points], dtype=float)
        x_obs = np.array([m.throughput for m in points], dtype=float)

        x0 = np.array([INITIAL_SIGMA, INITIAL_KAPPA, float(np.max(x_obs / n))])
        logger.debug("fit.start", measurements=len(points), initial=x0.tolist())

        def residuals(params: np.ndarray) -> np.ndarray:
            trial = Model(sigma=params[0], kappa=params[1], lam=params[2])
            return x_obs - trial.throughput_at_concurrency(n)

        try:
            result = levenberg_marquardt(residuals, x0, self.config)
        except NonConvergenceError as exc:
            logger.warning("fit.failed", reason=str(exc), iterations=exc.iterations)
            raise FitDidNotConvergeError(
                f"fit did not converge: {exc}",
                context={"measurements": len(points), **exc.context},
            ) from exc

        sigma, kappa, lam = (float(v) for v in result.x)
        model = Model(sigma=sigma, kappa=kappa, lam=lam)
        logger.info("fit.converged", **result.as_dict(), **model.as_dict())
        return model


def prepare(measurements: Iterable[Measurement]) -> Tuple[Measurement, ...]:
    """Validate measurements and return them as a new tuple sorted by concurrency."""
    points = tuple(measurements)
    if len(points) < MIN_MEASUREMENTS:
        raise InsufficientDataError(count=len(points), required=MIN_MEASUREMENTS)
    for m in points:
        if m.concurrency <= 0:
            raise ValueError(f"Cannot fit a measurement with concurrency {m.concurrency!r}.")
    return tuple(sorted(points, key=attrgetter("concurrency")))


def build(
    measurements: Iterable[Measurement], config: Optional[SolverConfig] = None
) -> Model:
    """Return the Model that best explains the measurements."""
    return LevenbergMarquardtFitter(config).fit(measurements)
